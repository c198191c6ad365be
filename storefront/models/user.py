import uuid
from datetime import date, datetime
from typing import Any
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, JSON, Column
from pydantic import EmailStr

from storefront.models.enums import UserRole
from storefront.utils.dates import utc_now

class UserBase(SQLModel):
    """
    Base User model containing shared attributes.
    """
    name: str = Field(description="User's display name")
    phone: str = Field(unique=True, index=True, description="User's phone number, unique across users")
    email: EmailStr | None = Field(default=None, unique=True, index=True, description="User's email address")
    role: str = Field(default=UserRole.CUSTOMER, description="User role ('customer' or 'admin')")
    slug: str = Field(unique=True, index=True, description="Unique, immutable slug derived from the name")
    is_verified: bool = Field(default=False, description="Whether the phone number has been verified")
    is_active: bool = Field(default=True, description="Whether the user account is active")
    date_of_birth: date | None = Field(default=None, description="User's date of birth")

class User(UserBase, table=True):
    """
    User database model.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, description="Unique identifier for the user")
    address: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON), description="Primary structured address")
    additional_addresses: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False), description="Ordered address book entries")
    gift_received: bool = Field(default=False, description="Whether the welcome gift has been granted")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, description="Timestamp when the user was created")
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, description="Timestamp of the last profile change")
