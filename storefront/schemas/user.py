import uuid
from datetime import date, datetime
from typing import List
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from storefront.schemas.address import AddressRead, PrimaryAddress, PrimaryAddressIn

class UserPublic(BaseModel):
    """
    Projection of a user returned alongside a session token.
    """
    id: uuid.UUID
    name: str
    phone: str
    slug: str
    role: str
    is_verified: bool
    address: PrimaryAddress | None = None
    additional_addresses: List[AddressRead] = []

    model_config = ConfigDict(from_attributes=True)

class UserProfile(UserPublic):
    email: EmailStr | None = None
    date_of_birth: date | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

class UserUpdate(BaseModel):
    """
    Profile fields a user may change. Phone, role and slug are not editable.
    """
    name: str | None = Field(default=None, min_length=2, max_length=100)
    email: EmailStr | None = None
    date_of_birth: date | None = None
    address: PrimaryAddressIn | None = None

class CompleteProfileRequest(BaseModel):
    date_of_birth: date | None = None
    address: PrimaryAddressIn | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "date_of_birth": "1995-04-12",
                "address": {
                    "street": "12 MG Road",
                    "city": "Bengaluru",
                    "state": "Karnataka",
                    "pincode": "560001"
                }
            }
        }
    }
