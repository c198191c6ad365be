import uuid
from datetime import datetime
from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field

from storefront.utils.dates import utc_now

class Otp(SQLModel, table=True):
    """
    One-time code issued for a (phone, purpose) pair.

    Only a keyed hash of the code is stored. The (phone, purpose) pair is
    unique so that re-issuing replaces the previous code in a single upsert.
    """
    __table_args__ = (UniqueConstraint("phone", "purpose", name="uq_otp_phone_purpose"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, description="Unique identifier for the OTP record")
    phone: str = Field(index=True, description="Phone number the code was sent to")
    purpose: str = Field(description="Purpose of the code ('register', 'login', 'reset')")
    code_hash: str = Field(description="HMAC-SHA256 of the code")
    expires_at: datetime = Field(sa_type=DateTime, description="Time after which the code is rejected")
    is_used: bool = Field(default=False, description="Whether the code has been consumed")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, description="Timestamp when the code was issued")
