import uuid
from pydantic import BaseModel, EmailStr, Field

from storefront.models.enums import OtpPurpose
from storefront.schemas.user import UserPublic

PHONE_PATTERN = r"^\d{10}$"
OTP_PATTERN = r"^\d{6}$"

class RegisterRequest(BaseModel):
    """
    Schema for starting a phone registration.
    """
    name: str = Field(min_length=2, max_length=100)
    phone: str = Field(pattern=PHONE_PATTERN)
    email: EmailStr | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Asha Rao",
                "phone": "9000000001",
                "email": "asha@example.com"
            }
        }
    }

class LoginRequest(BaseModel):
    phone: str = Field(pattern=PHONE_PATTERN)

class VerifyOtpRequest(BaseModel):
    """
    Schema for submitting a received code.
    """
    phone: str = Field(pattern=PHONE_PATTERN)
    otp: str = Field(pattern=OTP_PATTERN)

    model_config = {
        "json_schema_extra": {
            "example": {
                "phone": "9000000001",
                "otp": "042917"
            }
        }
    }

class ResendOtpRequest(BaseModel):
    phone: str = Field(pattern=PHONE_PATTERN)
    purpose: OtpPurpose

class RegistrationStarted(BaseModel):
    user_id: uuid.UUID
    phone: str
    slug: str
    is_test_user: bool = False

class OtpDispatched(BaseModel):
    phone: str
    is_test_user: bool = False

class AuthSession(BaseModel):
    """
    Session token and the verified user it was issued for.
    """
    access_token: str
    token_type: str = "bearer"
    user: UserPublic
