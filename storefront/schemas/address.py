from datetime import datetime
from typing import List
from pydantic import BaseModel, Field

from storefront.models.enums import AddressType

class AddressCreate(BaseModel):
    """
    Schema for adding an address to the address book.

    Name and phone fall back to the owner's when omitted.
    """
    name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, pattern=r"^\d{10}$")
    street: str = ""
    city: str = ""
    state: str = ""
    pincode: str = Field(default="", pattern=r"^(\d{6})?$")
    type: AddressType = AddressType.OTHER

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Asha Rao",
                "phone": "9000000001",
                "street": "12 MG Road",
                "city": "Bengaluru",
                "state": "Karnataka",
                "pincode": "560001",
                "type": "home"
            }
        }
    }

class AddressUpdate(BaseModel):
    """
    Partial update of an address book entry. The default flag is changed
    through the dedicated default endpoint only.
    """
    name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, pattern=r"^\d{10}$")
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = Field(default=None, pattern=r"^\d{6}$")
    type: AddressType | None = None

class AddressRead(BaseModel):
    id: str
    name: str
    phone: str
    street: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    type: AddressType = AddressType.OTHER
    is_default: bool = False
    created_at: datetime
    updated_at: datetime

class AddressBookRead(BaseModel):
    """
    Result of an address book mutation.
    """
    address: AddressRead | None = None
    additional_addresses: List[AddressRead] = []

class PrimaryAddressIn(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    pincode: str = Field(default="", pattern=r"^(\d{6})?$")

class PrimaryAddress(PrimaryAddressIn):
    full_address: str = ""
