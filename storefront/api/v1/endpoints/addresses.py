from typing import Annotated, Any
from fastapi import APIRouter, Depends, status

from storefront.api import deps
from storefront.models.user import User
from storefront.schemas.address import AddressBookRead, AddressCreate, AddressUpdate
from storefront.schemas.response import APIResponse
from storefront.services.addresses import AddressBook

router = APIRouter()

Book = Annotated[AddressBook, Depends(deps.get_address_book)]
CurrentUser = Annotated[User, Depends(deps.get_current_user)]

@router.post("", response_model=APIResponse[AddressBookRead], status_code=status.HTTP_201_CREATED)
async def add_address(address_in: AddressCreate, current_user: CurrentUser, book: Book) -> Any:
    """
    Add an address to the current user's address book.

    The first address in an empty book becomes the default.
    """
    address = await book.add(current_user, address_in)
    return APIResponse(
        message="Address added successfully",
        data=AddressBookRead(address=address, additional_addresses=current_user.additional_addresses),
    )

@router.put("/{address_id}", response_model=APIResponse[AddressBookRead])
async def update_address(address_id: str, address_in: AddressUpdate, current_user: CurrentUser, book: Book) -> Any:
    address = await book.update(current_user, address_id, address_in)
    return APIResponse(
        message="Address updated successfully",
        data=AddressBookRead(address=address, additional_addresses=current_user.additional_addresses),
    )

@router.delete("/{address_id}", response_model=APIResponse[AddressBookRead])
async def delete_address(address_id: str, current_user: CurrentUser, book: Book) -> Any:
    """
    Remove an address. Removing the default promotes the first remaining one.
    """
    addresses = await book.remove(current_user, address_id)
    return APIResponse(message="Address deleted successfully", data=AddressBookRead(additional_addresses=addresses))

@router.put("/{address_id}/default", response_model=APIResponse[AddressBookRead])
async def set_default_address(address_id: str, current_user: CurrentUser, book: Book) -> Any:
    addresses = await book.set_default(current_user, address_id)
    return APIResponse(message="Default address updated successfully", data=AddressBookRead(additional_addresses=addresses))
