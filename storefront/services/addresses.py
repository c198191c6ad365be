"""
Address book kept inside the User row.

The collection is an ordered list of entries keyed by their `id`. Every
mutation is a pure function returning a new list, and the default flag is
only ever written by `_assign_default`, which marks exactly one entry.
"""

import logging
import uuid
from typing import Any, Dict, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.user import User
from storefront.schemas.address import AddressCreate, AddressUpdate
from storefront.services.errors import NotFound
from storefront.utils.dates import utc_now

logger = logging.getLogger(__name__)

Addresses = List[Dict[str, Any]]

def _find(addresses: Addresses, address_id: str) -> int:
    for index, entry in enumerate(addresses):
        if str(entry.get("id")) == str(address_id):
            return index
    return -1

def _current_default_id(addresses: Addresses) -> str | None:
    return next((entry["id"] for entry in addresses if entry.get("is_default")), None)

def _assign_default(addresses: Addresses, default_id: str | None) -> Addresses:
    return [{**entry, "is_default": str(entry["id"]) == str(default_id)} for entry in addresses]

def add_address(addresses: Addresses, entry: Dict[str, Any]) -> Addresses:
    """The new entry becomes default only when the collection was empty."""
    if not addresses:
        return _assign_default([entry], entry["id"])
    default_id = _current_default_id(addresses) or addresses[0]["id"]
    return _assign_default([*addresses, entry], default_id)

def update_address(addresses: Addresses, address_id: str, patch: Dict[str, Any]) -> Tuple[Addresses, Dict[str, Any]]:
    index = _find(addresses, address_id)
    if index == -1:
        raise NotFound("Address not found")
    patch = {key: value for key, value in patch.items() if key not in ("id", "is_default", "created_at")}
    updated = {**addresses[index], **patch, "updated_at": utc_now().isoformat()}
    return [*addresses[:index], updated, *addresses[index + 1:]], updated

def remove_address(addresses: Addresses, address_id: str) -> Addresses:
    index = _find(addresses, address_id)
    if index == -1:
        raise NotFound("Address not found")
    was_default = bool(addresses[index].get("is_default"))
    remaining = [*addresses[:index], *addresses[index + 1:]]
    if not remaining:
        return []
    default_id = remaining[0]["id"] if was_default else _current_default_id(remaining) or remaining[0]["id"]
    return _assign_default(remaining, default_id)

def set_default_address(addresses: Addresses, address_id: str) -> Addresses:
    """Total reassignment of the default flag. Unknown ids leave the list as is."""
    if _find(addresses, address_id) == -1:
        return list(addresses)
    return _assign_default(addresses, address_id)

class AddressBook:
    """Persists address book changes for an authenticated user."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, user: User, fields: AddressCreate) -> Dict[str, Any]:
        now = utc_now().isoformat()
        entry = {
            "id": str(uuid.uuid4()),
            "name": fields.name or user.name,
            "phone": fields.phone or user.phone,
            "street": fields.street,
            "city": fields.city,
            "state": fields.state,
            "pincode": fields.pincode,
            "type": fields.type.value,
            "is_default": False,
            "created_at": now,
            "updated_at": now,
        }
        addresses = add_address(user.additional_addresses or [], entry)
        await self._save(user, addresses)
        logger.info(f"Address {entry['id']} added for user {user.id}")
        return addresses[_find(addresses, entry["id"])]

    async def update(self, user: User, address_id: str, patch: AddressUpdate) -> Dict[str, Any]:
        changes = patch.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        addresses, updated = update_address(user.additional_addresses or [], address_id, changes)
        await self._save(user, addresses)
        return updated

    async def remove(self, user: User, address_id: str) -> Addresses:
        addresses = remove_address(user.additional_addresses or [], address_id)
        await self._save(user, addresses)
        logger.info(f"Address {address_id} removed for user {user.id}")
        return addresses

    async def set_default(self, user: User, address_id: str) -> Addresses:
        addresses = set_default_address(user.additional_addresses or [], address_id)
        await self._save(user, addresses)
        return addresses

    async def _save(self, user: User, addresses: Addresses) -> None:
        user.additional_addresses = addresses
        user.updated_at = utc_now()
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
