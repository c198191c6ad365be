"""
Fixture identity: a configured phone number that completes login and
registration with a fixed code, without any OTP being issued or sent.

It only exists when both TEST_USER_PHONE and TEST_USER_OTP are configured
outside production; otherwise `fixture_identity_from_settings` returns None
and no bypass is reachable.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from storefront.core.config import Settings
from storefront.models.enums import AddressType, UserRole
from storefront.models.user import User
from storefront.services.coupons import create_welcome_gift_coupon
from storefront.services.errors import Conflict
from storefront.utils.dates import utc_now
from storefront.utils.slug import generate_unique_slug

logger = logging.getLogger(__name__)

FIXTURE_USER_NAME = "Test User"
FIXTURE_USER_EMAIL = "test@example.com"

@dataclass(frozen=True)
class FixtureIdentity:
    phone: str
    fixed_code: str

    def matches(self, phone: str) -> bool:
        return phone == self.phone

def fixture_identity_from_settings(settings: Settings) -> FixtureIdentity | None:
    if settings.is_production:
        return None
    if not settings.TEST_USER_PHONE or not settings.TEST_USER_OTP:
        return None
    return FixtureIdentity(phone=settings.TEST_USER_PHONE, fixed_code=settings.TEST_USER_OTP)

def fixture_primary_address() -> Dict[str, str]:
    return {
        "street": "123 Test Street",
        "city": "Test City",
        "state": "Test State",
        "pincode": "123456",
        "full_address": "123 Test Street, Test City, Test State, 123456",
    }

def fixture_addresses(phone: str) -> List[Dict[str, Any]]:
    now = utc_now().isoformat()
    return [
        {
            "id": "test-address-1",
            "name": FIXTURE_USER_NAME,
            "phone": phone,
            "street": "123 Test Street",
            "city": "Test City",
            "state": "Test State",
            "pincode": "123456",
            "type": AddressType.HOME.value,
            "is_default": True,
            "created_at": now,
            "updated_at": now,
        },
        {
            "id": "test-address-2",
            "name": FIXTURE_USER_NAME,
            "phone": phone,
            "street": "456 Work Avenue",
            "city": "Work City",
            "state": "Work State",
            "pincode": "654321",
            "type": AddressType.WORK.value,
            "is_default": False,
            "created_at": now,
            "updated_at": now,
        },
    ]

async def provision_fixture_user(session: AsyncSession, fixture: FixtureIdentity, settings: Settings) -> User:
    """
    Create the verified fixture user with its addresses and welcome coupon.

    The fixture email is left empty when a real account already uses it.
    """
    result = await session.execute(select(User.id).where(User.email == FIXTURE_USER_EMAIL))
    email = None if result.first() else FIXTURE_USER_EMAIL

    result = await session.execute(select(User.slug))
    user = User(
        name=FIXTURE_USER_NAME,
        phone=fixture.phone,
        email=email,
        role=UserRole.CUSTOMER,
        slug=generate_unique_slug(FIXTURE_USER_NAME, result.scalars().all()),
        is_verified=True,
        is_active=True,
        address=fixture_primary_address(),
        additional_addresses=fixture_addresses(fixture.phone),
        gift_received=True,
    )
    session.add(user)
    try:
        await session.flush()
        await create_welcome_gift_coupon(session, user.id, settings)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("Test user could not be provisioned")
    await session.refresh(user)
    logger.info(f"Provisioned fixture user {user.id}")
    return user
