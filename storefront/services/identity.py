"""
Registration and login around the OTP ledger.

Both flows are two-step: `start_*` creates or looks up the account and sends
a code, `complete_*` checks the code and issues a session. A configured
fixture identity skips the ledger and is checked against its fixed code.
"""

import logging
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from storefront.core.config import Settings
from storefront.core.security import SessionIssuer
from storefront.models.enums import OtpPurpose, UserRole
from storefront.models.user import User
from storefront.schemas.address import PrimaryAddressIn
from storefront.schemas.auth import AuthSession, OtpDispatched, RegisterRequest, RegistrationStarted
from storefront.schemas.user import CompleteProfileRequest, UserProfile, UserPublic, UserUpdate
from storefront.services.coupons import create_welcome_gift_coupon
from storefront.services.errors import Conflict, Deactivated, InvalidOtp, NotFound, ValidationFailed
from storefront.services.fixtures import FixtureIdentity, provision_fixture_user
from storefront.services.otp import OTPLedger
from storefront.utils.dates import utc_now
from storefront.utils.slug import generate_unique_slug

logger = logging.getLogger(__name__)

def format_primary_address(address: PrimaryAddressIn) -> Dict[str, Any]:
    """Structured primary address plus the derived one-line form."""
    parts = [address.street, address.city, address.state, address.pincode]
    return {
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "pincode": address.pincode,
        "full_address": ", ".join(part for part in parts if part),
    }

class IdentityService:
    def __init__(
        self,
        session: AsyncSession,
        ledger: OTPLedger,
        issuer: SessionIssuer,
        settings: Settings,
        fixture: FixtureIdentity | None = None,
    ):
        self.session = session
        self.ledger = ledger
        self.issuer = issuer
        self.settings = settings
        self.fixture = fixture

    def is_fixture(self, phone: str) -> bool:
        return self.fixture is not None and self.fixture.matches(phone)

    async def get_user_by_phone(self, phone: str) -> User | None:
        result = await self.session.execute(select(User).where(User.phone == phone))
        return result.scalars().first()

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def _unique_slug(self, name: str) -> str:
        result = await self.session.execute(select(User.slug))
        return generate_unique_slug(name, result.scalars().all())

    # Registration

    async def start_registration(self, data: RegisterRequest) -> RegistrationStarted:
        if await self.get_user_by_phone(data.phone):
            raise Conflict("User with this phone number already exists")
        if data.email and await self.get_user_by_email(data.email):
            raise Conflict("User with this email already exists")

        slug = await self._unique_slug(data.name)
        if not slug:
            raise ValidationFailed(
                "Validation Error",
                errors=[{"field": "name", "message": "Name must contain letters or digits"}],
            )

        user = User(
            name=data.name.strip(),
            phone=data.phone,
            email=data.email,
            role=UserRole.CUSTOMER,
            slug=slug,
            is_verified=False,
            additional_addresses=[],
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same phone, email or slug
            await self.session.rollback()
            raise Conflict("User with this phone number or email already exists")
        await self.session.refresh(user)
        logger.info(f"Registered unverified user {user.id} ({user.slug})")

        started = RegistrationStarted(user_id=user.id, phone=user.phone, slug=user.slug)
        if self.is_fixture(data.phone):
            started.is_test_user = True
            return started

        await self.ledger.issue(data.phone, OtpPurpose.REGISTER)
        return started

    async def complete_registration(self, phone: str, code: str) -> AuthSession:
        await self._check_code(phone, code, OtpPurpose.REGISTER)

        user = await self.get_user_by_phone(phone)
        if not user:
            raise NotFound("User not found")

        user.is_verified = True
        await self._grant_welcome_gift(user)
        user.updated_at = utc_now()
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return self._session_for(user)

    # Login

    async def start_login(self, phone: str) -> OtpDispatched:
        user = await self.get_user_by_phone(phone)
        if not user:
            if self.is_fixture(phone):
                return OtpDispatched(phone=phone, is_test_user=True)
            raise NotFound("User not found. Please register first.")

        if not user.is_active:
            raise Deactivated("Account is deactivated. Please contact support.")

        if self.is_fixture(phone):
            return OtpDispatched(phone=user.phone, is_test_user=True)

        await self.ledger.issue(phone, OtpPurpose.LOGIN)
        return OtpDispatched(phone=user.phone)

    async def complete_login(self, phone: str, code: str) -> AuthSession:
        await self._check_code(phone, code, OtpPurpose.LOGIN)

        user = await self.get_user_by_phone(phone)
        if not user and self.is_fixture(phone):
            user = await provision_fixture_user(self.session, self.fixture, self.settings)
        if not user:
            raise NotFound("User not found")
        if not user.is_active:
            raise Deactivated("Account is deactivated. Please contact support.")

        return self._session_for(user)

    async def resend_otp(self, phone: str, purpose: OtpPurpose) -> OtpDispatched:
        if self.is_fixture(phone):
            return OtpDispatched(phone=phone, is_test_user=True)
        await self.ledger.resend(phone, purpose)
        return OtpDispatched(phone=phone)

    # Profile

    def get_profile(self, user: User) -> UserProfile:
        return UserProfile.model_validate(user)

    async def update_profile(self, user: User, patch: UserUpdate) -> UserProfile:
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)

        email = changes.get("email")
        if email and email != user.email:
            existing = await self.get_user_by_email(email)
            if existing and existing.id != user.id:
                raise Conflict("email already exists")

        if patch.address is not None:
            changes["address"] = format_primary_address(patch.address)

        for field, value in changes.items():
            setattr(user, field, value)
        return await self._save_profile(user)

    async def complete_profile(self, user: User, data: CompleteProfileRequest) -> UserProfile:
        if data.date_of_birth:
            user.date_of_birth = data.date_of_birth
        if data.address:
            user.address = format_primary_address(data.address)
        return await self._save_profile(user)

    async def _save_profile(self, user: User) -> UserProfile:
        user.updated_at = utc_now()
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return UserProfile.model_validate(user)

    # Helpers

    async def _check_code(self, phone: str, code: str, purpose: OtpPurpose) -> None:
        if self.is_fixture(phone):
            if code != self.fixture.fixed_code:
                raise InvalidOtp("Invalid OTP for test user")
            return
        await self.ledger.verify(phone, purpose, code)

    async def _grant_welcome_gift(self, user: User) -> None:
        if user.gift_received:
            return
        await create_welcome_gift_coupon(self.session, user.id, self.settings)
        user.gift_received = True

    def _session_for(self, user: User) -> AuthSession:
        return AuthSession(access_token=self.issuer.issue(user), user=UserPublic.model_validate(user))
