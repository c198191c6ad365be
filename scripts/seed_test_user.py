import asyncio
import logging

from sqlmodel import SQLModel, select

from storefront.core.config import settings
from storefront.db.session import AsyncSessionLocal, engine
from storefront.models import User, Otp, Coupon, UserCoupon  # noqa: F401
from storefront.services.fixtures import fixture_identity_from_settings, provision_fixture_user

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def seed_test_user():
    fixture = fixture_identity_from_settings(settings)
    if fixture is None:
        logger.error("TEST_USER_PHONE and TEST_USER_OTP must be set outside production to seed the test user.")
        return

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.phone == fixture.phone))
        existing = result.scalars().first()
        if existing:
            logger.info(f"Test user already exists: {existing.id} ({existing.phone})")
            return

        user = await provision_fixture_user(session, fixture, settings)
        logger.info("Test user created successfully!")
        logger.info(f"Phone: {user.phone}")
        logger.info(f"Addresses: {len(user.additional_addresses)}")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(seed_test_user())
