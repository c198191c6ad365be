import logging
import secrets
import uuid
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import Settings
from storefront.models.coupon import Coupon, UserCoupon
from storefront.models.enums import DiscountType
from storefront.utils.dates import utc_now

logger = logging.getLogger(__name__)

async def create_welcome_gift_coupon(session: AsyncSession, user_id: uuid.UUID, settings: Settings) -> Coupon:
    """
    Create a single-use welcome discount and assign it to the user.

    The caller commits.
    """
    now = utc_now()
    coupon = Coupon(
        code=f"WELCOME{secrets.token_hex(3).upper()}",
        description="Welcome to our store! Enjoy this special discount on your first purchase.",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=settings.WELCOME_DISCOUNT_PERCENT,
        min_order_amount=0,
        max_discount=settings.WELCOME_MAX_DISCOUNT,
        valid_from=now,
        valid_until=now + timedelta(days=settings.WELCOME_VALID_DAYS),
        usage_limit=1,
        is_single_use=True,
        is_active=True,
    )
    session.add(coupon)
    await session.flush()
    session.add(UserCoupon(user_id=user_id, coupon_id=coupon.id))
    logger.info(f"Welcome coupon {coupon.code} granted to user {user_id}")
    return coupon
