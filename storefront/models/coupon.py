import uuid
from datetime import datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from storefront.models.enums import DiscountType
from storefront.utils.dates import utc_now

class Coupon(SQLModel, table=True):
    """
    Discount coupon model.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, description="Unique identifier for the coupon")
    code: str = Field(unique=True, index=True, description="Code entered at checkout")
    description: str = Field(default="", description="Human readable description")
    discount_type: str = Field(default=DiscountType.PERCENTAGE, description="'percentage' or 'fixed'")
    discount_value: int = Field(description="Percentage or fixed amount off")
    min_order_amount: int = Field(default=0, description="Minimum order total to apply the coupon")
    max_discount: int | None = Field(default=None, description="Cap on the discount amount")
    valid_from: datetime = Field(default_factory=utc_now, sa_type=DateTime, description="Start of validity")
    valid_until: datetime = Field(sa_type=DateTime, description="End of validity")
    usage_limit: int = Field(default=1, description="Total number of redemptions allowed")
    is_single_use: bool = Field(default=True, description="Whether a user may redeem it once only")
    is_active: bool = Field(default=True, description="Whether the coupon can be redeemed")

class UserCoupon(SQLModel, table=True):
    """
    Assignment of a coupon to a user.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, description="Unique identifier for the assignment")
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True, description="ID of the coupon owner")
    coupon_id: uuid.UUID = Field(foreign_key="coupon.id", description="ID of the assigned coupon")
    is_used: bool = Field(default=False, description="Whether the user has redeemed the coupon")
