from storefront.models.user import User
from storefront.models.otp import Otp
from storefront.models.coupon import Coupon, UserCoupon

__all__ = ["User", "Otp", "Coupon", "UserCoupon"]
