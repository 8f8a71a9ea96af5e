from pydantic import BaseModel

from app.models import CouponEvaluation

from .pricing import CartContext


class ApplyCouponRequest(CartContext):
    """Customer typed a code at checkout; applied_coupon_code is the one already in use, if any."""

    code: str


class AvailableCouponsRequest(CartContext):
    pass


class AvailableCouponsResponse(BaseModel):
    coupons: list[CouponEvaluation]
