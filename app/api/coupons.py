from fastapi import APIRouter, Request

from app.api.deps import cart_with_defaults, request_time
from app.core.rate_limit import COUPON_LIMIT, limiter
from app.models import CouponEvaluation
from app.schemas import ApplyCouponRequest, AvailableCouponsRequest, AvailableCouponsResponse, CartContext
from app.services.coupon import apply_coupon_code, evaluate_available_coupons
from app.services.pricing import build_quote

router = APIRouter(prefix="/coupons", tags=["coupons"])


def _totals_before_coupon(body: CartContext):
    """(cart, subtotal, total after duration and student discounts)."""
    cart = cart_with_defaults(body.cart)
    quote = build_quote(
        cart,
        body.discounts,
        now=request_time(body.now),
        pinned_discount_id=body.pinned_discount_id,
    )
    return cart, quote.summary.subtotal, quote.summary.total


@router.post("/apply", response_model=CouponEvaluation)
@limiter.limit(COUPON_LIMIT)
def coupon_apply(request: Request, body: ApplyCouponRequest):
    cart, subtotal, total = _totals_before_coupon(body)
    return apply_coupon_code(
        body.code,
        body.coupons,
        cart,
        subtotal=subtotal,
        total_before_coupon=total,
        now=request_time(body.now),
        applied_code=body.applied_coupon_code,
        package_names=body.package_names or None,
    )


@router.post("/available", response_model=AvailableCouponsResponse)
def coupons_available(body: AvailableCouponsRequest):
    cart, subtotal, total = _totals_before_coupon(body)
    evaluations = evaluate_available_coupons(
        body.coupons,
        cart,
        subtotal=subtotal,
        total_before_coupon=total,
        now=request_time(body.now),
        package_names=body.package_names or None,
    )
    return AvailableCouponsResponse(coupons=evaluations)
