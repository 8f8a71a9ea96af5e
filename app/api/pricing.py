from fastapi import APIRouter

from app.api.deps import cart_with_defaults, request_time
from app.models import PricingQuote
from app.schemas import DurationOptionsRequest, DurationOptionsResponse, QuoteRequest
from app.services.discount import build_duration_options
from app.services.pricing import build_quote

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.post("/quote", response_model=PricingQuote)
def pricing_quote(body: QuoteRequest):
    """Recomputes the whole checkout summary; call again after every cart change."""
    return build_quote(
        cart_with_defaults(body.cart),
        body.discounts,
        body.coupons,
        now=request_time(body.now),
        applied_coupon_code=body.applied_coupon_code,
        pinned_discount_id=body.pinned_discount_id,
        package_names=body.package_names or None,
    )


@router.post("/duration-options", response_model=DurationOptionsResponse)
def duration_options(body: DurationOptionsRequest):
    cart = cart_with_defaults(body.cart) if body.cart is not None else None
    options = build_duration_options(
        body.discounts,
        body.category_id,
        body.available_package_ids,
        cart,
        plain_day_counts=body.plain_day_counts,
    )
    return DurationOptionsResponse(options=options)
