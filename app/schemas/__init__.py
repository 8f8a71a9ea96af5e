from .coupon import ApplyCouponRequest, AvailableCouponsRequest, AvailableCouponsResponse
from .coverage import CoverageCheckRequest, CoverageGroupRequest, CoverageGroupResponse, LocationQuery
from .pricing import (
    CartContext,
    DurationOptionsRequest,
    DurationOptionsResponse,
    PricingConfigResponse,
    QuoteRequest,
)
from .refund import CancellationQuoteRequest, PolicyValidationResponse, ResolveRefundRequest

__all__ = [
    "ApplyCouponRequest",
    "AvailableCouponsRequest",
    "AvailableCouponsResponse",
    "CancellationQuoteRequest",
    "CartContext",
    "CoverageCheckRequest",
    "CoverageGroupRequest",
    "CoverageGroupResponse",
    "DurationOptionsRequest",
    "DurationOptionsResponse",
    "LocationQuery",
    "PolicyValidationResponse",
    "PricingConfigResponse",
    "QuoteRequest",
    "ResolveRefundRequest",
]
