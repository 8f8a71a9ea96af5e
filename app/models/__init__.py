from .cart import Cart, UserEligibility
from .coupon import Coupon, CouponEvaluation, CouponRecheck, CouponRejection
from .coverage import (
    Coordinate,
    CoverageGroup,
    CoveragePolygon,
    CoverageStatus,
    CoverageVerdict,
    DeliveryLocation,
)
from .discount import DurationDiscount
from .pricing import (
    AppliedDurationDiscount,
    CouponDiscount,
    DiscountSelection,
    DurationOption,
    PricingQuote,
    PricingSummary,
    StudentDiscount,
)
from .refund import (
    CancellationRefund,
    RefundPolicy,
    RefundResolution,
    RefundTier,
    SubscriptionSnapshot,
    TierViolation,
    WalletCredit,
)

__all__ = [
    "AppliedDurationDiscount",
    "CancellationRefund",
    "Cart",
    "Coordinate",
    "Coupon",
    "CouponDiscount",
    "CouponEvaluation",
    "CouponRecheck",
    "CouponRejection",
    "CoverageGroup",
    "CoveragePolygon",
    "CoverageStatus",
    "CoverageVerdict",
    "DeliveryLocation",
    "DiscountSelection",
    "DurationDiscount",
    "DurationOption",
    "PricingQuote",
    "PricingSummary",
    "RefundPolicy",
    "RefundResolution",
    "RefundTier",
    "StudentDiscount",
    "SubscriptionSnapshot",
    "TierViolation",
    "UserEligibility",
    "WalletCredit",
]
