"""Pricing outputs: discount selection, duration options and the checkout summary."""
from pydantic import BaseModel, Field

from .coupon import CouponEvaluation, CouponRecheck
from .discount import DurationDiscount


class DiscountSelection(BaseModel):
    discount: DurationDiscount | None = None
    pinned: bool = False  # the customer's explicit choice was honoured
    pin_reverted: bool = False  # a pinned id no longer fits the cart


class DurationOption(BaseModel):
    key: str
    day_count: int
    discount: DurationDiscount | None = None
    applicable: bool = True  # discount passes the current selection test


class AppliedDurationDiscount(BaseModel):
    id: str
    label: str
    summary: str  # "10% off" / "₹500 off"
    amount: float


class StudentDiscount(BaseModel):
    percent: float
    amount: float


class CouponDiscount(BaseModel):
    code: str
    amount: float


class PricingSummary(BaseModel):
    """total = max(0, subtotal - all discount amounts)."""

    subtotal: float
    duration_discount: AppliedDurationDiscount | None = None
    student_discount: StudentDiscount | None = None
    coupon_discount: CouponDiscount | None = None
    discount_amount: float = 0.0
    discount_percent: float = 0.0  # display only
    total: float
    applied_summary: str | None = None  # "10% off + 6% off"
    coupon_evaluation: CouponEvaluation | None = None


class PricingQuote(BaseModel):
    summary: PricingSummary
    selection: DiscountSelection
    coupon_recheck: CouponRecheck | None = None
    day_counts: list[int] = Field(default_factory=list)
