"""Promotional coupon: code, percentage/fixed value, validity window and eligibility rules."""
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .discount import DiscountType, normalize_discount_type


class Coupon(BaseModel):
    """Coupon as handed over by the catalog layer. Codes compare case-insensitively."""

    code: str = Field(min_length=1, max_length=64)  # stored upper-case, e.g. WELCOME50
    description: str | None = None
    discount_type: DiscountType
    discount_value: float = Field(ge=0)  # percentage: 0-100, fixed: currency units
    min_order_value: float | None = Field(default=None, ge=0)
    required_package_ids: list[str] = Field(default_factory=list)
    require_student_verification: bool = False
    valid_from: datetime | None = None  # inclusive
    valid_until: datetime | None = None  # inclusive
    active: bool = True

    @field_validator("code", mode="before")
    @classmethod
    def upper_code(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("discount_type", mode="before")
    @classmethod
    def legacy_type_names(cls, v: object) -> object:
        return normalize_discount_type(v)

    @field_validator("required_package_ids", mode="before")
    @classmethod
    def clean_ids(cls, v: object) -> object:
        if v is None:
            return []
        if isinstance(v, list):
            return [s.strip() for s in v if isinstance(s, str) and s.strip()]
        return v

    @field_validator("valid_from", "valid_until")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        # Naive timestamps from the catalog are UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


CouponRejection = Literal[
    "empty_code",
    "not_found",
    "inactive",
    "not_yet_valid",
    "expired",
    "empty_cart",
    "zero_total",
    "below_min_order",
    "missing_packages",
    "student_only",
    "verification_required",
    "no_effect",
]


class CouponEvaluation(BaseModel):
    """valid=False -> reason (kind) and detail (user-facing text); valid=True -> message."""

    code: str | None = None
    valid: bool = False
    discount_amount: float = 0.0
    reason: CouponRejection | None = None
    detail: str | None = None
    message: str | None = None
    missing_package_ids: list[str] = Field(default_factory=list)


class CouponRecheck(BaseModel):
    """Outcome of re-evaluating an applied coupon after the cart changed."""

    keep: bool
    evaluation: CouponEvaluation
    removal_notice: str | None = None
    # Code left in the input box so the customer can retry it
    retained_code: str | None = None
