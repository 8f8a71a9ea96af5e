"""Refund policy: tiered refund percentages by elapsed subscription day."""
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

RefundSource = Literal["coins"]


class RefundTier(BaseModel):
    """
    Day band [start_day, end_day] (both inclusive) -> refund_percent.
    end_day None = open ended; only the last tier may be open ended.
    Fields are lax so authoring validation can report every problem at once.
    """

    id: str | None = None
    label: str | None = None
    start_day: float | None = None
    end_day: float | None = None
    refund_percent: float | None = None  # 0-100
    refund_source: RefundSource = "coins"
    notes: str | None = None


class RefundPolicy(BaseModel):
    id: str | None = None
    name: str = ""
    description: str | None = None
    # 0 = fallback policy for any subscription length
    subscription_length_days: float = 0
    subscription_day_discount_id: str | None = None
    tiers: list[RefundTier] = Field(default_factory=list)
    applies_to_category_ids: list[str] = Field(default_factory=list)
    applies_to_package_ids: list[str] = Field(default_factory=list)
    active: bool = True


ViolationKind = Literal[
    "missing_name",
    "invalid_length",
    "no_tiers",
    "invalid_start_day",
    "invalid_end_day",
    "invalid_refund_percent",
    "open_ended_before_next",
    "overlap",
    "short_last_tier",
]


class TierViolation(BaseModel):
    kind: ViolationKind
    tier_index: int | None = None  # 1-based, as shown to the operator
    message: str


class RefundResolution(BaseModel):
    """resolved=False -> reason; a gap in a stored schedule is a data problem, not 0%."""

    resolved: bool
    elapsed_days: int
    tier: RefundTier | None = None
    refund_percent: float = 0.0
    refund_source: RefundSource = "coins"
    paid_amount: float | None = None
    amount: float | None = None
    reason: Literal["no_applicable_tier"] | None = None


class SubscriptionSnapshot(BaseModel):
    """What a cancellation quote needs from a stored subscription."""

    user_id: str | None = None
    category_id: str | None = None
    package_ids: list[str] = Field(default_factory=list)
    duration_days: int = Field(default=0, ge=0)
    start_date: date | None = None
    total_payable: float = Field(default=0, ge=0)


class WalletCredit(BaseModel):
    user_id: str
    amount: float
    source: RefundSource = "coins"


class CancellationRefund(BaseModel):
    consumed_days: int = 0
    remaining_days: int = 0
    remaining_amount: float = 0.0
    percent_applied: float = 0.0
    amount: float = 0.0
    source: RefundSource = "coins"
    currency: str = "INR"
    policy_id: str | None = None
    tier_label: str | None = None
    notes: str | None = None
    reason: Literal["no_policy", "no_applicable_tier"] | None = None
    wallet_credit: WalletCredit | None = None
