from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from app.models import Cart, Coupon, DurationDiscount, DurationOption


class CartContext(BaseModel):
    """Cart plus the catalog snapshot it is priced against (fetched by the caller)."""

    cart: Cart
    discounts: list[DurationDiscount] = Field(default_factory=list)
    coupons: list[Coupon] = Field(default_factory=list)
    pinned_discount_id: str | None = None
    applied_coupon_code: str | None = None
    package_names: dict[str, str] = Field(default_factory=dict)  # for "Add X to your plan" hints
    now: datetime | None = None  # defaults to the server clock

    @field_validator("now")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class QuoteRequest(CartContext):
    pass


class DurationOptionsRequest(BaseModel):
    category_id: str | None = None
    available_package_ids: list[str] = Field(default_factory=list)
    discounts: list[DurationDiscount] = Field(default_factory=list)
    plain_day_counts: list[float] = Field(default_factory=list)
    cart: Cart | None = None


class DurationOptionsResponse(BaseModel):
    options: list[DurationOption]


class PricingConfigResponse(BaseModel):
    currency: str
    currency_symbol: str
    student_discount_percent: float
    subscription_deposit_amount: int
