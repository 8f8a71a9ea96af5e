"""Duration discount: a promotional rate tied to one subscription day count."""
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DiscountType = Literal["percentage", "fixed"]
DiscountScope = Literal["all", "categories", "packages"]
MatchType = Literal["all", "any"]

# Older catalog records spell the fixed type differently
_FIXED_ALIASES = {"amount", "flat", "fixed"}


def normalize_discount_type(v: object) -> object:
    if isinstance(v, str):
        cleaned = v.strip().lower()
        if cleaned in _FIXED_ALIASES:
            return "fixed"
        if cleaned in ("percent", "percentage"):
            return "percentage"
    return v


class DurationDiscount(BaseModel):
    """Created by an operator; read-only to the pricing engine."""

    id: str
    label: str = ""
    description: str | None = None
    day_count: float  # normalised to a positive int when indexed
    discount_type: DiscountType
    discount_value: float = Field(ge=0)  # percentage: 0-100 for display, not enforced
    scope: DiscountScope = "all"
    category_ids: list[str] = Field(default_factory=list)
    package_ids: list[str] = Field(default_factory=list)
    match_type: MatchType = "all"

    @field_validator("discount_type", mode="before")
    @classmethod
    def legacy_type_names(cls, v: object) -> object:
        return normalize_discount_type(v)

    @field_validator("match_type", mode="before")
    @classmethod
    def default_match_type(cls, v: object) -> object:
        return v or "all"

    @field_validator("category_ids", "package_ids", mode="before")
    @classmethod
    def clean_ids(cls, v: object) -> object:
        if v is None:
            return []
        if isinstance(v, list):
            return [s.strip() for s in v if isinstance(s, str) and s.strip()]
        return v
