"""Checkout cart: the transient input every pricing decision is made against."""
from pydantic import BaseModel, Field, field_validator, model_validator

STUDENT_USER_TYPE = "Student"


class UserEligibility(BaseModel):
    """Eligibility flags only; authentication happens elsewhere."""

    user_type: str | None = None  # "Student" | "Regular" | ...
    has_approved_verification: bool = False

    @property
    def is_student(self) -> bool:
        return self.user_type == STUDENT_USER_TYPE


class Cart(BaseModel):
    category_id: str | None = None
    selected_package_ids: list[str] = Field(default_factory=list)
    duration_days: int | None = Field(default=None, ge=0)
    per_day_total: float = Field(default=0, ge=0)  # sum of selected package prices
    subtotal: float | None = Field(default=None, ge=0)  # None -> per_day_total * duration_days
    student_discount_percent: float = 0
    user: UserEligibility = Field(default_factory=UserEligibility)

    @field_validator("selected_package_ids", mode="before")
    @classmethod
    def clean_ids(cls, v: object) -> object:
        if v is None:
            return []
        if isinstance(v, list):
            return [s.strip() for s in v if isinstance(s, str) and s.strip()]
        return v

    @field_validator("student_discount_percent", mode="before")
    @classmethod
    def clamp_percent(cls, v: object) -> object:
        if isinstance(v, (int, float)):
            return min(100.0, max(0.0, float(v)))
        return v

    @model_validator(mode="after")
    def derive_subtotal(self) -> "Cart":
        if self.subtotal is None:
            days = self.duration_days or 0
            self.subtotal = self.per_day_total * days if days > 0 else 0.0
        return self

    @property
    def has_selection(self) -> bool:
        return len(self.selected_package_ids) > 0

    @property
    def is_student_eligible(self) -> bool:
        return self.user.is_student and self.user.has_approved_verification
