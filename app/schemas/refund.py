from datetime import date

from pydantic import BaseModel, Field

from app.models import RefundPolicy, SubscriptionSnapshot


class PolicyValidationResponse(BaseModel):
    """Accepted policy (normalised) plus non-blocking warnings such as uncovered days."""

    policy: RefundPolicy
    warnings: list[str] = Field(default_factory=list)


class ResolveRefundRequest(BaseModel):
    policy: RefundPolicy
    elapsed_days: float = Field(ge=0)
    paid_amount: float = Field(default=0, ge=0)


class CancellationQuoteRequest(BaseModel):
    subscription: SubscriptionSnapshot
    policies: list[RefundPolicy] = Field(default_factory=list)
    cancelled_on: date
