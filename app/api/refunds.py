from fastapi import APIRouter

from app.core.config import settings
from app.models import CancellationRefund, RefundPolicy, RefundResolution
from app.schemas import CancellationQuoteRequest, PolicyValidationResponse, ResolveRefundRequest
from app.services.refund import (
    compute_refund,
    lint_tier_schedule,
    quote_cancellation_refund,
    validate_refund_policy,
)

router = APIRouter(prefix="/refunds", tags=["refunds"])


@router.post("/policies/validate", response_model=PolicyValidationResponse)
def policy_validate(body: RefundPolicy):
    """Operator saves a policy: 422 with every violation, or the normalised policy."""
    policy = validate_refund_policy(body)
    return PolicyValidationResponse(policy=policy, warnings=lint_tier_schedule(policy.tiers))


@router.post("/resolve", response_model=RefundResolution)
def refund_resolve(body: ResolveRefundRequest):
    return compute_refund(body.policy, body.elapsed_days, body.paid_amount)


@router.post("/cancellation-quote", response_model=CancellationRefund)
def cancellation_quote(body: CancellationQuoteRequest):
    return quote_cancellation_refund(body.subscription, body.policies, body.cancelled_on, currency=settings.currency)
