"""
Refund tiers: authoring-time schedule validation and redemption-time resolution.

A schedule is a list of inclusive day bands. Authoring rejects overlaps, an open-ended
tier that is not last, and a last tier that stops short of the subscription length.
Interior gaps are only linted: a stored schedule with a gap resolves to
no_applicable_tier for the days inside it.
"""
import logging
import math
from collections.abc import Iterable
from datetime import date, datetime

from app.models import (
    CancellationRefund,
    RefundPolicy,
    RefundResolution,
    RefundTier,
    SubscriptionSnapshot,
    TierViolation,
    WalletCredit,
)
from app.services.formatting import round_currency

logger = logging.getLogger(__name__)


class TierScheduleInvalid(ValueError):
    """Raised when a refund policy cannot be saved; carries every violation found."""

    def __init__(self, violations: list[TierViolation]):
        self.violations = violations
        super().__init__("; ".join(v.message for v in violations) or "Invalid refund tier schedule.")


def _finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _day(value: float, limit: int | None) -> int:
    day = max(0, math.floor(value))
    return min(day, limit) if limit is not None else day


def validate_tier_schedule(
    tiers: Iterable[RefundTier],
    subscription_length_days: int | None,
) -> list[RefundTier]:
    """
    Returns the tiers normalised (whole days clamped to [0, length], percent clamped
    to [0, 100]) and sorted by start day, or raises TierScheduleInvalid.
    """
    violations: list[TierViolation] = []
    limit = subscription_length_days if subscription_length_days and subscription_length_days > 0 else None
    normalised: list[RefundTier] = []

    for index, tier in enumerate(tiers, start=1):
        start = tier.start_day
        if not _finite(start) or start < 0:
            violations.append(TierViolation(
                kind="invalid_start_day",
                tier_index=index,
                message=f"Tier {index}: Start day must be a non-negative number.",
            ))
        end = tier.end_day
        if end is not None and (not _finite(end) or (_finite(start) and end < start)):
            violations.append(TierViolation(
                kind="invalid_end_day",
                tier_index=index,
                message=f"Tier {index}: End day must be a number greater than or equal to start day.",
            ))
        percent = tier.refund_percent
        if not _finite(percent) or not 0 <= percent <= 100:
            violations.append(TierViolation(
                kind="invalid_refund_percent",
                tier_index=index,
                message=f"Tier {index}: Refund percent must be between 0 and 100.",
            ))

        start_day = _day(start, limit) if _finite(start) else 0
        end_day = None
        if _finite(end):
            end_day = max(_day(end, limit), start_day)
        normalised.append(tier.model_copy(update={
            "label": (tier.label or "").strip() or None,
            "start_day": start_day,
            "end_day": end_day,
            "refund_percent": min(100.0, max(0.0, percent)) if _finite(percent) else 0.0,
        }))

    ordered = sorted(normalised, key=lambda t: t.start_day)
    for i, (current, following) in enumerate(zip(ordered, ordered[1:]), start=1):
        if current.end_day is None:
            violations.append(TierViolation(
                kind="open_ended_before_next",
                tier_index=i,
                message=f"Tier {i}: End day must be set before the next tier starts.",
            ))
        elif current.end_day >= following.start_day:
            violations.append(TierViolation(
                kind="overlap",
                tier_index=i,
                message=f"Tiers {i} and {i + 1} overlap. Adjust start/end days.",
            ))

    if ordered and limit is not None:
        last = ordered[-1]
        if last.end_day is not None and last.end_day < limit:
            violations.append(TierViolation(
                kind="short_last_tier",
                tier_index=len(ordered),
                message=f"Tier {len(ordered)}: The last tier must end on day {limit} or be open ended.",
            ))

    if violations:
        raise TierScheduleInvalid(violations)
    return ordered


def validate_refund_policy(draft: RefundPolicy) -> RefundPolicy:
    """Authoring check for a whole policy. Returns the normalised policy ready to store."""
    violations: list[TierViolation] = []
    name = (draft.name or "").strip()
    if not name:
        violations.append(TierViolation(kind="missing_name", message="Policy name is required."))

    length: int | None = None
    if _finite(draft.subscription_length_days) and draft.subscription_length_days > 0:
        length = max(1, math.floor(draft.subscription_length_days))
    else:
        violations.append(TierViolation(
            kind="invalid_length",
            message="Subscription length must be a positive number of days.",
        ))

    tiers: list[RefundTier] = []
    if not draft.tiers:
        violations.append(TierViolation(kind="no_tiers", message="Add at least one refund tier."))
    else:
        try:
            tiers = validate_tier_schedule(draft.tiers, length)
        except TierScheduleInvalid as exc:
            violations.extend(exc.violations)

    if violations:
        raise TierScheduleInvalid(violations)
    return draft.model_copy(update={
        "name": name,
        "subscription_length_days": length,
        "tiers": tiers,
    })


def lint_tier_schedule(tiers: Iterable[RefundTier]) -> list[str]:
    """Non-blocking warnings for the authoring form: uncovered day ranges."""
    ordered = sorted((t for t in tiers if _finite(t.start_day)), key=lambda t: t.start_day)
    warnings: list[str] = []
    if ordered and ordered[0].start_day > 0:
        warnings.append(f"Days 0-{int(ordered[0].start_day) - 1} are not covered by any tier.")
    for current, following in zip(ordered, ordered[1:]):
        if current.end_day is None:
            continue
        if following.start_day > current.end_day + 1:
            warnings.append(
                f"Days {int(current.end_day) + 1}-{int(following.start_day) - 1} are not covered by any tier."
            )
    return warnings


def resolve_refund_tier(policy: RefundPolicy, elapsed_days: float) -> RefundResolution:
    """Tier whose inclusive band holds elapsed_days; an open-ended tier reaches to infinity."""
    day = max(0, math.floor(elapsed_days)) if _finite(elapsed_days) else 0
    ordered = sorted((t for t in policy.tiers if _finite(t.start_day)), key=lambda t: t.start_day)
    for tier in ordered:
        end = tier.end_day if tier.end_day is not None else math.inf
        if tier.start_day <= day <= end:
            return RefundResolution(
                resolved=True,
                elapsed_days=day,
                tier=tier,
                refund_percent=min(100.0, max(0.0, tier.refund_percent or 0.0)),
                refund_source=tier.refund_source,
            )
    logger.warning("Refund policy %s has no tier for day %d", policy.id or policy.name, day)
    return RefundResolution(resolved=False, elapsed_days=day, reason="no_applicable_tier")


def compute_refund(policy: RefundPolicy, elapsed_days: float, paid_amount: float) -> RefundResolution:
    resolution = resolve_refund_tier(policy, elapsed_days)
    paid = max(0.0, paid_amount)
    if not resolution.resolved:
        return resolution.model_copy(update={"paid_amount": paid})
    amount = round_currency(paid * resolution.refund_percent / 100) if resolution.refund_percent > 0 else 0.0
    return resolution.model_copy(update={"paid_amount": paid, "amount": amount})


def find_applicable_policy(
    policies: Iterable[RefundPolicy],
    duration_days: int,
    category_id: str | None,
    package_ids: Iterable[str],
) -> RefundPolicy | None:
    """
    Best active policy for a subscription. Exact length scores 4, a length-0 fallback 1;
    category and package targeting add 1 each. The first policy with the top score wins.
    """
    packages = set(package_ids)
    duration = max(0, duration_days or 0)
    best: RefundPolicy | None = None
    best_score = -1
    for policy in policies:
        if not policy.active:
            continue
        length_matches = policy.subscription_length_days == duration
        is_fallback = policy.subscription_length_days == 0
        if not length_matches and not is_fallback:
            continue
        if policy.applies_to_category_ids and category_id not in policy.applies_to_category_ids:
            continue
        if policy.applies_to_package_ids and not packages.intersection(policy.applies_to_package_ids):
            continue
        score = 4 if length_matches else 1
        if policy.applies_to_category_ids:
            score += 1
        if policy.applies_to_package_ids:
            score += 1
        if score > best_score:
            best, best_score = policy, score
    return best


def consumed_days(start: date | None, cancelled_on: date, duration_days: int) -> int:
    """Days used, counting the start day and the cancellation day; 0 before the start."""
    if start is None:
        return 0
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(cancelled_on, datetime):
        cancelled_on = cancelled_on.date()
    if cancelled_on < start:
        return 0
    return min(duration_days, (cancelled_on - start).days + 1)


def quote_cancellation_refund(
    subscription: SubscriptionSnapshot,
    policies: Iterable[RefundPolicy],
    cancelled_on: date,
    currency: str = "INR",
) -> CancellationRefund:
    """
    Refund for cancelling on a given day: the unused share of what was paid, scaled by the
    tier that matches the days already consumed. Paid out as wallet coins.
    """
    duration = subscription.duration_days
    if duration <= 0:
        return CancellationRefund(currency=currency)

    used = consumed_days(subscription.start_date, cancelled_on, duration)
    remaining_days = max(0, duration - used)
    remaining_amount = (
        round_currency(subscription.total_payable / duration * remaining_days) if remaining_days > 0 else 0.0
    )
    base = CancellationRefund(
        consumed_days=used,
        remaining_days=remaining_days,
        remaining_amount=remaining_amount,
        currency=currency,
    )

    policy = find_applicable_policy(policies, duration, subscription.category_id, subscription.package_ids)
    if policy is None:
        return base.model_copy(update={"reason": "no_policy"})

    resolution = compute_refund(policy, used, remaining_amount)
    if not resolution.resolved:
        return base.model_copy(update={
            "policy_id": policy.id,
            "tier_label": policy.name,
            "reason": "no_applicable_tier",
        })

    tier = resolution.tier
    amount = resolution.amount or 0.0
    wallet_credit = None
    if amount > 0 and resolution.refund_source == "coins" and subscription.user_id:
        wallet_credit = WalletCredit(user_id=subscription.user_id, amount=amount, source=resolution.refund_source)
    return base.model_copy(update={
        "percent_applied": resolution.refund_percent,
        "amount": amount,
        "source": resolution.refund_source,
        "policy_id": policy.id,
        "tier_label": tier.label or policy.name or None,
        "notes": tier.notes or policy.description,
        "wallet_credit": wallet_credit,
    })
