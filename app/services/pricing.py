"""
Checkout pricing. Discounts stack in a fixed order:
duration discount on the subtotal, student percent on what is left,
then the coupon on the student-discounted total.
"""
import logging
from collections.abc import Iterable
from datetime import datetime

from app.models import (
    AppliedDurationDiscount,
    Cart,
    Coupon,
    CouponDiscount,
    CouponEvaluation,
    CouponRecheck,
    DurationDiscount,
    PricingQuote,
    PricingSummary,
    StudentDiscount,
)
from app.services.coupon import evaluate_coupon, find_coupon, normalize_code, recheck_from_evaluation
from app.services.discount import build_discount_index, compute_discount_savings, select_duration_discount
from app.services.formatting import format_discount_summary, format_percent

logger = logging.getLogger(__name__)


def compose_pricing_summary(
    cart: Cart,
    duration_discount: DurationDiscount | None,
    coupon: Coupon | None,
    *,
    now: datetime,
    package_names: dict[str, str] | None = None,
) -> PricingSummary:
    subtotal = max(0.0, cart.subtotal or 0.0)

    duration_amount = min(subtotal, compute_discount_savings(duration_discount, subtotal)) if duration_discount else 0.0
    after_duration = max(0.0, subtotal - duration_amount)

    student_percent = cart.student_discount_percent if cart.is_student_eligible else 0.0
    student_amount = after_duration * student_percent / 100 if after_duration > 0 and student_percent > 0 else 0.0
    after_student = max(0.0, after_duration - student_amount)

    evaluation: CouponEvaluation | None = None
    coupon_amount = 0.0
    if coupon is not None:
        evaluation = evaluate_coupon(
            coupon,
            cart,
            subtotal=subtotal,
            total_before_coupon=after_student,
            now=now,
            package_names=package_names,
        )
        if evaluation.valid:
            coupon_amount = min(after_student, evaluation.discount_amount)

    total = max(0.0, after_student - coupon_amount)
    discount_amount = duration_amount + student_amount + coupon_amount

    summaries: list[str] = []
    applied_duration = None
    if duration_discount is not None and duration_amount > 0:
        applied_duration = AppliedDurationDiscount(
            id=duration_discount.id,
            label=duration_discount.label or "Plan savings",
            summary=format_discount_summary(duration_discount),
            amount=duration_amount,
        )
        summaries.append(applied_duration.summary)
    applied_student = None
    if student_amount > 0:
        applied_student = StudentDiscount(percent=student_percent, amount=student_amount)
        summaries.append(f"{format_percent(student_percent)} off")

    return PricingSummary(
        subtotal=subtotal,
        duration_discount=applied_duration,
        student_discount=applied_student,
        coupon_discount=CouponDiscount(code=coupon.code, amount=coupon_amount) if coupon_amount > 0 else None,
        discount_amount=discount_amount,
        discount_percent=discount_amount / subtotal * 100 if subtotal > 0 else 0.0,
        total=total,
        applied_summary=" + ".join(summaries) or None,
        coupon_evaluation=evaluation,
    )


def build_quote(
    cart: Cart,
    discounts: Iterable[DurationDiscount],
    coupons: Iterable[Coupon] = (),
    *,
    now: datetime,
    applied_coupon_code: str | None = None,
    pinned_discount_id: str | None = None,
    package_names: dict[str, str] | None = None,
) -> PricingQuote:
    """
    Full recomputation for the current cart: index, select, compose. There is no
    incremental path; a previously applied coupon is checked again from scratch.
    """
    index = build_discount_index(discounts, cart)
    selection = select_duration_discount(index, cart, pinned_discount_id)

    coupon = find_coupon(coupons, applied_coupon_code) if applied_coupon_code else None
    summary = compose_pricing_summary(cart, selection.discount, coupon, now=now, package_names=package_names)

    recheck: CouponRecheck | None = None
    if coupon is not None and summary.coupon_evaluation is not None:
        recheck = recheck_from_evaluation(coupon, summary.coupon_evaluation)
    elif applied_coupon_code and normalize_code(applied_coupon_code):
        # Code vanished from the catalog since it was applied
        code = normalize_code(applied_coupon_code)
        recheck = CouponRecheck(
            keep=False,
            evaluation=CouponEvaluation(code=code, reason="not_found", detail="We couldn't find that coupon."),
            removal_notice=f"Coupon {code} removed: We couldn't find that coupon.",
            retained_code=code,
        )
    if recheck is not None and not recheck.keep:
        logger.info("Applied coupon dropped: %s", recheck.evaluation.reason)

    return PricingQuote(summary=summary, selection=selection, coupon_recheck=recheck, day_counts=list(index))
