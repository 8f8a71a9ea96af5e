"""Coupon validation and discount calculation against the current cart."""
import logging
from collections.abc import Iterable
from datetime import datetime

from app.models import Cart, Coupon, CouponEvaluation, CouponRecheck
from app.models.coupon import CouponRejection
from app.services.formatting import format_amount, format_percent, format_timestamp, round_half_up

logger = logging.getLogger(__name__)


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def find_coupon(coupons: Iterable[Coupon], code: str | None) -> Coupon | None:
    """Case-insensitive lookup; blank code -> None."""
    wanted = normalize_code(code)
    if not wanted:
        return None
    return next((c for c in coupons if normalize_code(c.code) == wanted), None)


def _reject(
    coupon: Coupon | None,
    reason: CouponRejection,
    detail: str,
    missing: list[str] | None = None,
) -> CouponEvaluation:
    logger.debug("Coupon %s rejected: %s", coupon.code if coupon else None, reason)
    return CouponEvaluation(
        code=coupon.code if coupon else None,
        valid=False,
        reason=reason,
        detail=detail,
        missing_package_ids=missing or [],
    )


def evaluate_coupon(
    coupon: Coupon,
    cart: Cart,
    *,
    subtotal: float,
    total_before_coupon: float,
    now: datetime,
    package_names: dict[str, str] | None = None,
) -> CouponEvaluation:
    """
    Checks the coupon in a fixed order and stops at the first failure:
    active, valid_from, valid_until, non-empty cart, positive total, minimum order
    (against the undiscounted subtotal), required packages, student eligibility.
    The discount is taken from total_before_coupon, the already discounted total.
    """
    if not coupon.active:
        return _reject(coupon, "inactive", "This coupon is currently inactive.")
    if coupon.valid_from and now < coupon.valid_from:
        return _reject(coupon, "not_yet_valid", f"Available starting {format_timestamp(coupon.valid_from)}.")
    if coupon.valid_until and now > coupon.valid_until:
        return _reject(coupon, "expired", f"Expired on {format_timestamp(coupon.valid_until)}.")
    if not cart.has_selection:
        return _reject(coupon, "empty_cart", "Add at least one meal slot before applying a coupon.")

    total = max(0.0, total_before_coupon)
    if total <= 0:
        return _reject(coupon, "zero_total", "Your plan total is already zero.")

    if coupon.min_order_value is not None and subtotal < coupon.min_order_value:
        return _reject(
            coupon,
            "below_min_order",
            f"Minimum order of {format_amount(round_half_up(coupon.min_order_value))} required.",
        )

    if coupon.required_package_ids:
        selected = set(cart.selected_package_ids)
        missing = [pid for pid in coupon.required_package_ids if pid not in selected]
        if missing:
            names = [package_names[pid] for pid in missing if package_names and pid in package_names]
            detail = (
                f"Add {', '.join(names)} to your plan to unlock this coupon."
                if names
                else "Add the required meal packages to unlock this coupon."
            )
            return _reject(coupon, "missing_packages", detail, missing)

    if coupon.require_student_verification:
        if not cart.user.is_student:
            return _reject(coupon, "student_only", "This coupon is reserved for verified student accounts.")
        if not cart.user.has_approved_verification:
            return _reject(coupon, "verification_required", "Complete your student verification to use this coupon.")

    if coupon.discount_type == "percentage":
        amount = total * coupon.discount_value / 100
    else:
        amount = coupon.discount_value
    amount = max(0.0, min(total, amount))

    rounded = round_half_up(amount)
    if rounded <= 0:
        return _reject(coupon, "no_effect", "This coupon does not affect your current total.")

    if coupon.discount_type == "percentage":
        message = f"{format_percent(coupon.discount_value)} off • saving {format_amount(rounded)}"
    else:
        message = f"{format_amount(rounded)} off applied"
    return CouponEvaluation(code=coupon.code, valid=True, discount_amount=amount, message=message)


def apply_coupon_code(
    code: str | None,
    coupons: Iterable[Coupon],
    cart: Cart,
    *,
    subtotal: float,
    total_before_coupon: float,
    now: datetime,
    applied_code: str | None = None,
    package_names: dict[str, str] | None = None,
) -> CouponEvaluation:
    """Customer typed a code: look it up, then evaluate it like any applied coupon."""
    wanted = normalize_code(code)
    if not wanted:
        return _reject(None, "empty_code", "Enter a coupon code to apply.")
    coupon = find_coupon(coupons, wanted)
    if coupon is None:
        return CouponEvaluation(code=wanted, reason="not_found", detail="We couldn't find that coupon.")
    evaluation = evaluate_coupon(
        coupon,
        cart,
        subtotal=subtotal,
        total_before_coupon=total_before_coupon,
        now=now,
        package_names=package_names,
    )
    if evaluation.valid and normalize_code(applied_code) == coupon.code:
        return evaluation.model_copy(update={"message": f"Coupon {coupon.code} is already applied."})
    return evaluation


def reevaluate_applied_coupon(
    applied: Coupon | None,
    cart: Cart,
    *,
    subtotal: float,
    total_before_coupon: float,
    now: datetime,
    package_names: dict[str, str] | None = None,
) -> CouponRecheck | None:
    """
    Called after every cart change. An applied coupon that stopped qualifying is dropped
    with its reason; the code is handed back so the customer can retry it later.
    """
    if applied is None:
        return None
    evaluation = evaluate_coupon(
        applied,
        cart,
        subtotal=subtotal,
        total_before_coupon=total_before_coupon,
        now=now,
        package_names=package_names,
    )
    return recheck_from_evaluation(applied, evaluation)


def recheck_from_evaluation(applied: Coupon, evaluation: CouponEvaluation) -> CouponRecheck:
    if evaluation.valid:
        return CouponRecheck(keep=True, evaluation=evaluation)
    return CouponRecheck(
        keep=False,
        evaluation=evaluation,
        removal_notice=f"Coupon {applied.code} removed: {evaluation.detail}",
        retained_code=applied.code,
    )


def evaluate_available_coupons(
    coupons: Iterable[Coupon],
    cart: Cart,
    *,
    subtotal: float,
    total_before_coupon: float,
    now: datetime,
    package_names: dict[str, str] | None = None,
) -> list[CouponEvaluation]:
    """Every catalog coupon with its verdict for this cart, ordered by code."""
    return [
        evaluate_coupon(
            coupon,
            cart,
            subtotal=subtotal,
            total_before_coupon=total_before_coupon,
            now=now,
            package_names=package_names,
        )
        for coupon in sorted(coupons, key=lambda c: c.code)
    ]
