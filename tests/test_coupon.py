"""Coupon evaluation: rejection order, amounts, messages and the applied-coupon recheck."""
from datetime import datetime, timedelta, timezone

import pytest

from app.services.coupon import (
    apply_coupon_code,
    evaluate_available_coupons,
    evaluate_coupon,
    find_coupon,
    reevaluate_applied_coupon,
)
from factories import NOW, make_cart, make_coupon, student_user


def _evaluate(coupon, cart=None, total=None, **kwargs):
    cart = cart or make_cart()
    return evaluate_coupon(
        coupon,
        cart,
        subtotal=cart.subtotal,
        total_before_coupon=cart.subtotal if total is None else total,
        now=NOW,
        **kwargs,
    )


def test_percentage_coupon_applies_to_discounted_total():
    result = _evaluate(make_coupon("SAVE10"), total=2700)
    assert result.valid
    assert result.discount_amount == pytest.approx(270)
    assert result.message == "10% off • saving ₹270"


def test_fixed_coupon_message():
    result = _evaluate(make_coupon("FLAT50", discount_type="fixed", discount_value=50))
    assert result.valid
    assert result.discount_amount == 50
    assert result.message == "₹50 off applied"


def test_fixed_coupon_capped_at_total():
    result = _evaluate(make_coupon("BIG", discount_type="fixed", discount_value=10000))
    assert result.valid
    assert result.discount_amount == 3000


def test_inactive_checked_first():
    coupon = make_coupon("OLD", active=False, valid_until=NOW - timedelta(days=1))
    result = _evaluate(coupon, cart=make_cart(selected_package_ids=[]))
    assert not result.valid
    assert result.reason == "inactive"
    assert result.detail == "This coupon is currently inactive."


def test_not_yet_valid():
    result = _evaluate(make_coupon("SOON", valid_from=datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)))
    assert result.reason == "not_yet_valid"
    assert result.detail == "Available starting 2 Mar 2026, 09:30."


def test_expired():
    result = _evaluate(make_coupon("GONE", valid_until=datetime(2026, 2, 28, 23, 0, tzinfo=timezone.utc)))
    assert result.reason == "expired"
    assert result.detail == "Expired on 28 Feb 2026, 23:00."


def test_validity_window_is_inclusive():
    assert _evaluate(make_coupon("EDGE", valid_from=NOW, valid_until=NOW)).valid


def test_naive_validity_is_utc():
    coupon = make_coupon("NAIVE", valid_until=datetime(2026, 3, 1, 11, 0))
    assert coupon.valid_until.tzinfo is not None
    assert _evaluate(coupon).reason == "expired"


def test_empty_cart_before_zero_total():
    result = _evaluate(make_coupon("SAVE10"), cart=make_cart(selected_package_ids=[]), total=0)
    assert result.reason == "empty_cart"
    assert result.detail == "Add at least one meal slot before applying a coupon."


def test_zero_total():
    result = _evaluate(make_coupon("SAVE10"), total=0)
    assert result.reason == "zero_total"


def test_minimum_order_uses_subtotal():
    coupon = make_coupon("MIN500", min_order_value=500)
    assert _evaluate(coupon, total=400).valid
    small = make_cart(per_day_total=10)
    result = _evaluate(coupon, cart=small)
    assert result.reason == "below_min_order"
    assert result.detail == "Minimum order of ₹500 required."


def test_minimum_order_large_amount_grouping():
    result = _evaluate(make_coupon("MIN1L", min_order_value=150000))
    assert result.detail == "Minimum order of ₹1,50,000 required."


def test_missing_packages_named():
    coupon = make_coupon("COMBO", required_package_ids=["pkg-lunch", "pkg-dinner"])
    result = _evaluate(coupon, package_names={"pkg-dinner": "Dinner"})
    assert result.reason == "missing_packages"
    assert result.missing_package_ids == ["pkg-dinner"]
    assert result.detail == "Add Dinner to your plan to unlock this coupon."


def test_missing_packages_without_names():
    result = _evaluate(make_coupon("COMBO", required_package_ids=["pkg-dinner"]))
    assert result.detail == "Add the required meal packages to unlock this coupon."


def test_student_coupon_requires_student():
    coupon = make_coupon("STUDENT", require_student_verification=True)
    assert _evaluate(coupon).reason == "student_only"
    unverified = make_cart(user=student_user(verified=False))
    assert _evaluate(coupon, cart=unverified).reason == "verification_required"
    assert _evaluate(coupon, cart=make_cart(user=student_user())).valid


def test_coupon_without_effect():
    result = _evaluate(make_coupon("TINY", discount_type="fixed", discount_value=0.4))
    assert not result.valid
    assert result.reason == "no_effect"
    assert result.detail == "This coupon does not affect your current total."


def test_code_lookup_is_case_insensitive():
    coupons = [make_coupon("welcome10")]
    assert coupons[0].code == "WELCOME10"
    assert find_coupon(coupons, " Welcome10 ").code == "WELCOME10"
    assert find_coupon(coupons, "") is None


def test_apply_empty_and_unknown_codes():
    cart = make_cart()
    kwargs = {"subtotal": 3000, "total_before_coupon": 3000, "now": NOW}
    assert apply_coupon_code("  ", [], cart, **kwargs).reason == "empty_code"
    result = apply_coupon_code("nope", [make_coupon("SAVE10")], cart, **kwargs)
    assert result.reason == "not_found"
    assert result.code == "NOPE"
    assert result.detail == "We couldn't find that coupon."


def test_apply_already_applied_code():
    result = apply_coupon_code(
        "save10",
        [make_coupon("SAVE10")],
        make_cart(),
        subtotal=3000,
        total_before_coupon=3000,
        now=NOW,
        applied_code="SAVE10",
    )
    assert result.valid
    assert result.message == "Coupon SAVE10 is already applied."


def test_recheck_keeps_valid_coupon():
    recheck = reevaluate_applied_coupon(
        make_coupon("SAVE10"), make_cart(), subtotal=3000, total_before_coupon=3000, now=NOW
    )
    assert recheck.keep
    assert recheck.removal_notice is None


def test_recheck_removes_coupon_that_stopped_qualifying():
    cart = make_cart(per_day_total=10)
    recheck = reevaluate_applied_coupon(
        make_coupon("MIN500", min_order_value=500),
        cart,
        subtotal=cart.subtotal,
        total_before_coupon=cart.subtotal,
        now=NOW,
    )
    assert not recheck.keep
    assert recheck.removal_notice == "Coupon MIN500 removed: Minimum order of ₹500 required."
    assert recheck.retained_code == "MIN500"


def test_recheck_without_coupon():
    assert reevaluate_applied_coupon(None, make_cart(), subtotal=0, total_before_coupon=0, now=NOW) is None


def test_available_coupons_sorted_by_code():
    coupons = [make_coupon("ZETA"), make_coupon("ALPHA", active=False), make_coupon("MID")]
    results = evaluate_available_coupons(
        coupons, make_cart(), subtotal=3000, total_before_coupon=3000, now=NOW
    )
    assert [r.code for r in results] == ["ALPHA", "MID", "ZETA"]
    assert [r.valid for r in results] == [False, True, True]


def test_huge_minimum_order_is_rejected_not_raised():
    result = _evaluate(make_coupon("HUGE", min_order_value=1e30))
    assert result.reason == "below_min_order"
    assert result.detail.startswith("Minimum order of ₹10,00,00")
    infinite = _evaluate(make_coupon("INF", min_order_value=float("inf")))
    assert infinite.detail == "Minimum order of ₹∞ required."
