"""Checkout pricing: discount stacking order, clamping and the full quote."""
import pytest

from app.models import Cart
from app.services.formatting import format_amount, format_percent, round_half_up
from app.services.pricing import build_quote, compose_pricing_summary
from factories import NOW, make_cart, make_coupon, make_discount, student_user


def test_cart_derives_subtotal():
    assert make_cart().subtotal == 3000
    assert make_cart(subtotal=2500).subtotal == 2500
    assert make_cart(duration_days=None).subtotal == 0


def test_cart_clamps_student_percent():
    assert Cart(student_discount_percent=150).student_discount_percent == 100
    assert Cart(student_discount_percent=-5).student_discount_percent == 0


@pytest.mark.parametrize(
    "value, digits, expected",
    [(2.5, 0, 3), (3.5, 0, 4), (-2.5, 0, -3), (1.005, 2, 1.01), (0.49, 0, 0)],
)
def test_round_half_up(value, digits, expected):
    assert round_half_up(value, digits) == expected


def test_currency_formatting():
    assert format_amount(500) == "₹500"
    assert format_amount(1250.5) == "₹1,250.50"
    assert format_amount(150000) == "₹1,50,000"
    assert format_amount(12345678) == "₹1,23,45,678"
    assert format_percent(6) == "6%"
    assert format_percent(12.5) == "12.5%"


def test_discounts_stack_in_order():
    cart = make_cart(student_discount_percent=6, user=student_user())
    summary = compose_pricing_summary(cart, make_discount("monthly"), make_coupon("SAVE10"), now=NOW)
    assert summary.subtotal == 3000
    assert summary.duration_discount.amount == pytest.approx(300)
    assert summary.student_discount.amount == pytest.approx(162)
    assert summary.coupon_discount.amount == pytest.approx(253.8)
    assert summary.total == pytest.approx(2284.2)
    assert summary.discount_amount == pytest.approx(715.8)
    assert summary.discount_percent == pytest.approx(23.86)
    assert summary.applied_summary == "10% off + 6% off"
    assert summary.coupon_evaluation.valid


def test_student_discount_needs_verified_student():
    cart = make_cart(student_discount_percent=6, user=student_user(verified=False))
    summary = compose_pricing_summary(cart, None, None, now=NOW)
    assert summary.student_discount is None
    assert summary.total == 3000
    assert summary.applied_summary is None


def test_total_never_negative():
    cart = make_cart(student_discount_percent=6, user=student_user())
    huge = make_discount("huge", discount_type="fixed", discount_value=5000)
    summary = compose_pricing_summary(cart, huge, make_coupon("SAVE10"), now=NOW)
    assert summary.duration_discount.amount == 3000
    assert summary.student_discount is None
    assert summary.coupon_discount is None
    assert summary.coupon_evaluation.reason == "zero_total"
    assert summary.total == 0
    assert summary.discount_amount == 3000


def test_duration_label_fallback():
    discount = make_discount("flat", label="", discount_type="fixed", discount_value=500)
    summary = compose_pricing_summary(make_cart(), discount, None, now=NOW)
    assert summary.duration_discount.label == "Plan savings"
    assert summary.duration_discount.summary == "₹500 off"
    assert summary.total == 2500


def test_empty_cart_prices_to_zero():
    summary = compose_pricing_summary(make_cart(duration_days=None), make_discount("monthly"), None, now=NOW)
    assert summary.total == 0
    assert summary.discount_percent == 0
    assert summary.duration_discount is None


def test_quote_selects_and_prices():
    discounts = [make_discount("small", discount_value=5), make_discount("big", discount_value=15)]
    quote = build_quote(make_cart(), discounts, now=NOW)
    assert quote.selection.discount.id == "big"
    assert quote.summary.total == pytest.approx(2550)
    assert quote.day_counts == [30]
    assert quote.coupon_recheck is None


def test_quote_keeps_valid_applied_coupon():
    quote = build_quote(make_cart(), [], [make_coupon("FLAT50", discount_type="fixed", discount_value=50)],
                        now=NOW, applied_coupon_code="flat50")
    assert quote.coupon_recheck.keep
    assert quote.summary.coupon_discount.code == "FLAT50"
    assert quote.summary.total == 2950


def test_quote_drops_coupon_that_stopped_qualifying():
    coupon = make_coupon("MIN5K", min_order_value=5000)
    quote = build_quote(make_cart(), [], [coupon], now=NOW, applied_coupon_code="MIN5K")
    recheck = quote.coupon_recheck
    assert not recheck.keep
    assert recheck.retained_code == "MIN5K"
    assert recheck.removal_notice == "Coupon MIN5K removed: Minimum order of ₹5,000 required."
    assert quote.summary.total == 3000


def test_quote_drops_coupon_missing_from_catalog():
    quote = build_quote(make_cart(), [], [], now=NOW, applied_coupon_code="gone")
    assert not quote.coupon_recheck.keep
    assert quote.coupon_recheck.evaluation.reason == "not_found"
    assert quote.coupon_recheck.retained_code == "GONE"


def test_quote_reports_reverted_pin():
    discounts = [
        make_discount("dinner", scope="packages", package_ids=["pkg-dinner"], discount_value=20),
        make_discount("general", discount_value=5),
    ]
    quote = build_quote(make_cart(), discounts, now=NOW, pinned_discount_id="dinner")
    assert quote.selection.pin_reverted
    assert quote.selection.discount.id == "general"
    assert quote.summary.total == pytest.approx(2850)


def test_round_half_up_large_and_non_finite():
    assert round_half_up(1e30) == 1e30
    assert round_half_up(123456789012345678901234567890.5, 2) == 123456789012345678901234567890.5
    assert round_half_up(float("inf")) == float("inf")


def test_format_amount_large_and_non_finite():
    text = format_amount(1e30)
    assert text.startswith("₹10,00,00")
    assert text.endswith(",000")
    assert format_amount(float("inf")) == "₹∞"


def test_quote_survives_huge_catalog_values():
    discounts = [make_discount("huge", day_count=1e30), make_discount("monthly")]
    quote = build_quote(make_cart(), discounts, [make_coupon("BIG", min_order_value=1e30)],
                        now=NOW, applied_coupon_code="BIG")
    assert quote.selection.discount.id == "monthly"
    assert quote.coupon_recheck.evaluation.reason == "below_min_order"
    assert quote.summary.total == pytest.approx(2700)


def test_cart_carries_only_pricing_inputs():
    cart = Cart(selected_package_ids=["pkg-lunch"], duration_days=30, per_day_total=100, start_date="2026-03-02")
    assert not hasattr(cart, "start_date")
    assert cart.subtotal == 3000
