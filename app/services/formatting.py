"""Rounding and display helpers shared by the pricing services (₹, en-IN digit grouping)."""
import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext

from app.models import DurationDiscount

CURRENCY_SYMBOL = "₹"


def round_half_up(value: float, digits: int = 0) -> float:
    """Commercial rounding: 2.5 -> 3 (the builtin round() would give 2). inf and nan pass through."""
    if not math.isfinite(value):
        return value
    exact = Decimal(str(value))
    # Default context precision (28) is too small for catalog values like 1e30
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + digits + 2)
        return float(exact.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP))


def round_currency(value: float) -> float:
    return round_half_up(value, 2)


def _group_indian(digits: str) -> str:
    """1234567 -> 12,34,567 (last three, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_amount(value: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """500 -> '₹500', 1250.5 -> '₹1,250.50', 150000 -> '₹1,50,000'."""
    sign = "-" if value < 0 else ""
    if not math.isfinite(value):
        return f"{sign}{symbol}∞"
    rounded = Decimal(str(round_currency(abs(value))))
    whole = int(rounded)
    cents = int((rounded - whole) * 100)
    text = _group_indian(str(whole))
    if cents:
        text = f"{text}.{cents:02d}"
    return f"{sign}{symbol}{text}"


def format_percent(value: float) -> str:
    normalized = min(100.0, max(0.0, value))
    if abs(normalized - round(normalized)) < 0.01:
        return f"{round(normalized)}%"
    return f"{normalized:.1f}%"


def format_discount_summary(discount: DurationDiscount) -> str:
    if discount.discount_type == "percentage":
        formatted = f"{discount.discount_value:.2f}".removesuffix(".00")
        return f"{formatted}% off"
    return f"{format_amount(discount.discount_value)} off"


def format_timestamp(value: datetime) -> str:
    return f"{value.day} {value:%b %Y, %H:%M}"
