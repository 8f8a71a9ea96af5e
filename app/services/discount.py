"""
Duration discounts: scope matching, the day-count index and best-discount selection.
Everything here is a pure function of its arguments; callers re-run it whenever the cart changes.
"""
import logging
import math
from collections.abc import Iterable

from app.models import Cart, DiscountSelection, DurationDiscount, DurationOption
from app.models.discount import MatchType
from app.services.formatting import round_half_up

logger = logging.getLogger(__name__)

# Two savings closer than this are a tie
SAVINGS_TIE_EPSILON = 1e-4


def ids_match(candidate_ids: Iterable[str], selection_ids: Iterable[str], match_type: MatchType) -> bool:
    """
    Shared matcher for category and package targeting.
    all: selection is exactly the candidate set (same size, full containment).
    any: at least one id in common.
    An empty side never matches.
    """
    candidates = list(candidate_ids)
    selection = list(selection_ids)
    if not candidates or not selection:
        return False
    if match_type == "all":
        if len(selection) != len(candidates):
            return False
        selected = set(selection)
        return all(cid in selected for cid in candidates)
    selected = set(selection)
    return any(cid in selected for cid in candidates)


def discount_matches_cart(discount: DurationDiscount, cart: Cart) -> bool:
    """Scope test against the cart's category and exact package selection."""
    if discount.scope == "all":
        return True
    if discount.scope == "categories":
        if not cart.category_id:
            return False
        # A subscription has exactly one category, so match_type reduces to membership
        return ids_match(discount.category_ids, [cart.category_id], "any")
    if discount.scope == "packages":
        return ids_match(discount.package_ids, cart.selected_package_ids, discount.match_type)
    return False


def discount_matches_catalog(
    discount: DurationDiscount,
    category_id: str | None,
    available_package_ids: Iterable[str],
) -> bool:
    """Looser test used to list duration options before any package is picked."""
    if discount.scope == "packages":
        return ids_match(discount.package_ids, available_package_ids, "any")
    if discount.scope == "categories":
        return bool(category_id) and ids_match(discount.category_ids, [category_id], "any")
    return discount.scope == "all"


def normalize_day_count(value: float | None) -> int | None:
    """Positive whole day count, or None when the record cannot be offered."""
    if value is None or not math.isfinite(value) or value <= 0:
        return None
    return max(1, int(round_half_up(value)))


def _index(discounts: Iterable[DurationDiscount], keep) -> dict[int, list[DurationDiscount]]:
    grouped: dict[int, list[DurationDiscount]] = {}
    for discount in discounts:
        day_count = normalize_day_count(discount.day_count)
        if day_count is None:
            logger.debug("Skipping discount %s: unusable day count %r", discount.id, discount.day_count)
            continue
        if not keep(discount):
            continue
        grouped.setdefault(day_count, []).append(discount.model_copy(update={"day_count": day_count}))
    return {
        day_count: sorted(grouped[day_count], key=lambda d: (d.label, d.id))
        for day_count in sorted(grouped)
    }


def build_discount_index(discounts: Iterable[DurationDiscount], cart: Cart) -> dict[int, list[DurationDiscount]]:
    """day_count -> discounts in scope for the cart, sorted by label; keys ascending."""
    return _index(discounts, lambda d: discount_matches_cart(d, cart))


def build_duration_options(
    discounts: Iterable[DurationDiscount],
    category_id: str | None,
    available_package_ids: Iterable[str],
    cart: Cart | None = None,
    plain_day_counts: Iterable[float] = (),
) -> list[DurationOption]:
    """
    Plan lengths offered for a category. A plain option appears only for a day count
    that has no discount; ordering is day count, plain first, then label.
    """
    available = list(available_package_ids)
    index = _index(discounts, lambda d: discount_matches_catalog(d, category_id, available))
    options: list[DurationOption] = []
    for raw in plain_day_counts:
        day_count = normalize_day_count(raw)
        if day_count is not None and day_count not in index:
            index[day_count] = []
    for day_count, entries in index.items():
        if not entries:
            options.append(DurationOption(key=f"base-{day_count}", day_count=day_count))
        for discount in entries:
            options.append(
                DurationOption(
                    key=f"discount-{discount.id}",
                    day_count=day_count,
                    discount=discount,
                    applicable=discount_matches_cart(discount, cart) if cart is not None else True,
                )
            )
    options.sort(key=lambda o: (o.day_count, o.discount is not None, o.discount.label if o.discount else ""))
    return options


def compute_discount_savings(discount: DurationDiscount, base_subtotal: float) -> float:
    if base_subtotal <= 0:
        return 0.0
    if discount.discount_type == "percentage":
        return max(0.0, base_subtotal * discount.discount_value / 100)
    return min(base_subtotal, discount.discount_value)


def pick_best_discount(candidates: Iterable[DurationDiscount], base_subtotal: float) -> DurationDiscount | None:
    """
    Largest saving wins; near-equal savings go to the smaller label (then id).
    Candidates are ordered first so the answer does not depend on input order.
    With no baseline (base_subtotal 0) raw discount values are compared instead.
    """
    best: DurationDiscount | None = None
    best_savings = -math.inf
    for discount in sorted(candidates, key=lambda d: (d.label, d.id)):
        savings = compute_discount_savings(discount, base_subtotal) if base_subtotal > 0 else discount.discount_value
        if best is None or savings > best_savings + SAVINGS_TIE_EPSILON:
            best, best_savings = discount, savings
    return best


def select_duration_discount(
    index: dict[int, list[DurationDiscount]],
    cart: Cart,
    pinned_discount_id: str | None = None,
) -> DiscountSelection:
    """
    The discount to charge for the cart's duration. A pinned id wins while it still fits
    the cart; once it does not, auto-selection takes over and pin_reverted is set.
    """
    if not cart.duration_days:
        return DiscountSelection(pin_reverted=bool(pinned_discount_id))
    entries = index.get(cart.duration_days, [])
    if pinned_discount_id:
        pinned = next((d for d in entries if d.id == pinned_discount_id), None)
        if pinned is not None and discount_matches_cart(pinned, cart):
            return DiscountSelection(discount=pinned, pinned=True)
        logger.debug("Pinned discount %s no longer applies; auto-selecting", pinned_discount_id)
    applicable = [d for d in entries if discount_matches_cart(d, cart)]
    best = pick_best_discount(applicable, cart.subtotal or 0.0)
    return DiscountSelection(discount=best, pin_reverted=bool(pinned_discount_id))
