"""Request-side helpers: everything the engine must not read for itself (clock, settings)."""
from datetime import datetime, timezone

from app.core.config import settings
from app.core.geo import parse_lat_lng
from app.models import Cart, Coordinate
from app.schemas import LocationQuery
from app.services.coverage import resolve_delivery_coordinate


def request_time(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def cart_with_defaults(cart: Cart) -> Cart:
    """Platform student percent unless the request carried its own."""
    if "student_discount_percent" in cart.model_fields_set:
        return cart
    return cart.model_copy(update={"student_discount_percent": settings.student_discount_percent})


def resolve_point(query: LocationQuery) -> Coordinate | None:
    if query.point is not None:
        return query.point
    if query.coordinates:
        return parse_lat_lng(query.coordinates)
    return resolve_delivery_coordinate(query.locations)
