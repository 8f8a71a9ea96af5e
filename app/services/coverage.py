"""Delivery coverage verdicts: is the customer's address inside any operator polygon?"""
from collections.abc import Iterable

from app.core.geo import first_containing_polygon, is_valid_coordinate, parse_lat_lng, sanitize_polygons
from app.models import Coordinate, CoverageGroup, CoveragePolygon, CoverageVerdict, DeliveryLocation
from app.models.coverage import CoverageStatus

STATUS_MESSAGES: dict[CoverageStatus, str] = {
    "loading": "We are still verifying delivery coverage. Please try again in a moment.",
    "error": "We could not verify delivery coverage right now. Please try again later.",
    "no-location": "Set a default delivery location inside our coverage area before continuing.",
    "no-coverage": "Delivery coverage areas are not configured yet. Please contact support for assistance.",
    "outside": "Your selected delivery location is outside our delivery coverage area. "
               "Update your address to continue.",
}


def check_coverage(
    point: Coordinate | None,
    polygons: list[CoveragePolygon] | None,
    *,
    loading: bool = False,
    error: str | None = None,
) -> CoverageVerdict:
    """
    Status precedence: loading, error, no-location, no-coverage, then outside/inside.
    loading and error describe the caller's fetch; an empty error string gets the stock message.
    """
    if loading:
        return CoverageVerdict(status="loading", message=STATUS_MESSAGES["loading"])
    if error is not None:
        return CoverageVerdict(status="error", message=error or STATUS_MESSAGES["error"])
    if not is_valid_coordinate(point):
        return CoverageVerdict(status="no-location", message=STATUS_MESSAGES["no-location"])
    usable = sanitize_polygons(polygons)
    if not usable:
        return CoverageVerdict(status="no-coverage", message=STATUS_MESSAGES["no-coverage"])
    match = first_containing_polygon(point, usable)
    if match is None:
        return CoverageVerdict(status="outside", message=STATUS_MESSAGES["outside"])
    return CoverageVerdict(status="inside", covered=True, polygon_id=match.id)


def find_covering_group(point: Coordinate | None, groups: Iterable[CoverageGroup]) -> CoverageGroup | None:
    """First group (in the given order) whose coverage contains the point."""
    if not is_valid_coordinate(point):
        return None
    for group in groups:
        usable = sanitize_polygons(group.polygons)
        if usable and first_containing_polygon(point, usable) is not None:
            return group
    return None


def resolve_delivery_coordinate(locations: Iterable[DeliveryLocation]) -> Coordinate | None:
    """Default location's coordinate; otherwise the first location that parses."""
    fallback: Coordinate | None = None
    for location in locations:
        point = parse_lat_lng(location.coordinates)
        if point is None:
            continue
        if location.is_default:
            return point
        if fallback is None:
            fallback = point
    return fallback
