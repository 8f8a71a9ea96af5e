"""Coordinate parsing and point-in-polygon tests for delivery coverage areas."""
import logging
import math

from app.models.coverage import Coordinate, CoveragePolygon

logger = logging.getLogger(__name__)

EPSILON = 1e-9
MIN_POLYGON_POINTS = 3


def parse_lat_lng(value: str | None) -> Coordinate | None:
    """'12.97, 77.59' -> Coordinate. Missing part or non-finite number -> None."""
    if not isinstance(value, str):
        return None
    parts = [segment.strip() for segment in value.split(",")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return Coordinate(lat=lat, lng=lng)


def is_valid_coordinate(point: Coordinate | None) -> bool:
    return point is not None and math.isfinite(point.lat) and math.isfinite(point.lng)


def _on_segment(point: Coordinate, start: Coordinate, end: Coordinate) -> bool:
    squared_length = (end.lng - start.lng) ** 2 + (end.lat - start.lat) ** 2
    if squared_length <= EPSILON:
        # Repeated vertex
        return abs(point.lat - start.lat) <= EPSILON and abs(point.lng - start.lng) <= EPSILON
    cross = (point.lat - start.lat) * (end.lng - start.lng) - (point.lng - start.lng) * (end.lat - start.lat)
    if abs(cross) > EPSILON:
        return False
    dot = (point.lng - start.lng) * (end.lng - start.lng) + (point.lat - start.lat) * (end.lat - start.lat)
    if dot < -EPSILON:
        return False
    return dot - squared_length <= EPSILON


def point_in_polygon(point: Coordinate, points: list[Coordinate]) -> bool:
    """
    Even-odd ray cast along the longitude axis.
    A point lying on an edge counts as inside; fewer than three vertices is never a region.
    """
    if len(points) < MIN_POLYGON_POINTS:
        return False
    inside = False
    j = len(points) - 1
    for i in range(len(points)):
        vi, vj = points[i], points[j]
        if _on_segment(point, vi, vj):
            return True
        if (vi.lat > point.lat) != (vj.lat > point.lat):
            dlat = (vj.lat - vi.lat) or EPSILON
            crossing_lng = (vj.lng - vi.lng) * (point.lat - vi.lat) / dlat + vi.lng
            if point.lng < crossing_lng:
                inside = not inside
        j = i
    return inside


def sanitize_polygons(polygons: list[CoveragePolygon] | None) -> list[CoveragePolygon]:
    """
    Drops non-finite vertices, then drops polygons left with fewer than three points.
    Inputs are not modified; cleaned polygons are new objects.
    """
    if not polygons:
        return []
    out: list[CoveragePolygon] = []
    for index, polygon in enumerate(polygons):
        points = [p for p in polygon.points if is_valid_coordinate(p)]
        if len(points) < MIN_POLYGON_POINTS:
            logger.warning(
                "Discarding coverage polygon %s: %d valid points",
                polygon.id or index,
                len(points),
            )
            continue
        out.append(
            polygon.model_copy(update={"id": polygon.id or f"polygon-{index}", "points": points})
        )
    return out


def first_containing_polygon(point: Coordinate, polygons: list[CoveragePolygon]) -> CoveragePolygon | None:
    for polygon in polygons:
        if point_in_polygon(point, polygon.points):
            return polygon
    return None
