from pydantic import BaseModel, Field

from app.models import Coordinate, CoverageGroup, CoveragePolygon, DeliveryLocation


class LocationQuery(BaseModel):
    """
    Where to deliver. First usable source wins: point, then the "lat,lng" string,
    then the customer's saved locations (default one first).
    """

    point: Coordinate | None = None
    coordinates: str | None = None
    locations: list[DeliveryLocation] = Field(default_factory=list)


class CoverageCheckRequest(LocationQuery):
    polygons: list[CoveragePolygon] = Field(default_factory=list)
    # Caller's own fetch state, passed through as loading/error verdicts
    loading: bool = False
    error: str | None = None


class CoverageGroupRequest(LocationQuery):
    groups: list[CoverageGroup] = Field(default_factory=list)


class CoverageGroupResponse(BaseModel):
    covered: bool
    group_id: str | None = None
    group_name: str | None = None
