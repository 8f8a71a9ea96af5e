"""Delivery coverage: operator-drawn polygons and customer delivery locations."""
from typing import Literal

from pydantic import BaseModel, Field


class Coordinate(BaseModel):
    lat: float
    lng: float


class CoveragePolygon(BaseModel):
    id: str = ""
    name: str | None = None
    points: list[Coordinate] = Field(default_factory=list)


class CoverageGroup(BaseModel):
    """A delivery group; its coverage is the union of its polygons."""

    id: str
    name: str | None = None
    polygons: list[CoveragePolygon] = Field(default_factory=list)


class DeliveryLocation(BaseModel):
    id: str | None = None
    label: str | None = None
    coordinates: str | None = None  # "lat,lng" as stored by the address form
    is_default: bool = False


CoverageStatus = Literal["loading", "error", "no-location", "no-coverage", "outside", "inside"]


class CoverageVerdict(BaseModel):
    status: CoverageStatus
    covered: bool = False
    polygon_id: str | None = None
    message: str | None = None  # actionable text for anything but inside
