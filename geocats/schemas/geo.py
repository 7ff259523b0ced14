"""Pydantic schemas for geographic regions and points. Coordinates are (longitude, latitude)."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Point = tuple[float, float]


class BoxRegion(BaseModel):
    """Axis-aligned rectangle, inclusive on every edge."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["box"] = "box"
    bottom_left: Point
    top_right: Point


class PolygonRegion(BaseModel):
    """Closed ring of vertices; first and last vertex are identical."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["polygon"] = "polygon"
    ring: tuple[Point, ...]


Region = BoxRegion | PolygonRegion


class GeoPoint(BaseModel):
    """GeoJSON point as returned to clients."""

    type: Literal["Point"] = "Point"
    coordinates: Point = Field(default=(0.0, 0.0), description="[longitude, latitude]")


class PolygonQuery(BaseModel):
    """Body for POST /cats/within: ring of [longitude, latitude] pairs, closed."""

    coordinates: list[list[float]] = Field(
        ...,
        description="Ordered ring of [lon, lat] vertices; first and last must be identical.",
    )
