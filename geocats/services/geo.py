"""Geospatial filter: region construction/validation, point containment, and bulk record filtering.

Regions are either an axis-aligned box or a closed polygon ring; both use (longitude, latitude)
order. Boundary points count as inside for both shapes.
"""

import math
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Protocol, TypeVar

from pydantic import ValidationError

from geocats.core.errors import InvalidRegionError
from geocats.schemas.geo import BoxRegion, Point, PolygonRegion, Region

# Minimum vertices in a closed ring: a triangle plus the repeated first vertex.
MIN_RING_VERTICES = 4

# Relative tolerance for deciding a point lies on a polygon edge.
EDGE_TOLERANCE = 1e-12


class Located(Protocol):
    @property
    def location(self) -> tuple[float, float]: ...


R = TypeVar("R", bound=Located)


def _coerce_coordinate(value: Any, label: str) -> float:
    """Parse one coordinate; reject non-numeric, bool, NaN and infinity."""
    if isinstance(value, bool):
        raise InvalidRegionError(f"{label} must be numeric, got {value!r}")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError) as e:
        raise InvalidRegionError(f"{label} must be numeric, got {value!r}") from e
    if not math.isfinite(number):
        raise InvalidRegionError(f"{label} must be finite, got {value!r}")
    return number


def _coerce_point(value: Any, label: str) -> Point:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
        raise InvalidRegionError(f"{label} must be a [longitude, latitude] pair")
    return (
        _coerce_coordinate(value[0], f"{label} longitude"),
        _coerce_coordinate(value[1], f"{label} latitude"),
    )


def box_region(bottom_left: Any, top_right: Any) -> BoxRegion:
    """Build a validated rectangle. Bottom-left must not lie beyond top-right on either axis."""
    bl = _coerce_point(bottom_left, "bottomLeft")
    tr = _coerce_point(top_right, "topRight")
    if bl[0] > tr[0] or bl[1] > tr[1]:
        raise InvalidRegionError("bottomLeft must not be beyond topRight")
    return BoxRegion(bottom_left=bl, top_right=tr)


def polygon_region(ring: Any) -> PolygonRegion:
    """Build a validated polygon from an ordered, closed ring of (lon, lat) vertices."""
    if isinstance(ring, (str, bytes)) or not isinstance(ring, Sequence):
        raise InvalidRegionError("Polygon must be a sequence of [longitude, latitude] vertices")
    if len(ring) < MIN_RING_VERTICES:
        raise InvalidRegionError(
            f"Polygon ring needs at least {MIN_RING_VERTICES} vertices (first repeated last)"
        )
    vertices = tuple(_coerce_point(v, f"vertex {i}") for i, v in enumerate(ring))
    if vertices[0] != vertices[-1]:
        raise InvalidRegionError("Polygon ring must be closed (first vertex equal to last)")
    return PolygonRegion(ring=vertices)


def _parse_lon_lat(value: str | None, label: str) -> Point:
    """Parse a "lon,lat" query string."""
    if value is None or not value.strip():
        raise InvalidRegionError(f"{label} is required as 'lon,lat'")
    parts = value.split(",")
    if len(parts) != 2:
        raise InvalidRegionError(f"{label} must be 'lon,lat', got {value!r}")
    return (
        _coerce_coordinate(parts[0], f"{label} longitude"),
        _coerce_coordinate(parts[1], f"{label} latitude"),
    )


def parse_box_query(bottom_left: str | None, top_right: str | None) -> BoxRegion:
    """Rectangle query form: two comma-separated "lon,lat" strings."""
    return box_region(
        _parse_lon_lat(bottom_left, "bottomLeft"),
        _parse_lon_lat(top_right, "topRight"),
    )


def parse_bounds_query(min_lat: Any, min_lng: Any, max_lat: Any, max_lng: Any) -> PolygonRegion:
    """Four-bound query form: synthesize a closed rectangle polygon from min/max lat/lng."""
    lat_lo = _coerce_coordinate(min_lat, "min_lat")
    lng_lo = _coerce_coordinate(min_lng, "min_lng")
    lat_hi = _coerce_coordinate(max_lat, "max_lat")
    lng_hi = _coerce_coordinate(max_lng, "max_lng")
    if lat_lo > lat_hi or lng_lo > lng_hi:
        raise InvalidRegionError("min bounds must not exceed max bounds")
    return polygon_region(
        [
            (lng_lo, lat_lo),
            (lng_hi, lat_lo),
            (lng_hi, lat_hi),
            (lng_lo, lat_hi),
            (lng_lo, lat_lo),
        ]
    )


def validate_region(region: Region) -> Region:
    """Re-validate a region that may have been built directly instead of via the constructors."""
    try:
        if isinstance(region, BoxRegion):
            return box_region(region.bottom_left, region.top_right)
        if isinstance(region, PolygonRegion):
            return polygon_region(region.ring)
    except ValidationError as e:
        raise InvalidRegionError(str(e)) from e
    raise InvalidRegionError(f"Unsupported region type: {type(region).__name__}")


def region_bounds(region: Region) -> tuple[float, float, float, float]:
    """(min_lon, min_lat, max_lon, max_lat) enclosing the region."""
    if isinstance(region, BoxRegion):
        return (*region.bottom_left, *region.top_right)
    lons = [v[0] for v in region.ring]
    lats = [v[1] for v in region.ring]
    return (min(lons), min(lats), max(lons), max(lats))


def _on_segment(point: Point, a: Point, b: Point) -> bool:
    """True if point lies on the closed segment a-b."""
    px, py = point
    (ax, ay), (bx, by) = a, b
    if not (min(ax, bx) <= px <= max(ax, bx) and min(ay, by) <= py <= max(ay, by)):
        return False
    cross = (bx - ax) * (py - ay) - (by - ay) * (px - ax)
    scale = max(abs(bx - ax), abs(by - ay), abs(px - ax), abs(py - ay), 1.0)
    return abs(cross) <= EDGE_TOLERANCE * scale * scale


def _in_box(region: BoxRegion, point: Point) -> bool:
    lon, lat = point
    return (
        region.bottom_left[0] <= lon <= region.top_right[0]
        and region.bottom_left[1] <= lat <= region.top_right[1]
    )


def _in_polygon(region: PolygonRegion, point: Point) -> bool:
    """Ray casting towards +x; points on any edge or vertex are inside."""
    x, y = point
    inside = False
    ring = region.ring
    for a, b in zip(ring, ring[1:]):
        if _on_segment(point, a, b):
            return True
        (x1, y1), (x2, y2) = a, b
        if (y1 > y) != (y2 > y):
            x_cross = (x2 - x1) * (y - y1) / (y2 - y1) + x1
            if x < x_cross:
                inside = not inside
    return inside


def within(region: Region, point: Point) -> bool:
    """True if point (lon, lat) lies inside or on the boundary of region."""
    lon, lat = point
    if not (math.isfinite(lon) and math.isfinite(lat)):
        return False
    if isinstance(region, BoxRegion):
        return _in_box(region, (lon, lat))
    return _in_polygon(region, (lon, lat))


def filter_records(region: Region, records: Iterable[R]) -> Iterator[R]:
    """
    Lazily yield records whose location lies within region, in input order.

    The region is validated eagerly, so InvalidRegionError is raised before any record is read.
    """
    checked = validate_region(region)
    return (record for record in records if within(checked, record.location))
