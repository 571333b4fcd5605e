"""Geometry helpers: payload geometry extraction and point-in-polygon over shapely."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from shapely.geometry import Point, Polygon
from shapely.prepared import PreparedGeometry, prep
from shapely.validation import explain_validity

from easgeo.common.constants import DEFAULT_SRS, GEOMETRY_FIELDS, SRS_FIELD
from easgeo.common.errors import InvalidGeometryError
from easgeo.common.models import Location

Position = tuple[float, float]
Ring = tuple[Position, ...]


def _as_position(value: Any) -> Position:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise InvalidGeometryError(f"Expected a coordinate pair, got {value!r}")
    x, y = value[0], value[1]
    if isinstance(x, bool) or isinstance(y, bool):
        raise InvalidGeometryError(f"Expected numeric coordinates, got {value!r}")
    try:
        return float(x), float(y)
    except (TypeError, ValueError) as exc:
        raise InvalidGeometryError(f"Expected numeric coordinates, got {value!r}") from exc


def _is_position(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) >= 2
        and not isinstance(value[0], (list, tuple, dict))
    )


def _as_ring(value: Any) -> Ring:
    if not isinstance(value, (list, tuple)):
        raise InvalidGeometryError(f"Expected a coordinate ring, got {value!r}")
    ring = tuple(_as_position(item) for item in value)
    if len(ring) < 4:
        raise InvalidGeometryError("Polygon rings need at least four positions")
    if ring[0] != ring[-1]:
        raise InvalidGeometryError("First and last positions of a polygon ring must be equal")
    return ring


def _parse_geometry_value(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError as exc:
            raise InvalidGeometryError(f"Geometry is not valid JSON: {value[:80]!r}") from exc
    return value


def _unwrap_geojson(value: Any) -> tuple[str | None, Any]:
    value = _parse_geometry_value(value)
    if isinstance(value, Mapping):
        geometry_type = value.get("type")
        if geometry_type == "Feature":
            return _unwrap_geojson(value.get("geometry"))
        if "coordinates" not in value:
            raise InvalidGeometryError(f"Geometry object has no coordinates: {geometry_type!r}")
        return geometry_type, _parse_geometry_value(value["coordinates"])
    if isinstance(value, (list, tuple)):
        return None, value
    raise InvalidGeometryError(f"Unsupported geometry value: {value!r}")


def _geometry_value(payload: Mapping[str, Any]) -> Any:
    for field in GEOMETRY_FIELDS:
        value = payload.get(field)
        if value not in (None, "", []):
            return value
    raise InvalidGeometryError(f"Payload has none of the geometry fields: {', '.join(GEOMETRY_FIELDS)}")


def _payload_srs(payload: Mapping[str, Any]) -> str:
    srs = payload.get(SRS_FIELD)
    if not srs:
        return DEFAULT_SRS
    return str(srs).strip()


def _check_declared_type(declared: str | None, expected: str) -> None:
    if declared is not None and str(declared).lower() != expected.lower():
        raise InvalidGeometryError(f"Expected {expected} geometry, got {declared}")


def extract_point(payload: Mapping[str, Any]) -> Location:
    declared, coordinates = _unwrap_geojson(_geometry_value(payload))
    _check_declared_type(declared, "Point")
    x, y = _as_position(coordinates)
    return Location(geometry_type="Point", coordinates=[x, y], srs=_payload_srs(payload))


def extract_polygon(payload: Mapping[str, Any]) -> Location:
    declared, coordinates = _unwrap_geojson(_geometry_value(payload))
    _check_declared_type(declared, "Polygon")
    if not isinstance(coordinates, (list, tuple)) or not coordinates:
        raise InvalidGeometryError("Polygon geometry has no rings")
    # A bare ring is accepted as a polygon without holes.
    raw_rings = [coordinates] if _is_position(coordinates[0]) else list(coordinates)
    rings = [_as_ring(ring) for ring in raw_rings]
    return Location(
        geometry_type="Polygon",
        coordinates=[[list(position) for position in ring] for ring in rings],
        srs=_payload_srs(payload),
    )


@dataclass(frozen=True)
class BoundaryPolygon:
    """Boundary polygon with holes; the prepared geometry is built once and reused."""

    shell: Ring
    holes: tuple[Ring, ...] = ()
    srs: str = DEFAULT_SRS
    prepared: PreparedGeometry = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        polygon = Polygon(self.shell, list(self.holes) or None)
        if not polygon.is_valid:
            raise InvalidGeometryError(f"Boundary polygon is invalid: {explain_validity(polygon)}")
        object.__setattr__(self, "prepared", prep(polygon))

    @classmethod
    def from_location(cls, location: Location) -> "BoundaryPolygon":
        if location.geometry_type != "Polygon":
            raise InvalidGeometryError(f"Expected Polygon location, got {location.geometry_type}")
        rings = tuple(_as_ring(ring) for ring in location.coordinates)
        return cls(shell=rings[0], holes=rings[1:], srs=location.srs)

    def contains(self, point: Position) -> bool:
        # Interior only: points on the shell or on a hole ring are not contained.
        return self.prepared.contains(Point(point[0], point[1]))


def point_in_polygon(point: Position, polygon: BoundaryPolygon) -> bool:
    return polygon.contains(point)
