import json
import random

import pytest
from shapely.geometry import Point, Polygon

from easgeo.common.errors import InvalidGeometryError, PayloadDecodeError
from easgeo.common.geometry import (
    BoundaryPolygon,
    extract_point,
    extract_polygon,
    point_in_polygon,
)

SQUARE = [[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]]


def _square() -> BoundaryPolygon:
    return BoundaryPolygon.from_location(extract_polygon({"coordinates": SQUARE}))


def test_point_inside_and_outside_square():
    polygon = _square()

    assert point_in_polygon((5.0, 5.0), polygon) is True
    assert point_in_polygon((50.0, 50.0), polygon) is False
    assert point_in_polygon((-0.5, 5.0), polygon) is False


@pytest.mark.parametrize("point", [(0.0, 5.0), (10.0, 10.0), (5.0, 0.0), (0.0, 0.0)])
def test_points_on_boundary_are_not_contained(point):
    assert point_in_polygon(point, _square()) is False


def test_concave_polygon_notch_is_outside():
    u_shape = [[0, 0], [0, 10], [3, 10], [3, 3], [7, 3], [7, 10], [10, 10], [10, 0], [0, 0]]
    polygon = BoundaryPolygon.from_location(extract_polygon({"coordinates": u_shape}))

    assert point_in_polygon((5.0, 8.0), polygon) is False
    assert point_in_polygon((1.5, 8.0), polygon) is True
    assert point_in_polygon((5.0, 1.0), polygon) is True


def test_polygon_with_hole():
    hole = [[4, 4], [6, 4], [6, 6], [4, 6], [4, 4]]
    location = extract_polygon({"location": {"type": "Polygon", "coordinates": [SQUARE, hole]}})
    polygon = BoundaryPolygon.from_location(location)

    assert len(polygon.holes) == 1
    assert point_in_polygon((5.0, 5.0), polygon) is False
    assert point_in_polygon((4.0, 5.0), polygon) is False
    assert point_in_polygon((2.0, 2.0), polygon) is True


def test_containment_is_deterministic():
    polygon = _square()

    assert [point_in_polygon((3.3, 7.7), polygon) for _ in range(3)] == [True, True, True]


def test_extract_polygon_from_geojson_string_and_feature():
    as_string = extract_polygon({"location": json.dumps({"type": "Polygon", "coordinates": [SQUARE]})})
    as_feature = extract_polygon(
        {"geometry": {"type": "Feature", "properties": {}, "geometry": {"type": "Polygon", "coordinates": [SQUARE]}}}
    )

    assert as_string.coordinates == as_feature.coordinates
    assert as_string.coordinates[0][0] == [0.0, 0.0]
    assert as_string.srs == "EPSG:4326"


def test_extract_polygon_rejects_open_ring():
    with pytest.raises(InvalidGeometryError, match="First and last"):
        extract_polygon({"coordinates": [[0, 0], [0, 10], [10, 10], [10, 0]]})


def test_extract_polygon_rejects_short_ring():
    with pytest.raises(InvalidGeometryError):
        extract_polygon({"coordinates": [[0, 0], [1, 1], [0, 0]]})


def test_extract_polygon_rejects_point_geometry():
    with pytest.raises(InvalidGeometryError, match="Polygon"):
        extract_polygon({"location": {"type": "Point", "coordinates": [1, 2]}})


def test_extract_point_variants():
    assert extract_point({"coordinates": "[5, 5]"}).coordinates == [5.0, 5.0]
    assert extract_point({"location": {"type": "Point", "coordinates": [1, 2]}}).coordinates == [1.0, 2.0]
    assert extract_point({"location": '{"type": "Point", "coordinates": [3, 4]}', "srs": "EPSG:3857"}).srs == "EPSG:3857"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"memo": "no geometry"},
        {"coordinates": "not json"},
        {"coordinates": [1]},
        {"coordinates": ["a", "b"]},
        {"coordinates": [True, False]},
        {"location": {"type": "Polygon", "coordinates": [SQUARE]}},
        {"location": {"type": "Point"}},
        {"location": 42},
    ],
)
def test_extract_point_rejects_bad_payloads(payload):
    with pytest.raises(PayloadDecodeError):
        extract_point(payload)


def test_boundary_polygon_requires_polygon_location():
    with pytest.raises(InvalidGeometryError):
        BoundaryPolygon.from_location(extract_point({"coordinates": [1, 2]}))


def test_point_just_inside_small_polygon_edge_is_contained():
    scale = 1e-4
    ring = [[0, 0], [0, scale], [scale, scale], [scale, 0], [0, 0]]
    polygon = BoundaryPolygon.from_location(extract_polygon({"coordinates": ring}))

    assert point_in_polygon((scale / 2, 1e-13), polygon) is True
    assert point_in_polygon((scale / 2, 0.0), polygon) is False


@pytest.mark.parametrize("scale", [1e-4, 1.0, 1e7])
def test_points_interpolated_along_triangle_edges_match_exact_predicate(scale):
    rng = random.Random(20240117)
    for _ in range(50):
        vertices = [(rng.uniform(-1, 1) * scale, rng.uniform(-1, 1) * scale) for _ in range(3)]
        reference = Polygon(vertices)
        if reference.area == 0:
            continue
        ring = [list(vertex) for vertex in vertices + vertices[:1]]
        polygon = BoundaryPolygon.from_location(extract_polygon({"coordinates": ring}))
        for start, end in zip(vertices, vertices[1:] + vertices[:1]):
            for _ in range(5):
                t = rng.random()
                point = (start[0] + t * (end[0] - start[0]), start[1] + t * (end[1] - start[1]))

                assert point_in_polygon(point, polygon) is reference.contains(Point(point))


def test_self_intersecting_boundary_is_rejected():
    bow_tie = [[0, 0], [10, 10], [10, 0], [0, 10], [0, 0]]

    with pytest.raises(InvalidGeometryError, match="invalid"):
        BoundaryPolygon.from_location(extract_polygon({"coordinates": bow_tie}))


def test_prepared_geometry_is_built_once():
    polygon = _square()
    prepared = polygon.prepared

    point_in_polygon((1.0, 1.0), polygon)
    point_in_polygon((2.0, 2.0), polygon)

    assert polygon.prepared is prepared
