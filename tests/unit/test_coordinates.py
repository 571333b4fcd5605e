import pytest
from pyproj import Transformer

from easgeo.common.errors import InvalidGeometryError
from easgeo.common.models import Location
from easgeo.pipeline.coordinates import PointAligner


def test_same_srs_passes_point_through():
    aligner = PointAligner("EPSG:4326")

    assert aligner.align(Location("Point", [-2.1, 49.2], "EPSG:4326")) == (-2.1, 49.2)
    assert aligner.align(Location("Point", [-2.1, 49.2], "epsg:4326")) == (-2.1, 49.2)


def test_web_mercator_point_reprojected_to_wgs84():
    transformer = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
    x, y = transformer.transform(-2.1, 49.2)

    lon, lat = PointAligner("EPSG:4326").align(Location("Point", [x, y], "EPSG:3857"))

    assert abs(lon - (-2.1)) < 1e-6
    assert abs(lat - 49.2) < 1e-6


def test_unknown_srs_raises_invalid_geometry():
    with pytest.raises(InvalidGeometryError):
        PointAligner("EPSG:4326").align(Location("Point", [1.0, 2.0], "EPSG:999999"))
