"""Coordinate reference system alignment between observations and boundaries."""

from __future__ import annotations

import math

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from easgeo.common.errors import InvalidGeometryError
from easgeo.common.models import Location


def _same_crs(source: str, target: str) -> bool:
    if source.strip().upper() == target.strip().upper():
        return True
    try:
        return CRS.from_user_input(source) == CRS.from_user_input(target)
    except CRSError as exc:
        raise InvalidGeometryError(f"Unknown spatial reference system: {exc}") from exc


class PointAligner:
    """Reprojects observation points into the boundary's SRS.

    Transformers are cached per source SRS; when the SRS already matches the
    point passes through untouched.
    """

    def __init__(self, target_srs: str) -> None:
        self.target_srs = target_srs
        self._transformers: dict[str, Transformer | None] = {}

    def _transformer(self, source_srs: str) -> Transformer | None:
        if source_srs not in self._transformers:
            if _same_crs(source_srs, self.target_srs):
                self._transformers[source_srs] = None
            else:
                try:
                    self._transformers[source_srs] = Transformer.from_crs(
                        CRS.from_user_input(source_srs),
                        CRS.from_user_input(self.target_srs),
                        always_xy=True,
                    )
                except (CRSError, ProjError) as exc:
                    raise InvalidGeometryError(
                        f"Cannot transform from {source_srs} to {self.target_srs}: {exc}"
                    ) from exc
        return self._transformers[source_srs]

    def align(self, location: Location) -> tuple[float, float]:
        x, y = location.coordinates
        transformer = self._transformer(location.srs)
        if transformer is None:
            return float(x), float(y)
        try:
            tx, ty = transformer.transform(x, y)
        except ProjError as exc:
            raise InvalidGeometryError(f"Cannot transform point {location.coordinates}: {exc}") from exc
        if not (math.isfinite(tx) and math.isfinite(ty)):
            raise InvalidGeometryError(f"Point {location.coordinates} is outside the domain of {self.target_srs}")
        return tx, ty
