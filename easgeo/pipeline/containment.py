"""Point-in-polygon evaluation of observations against a boundary attestation."""

from __future__ import annotations

import logging
import time
from typing import Callable, Sequence

from easgeo.common.errors import PayloadDecodeError
from easgeo.common.geometry import BoundaryPolygon, extract_point, extract_polygon, point_in_polygon
from easgeo.common.logging import log_event
from easgeo.common.models import Attestation, ContainmentResult
from easgeo.pipeline.coordinates import PointAligner
from easgeo.pipeline.decode import PayloadDecoder


class ContainmentEvaluator:
    def __init__(
        self,
        *,
        decoder: PayloadDecoder | None = None,
        contains: Callable[[tuple[float, float], BoundaryPolygon], bool] = point_in_polygon,
        logger: logging.Logger | None = None,
    ) -> None:
        self.decoder = decoder or PayloadDecoder()
        self.contains = contains
        self.logger = logger

    def build_boundary(self, boundary: Attestation) -> BoundaryPolygon:
        try:
            polygon = BoundaryPolygon.from_location(extract_polygon(self.decoder.decode(boundary.data)))
        except PayloadDecodeError as exc:
            raise type(exc)(f"Boundary attestation {boundary.uid}: {exc}") from exc
        log_event(
            self.logger,
            f"boundary polygon built from {boundary.uid} with {len(polygon.shell)} vertices",
            stage="evaluate",
            attestation_id=boundary.uid,
            event="BOUNDARY_BUILT",
            status="ok",
            count=len(polygon.shell),
        )
        return polygon

    def _evaluate_one(
        self,
        index: int,
        observation: Attestation,
        polygon: BoundaryPolygon,
        aligner: PointAligner,
    ) -> ContainmentResult:
        try:
            location = extract_point(self.decoder.decode(observation.data))
        except PayloadDecodeError as exc:
            raise type(exc)(f"Observation {index + 1} ({observation.uid}): {exc}") from exc
        is_contained = self.contains(aligner.align(location), polygon)
        log_event(
            self.logger,
            f"observation {index + 1} point {'IS' if is_contained else 'IS NOT'} contained in polygon",
            level=logging.DEBUG,
            stage="evaluate",
            attestation_id=observation.uid,
            event="OBSERVATION_TESTED",
            status="ok",
        )
        return ContainmentResult(
            attestation_id=observation.uid,
            location=location,
            is_contained_in_polygon=is_contained,
        )

    def evaluate(self, boundary: Attestation, observations: Sequence[Attestation]) -> list[ContainmentResult]:
        started = time.monotonic()
        polygon = self.build_boundary(boundary)
        aligner = PointAligner(polygon.srs)

        results = [
            self._evaluate_one(index, observation, polygon, aligner)
            for index, observation in enumerate(observations)
        ]

        log_event(
            self.logger,
            f"containment test results ({len(results)} total)",
            stage="evaluate",
            attestation_id=boundary.uid,
            event="EVALUATE_DONE",
            status="ok",
            count=sum(1 for result in results if result.is_contained_in_polygon),
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return results


def evaluate(
    boundary: Attestation,
    observations: Sequence[Attestation],
    *,
    logger: logging.Logger | None = None,
) -> list[ContainmentResult]:
    return ContainmentEvaluator(logger=logger).evaluate(boundary, observations)
