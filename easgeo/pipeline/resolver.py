"""Resolution of a root attestation into observations plus a boundary attestation.

The fetch sequence is strictly ordered; each step needs what the previous one
produced::

    IDLE -> ROOT_FETCHED -> REFERENCE_EXTRACTED -> BOUNDARY_RESOLVED -> DONE

Any error moves the resolver to FAILED, a set cancel event to CANCELLED.
The root attestation only supplies the `locationUID` forward reference and is
never part of the observations.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Mapping

from easgeo.common.constants import LOCATION_UID_FIELD, ZERO_UID
from easgeo.common.errors import (
    BoundaryAttestationNotFoundError,
    LocationReferenceMissingError,
    NoReferencingAttestationsError,
    PayloadDecodeError,
    PipelineError,
    ResolutionCancelledError,
    RootAttestationNotFoundError,
)
from easgeo.common.http import HttpClient, TimeoutConfig
from easgeo.common.logging import log_event
from easgeo.common.models import Attestation, ResolvedAttestations
from easgeo.pipeline.decode import PayloadDecoder
from easgeo.store.chains import require_endpoint
from easgeo.store.graphql import AttestationStore, RootQueryResult


class ResolutionState(enum.Enum):
    IDLE = "idle"
    ROOT_FETCHED = "root_fetched"
    REFERENCE_EXTRACTED = "reference_extracted"
    BOUNDARY_RESOLVED = "boundary_resolved"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


def extract_location_uid(root: dict, decoder: PayloadDecoder) -> str:
    root_id = root.get("id")
    raw = root.get("decodedDataJson")
    if not raw:
        raise LocationReferenceMissingError(f"No locationUID found for attestation {root_id}: empty payload")
    try:
        decoded = decoder.decode(raw)
    except PayloadDecodeError as exc:
        raise LocationReferenceMissingError(f"Could not decode payload of attestation {root_id}: {exc}") from exc

    location_uid = decoded.get(LOCATION_UID_FIELD)
    if not isinstance(location_uid, str) or not location_uid.strip() or location_uid.lower() == ZERO_UID:
        raise LocationReferenceMissingError(f"No locationUID found for attestation {root_id}")
    return location_uid.strip()


class AttestationResolver:
    def __init__(
        self,
        http_client: HttpClient,
        *,
        endpoints: Mapping[int, str] | None = None,
        timeout: TimeoutConfig | None = None,
        decoder: PayloadDecoder | None = None,
        logger: logging.Logger | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.http_client = http_client
        self.endpoints = endpoints
        self.timeout = timeout
        self.decoder = decoder or PayloadDecoder()
        self.logger = logger
        self.cancel_event = cancel_event
        self.state = ResolutionState.IDLE

    def _advance(self, state: ResolutionState, **fields) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            self.state = ResolutionState.CANCELLED
            raise ResolutionCancelledError(f"Resolution cancelled before {state.value}")
        self.state = state
        log_event(self.logger, f"resolution state {state.value}", stage="resolve", event=state.name, status="ok", **fields)

    def _store(self, chain_id: int) -> AttestationStore:
        endpoint = require_endpoint(chain_id, self.endpoints)
        return AttestationStore(endpoint, self.http_client, timeout=self.timeout, logger=self.logger)

    def _observations(self, initial: RootQueryResult, root_id: str) -> tuple[Attestation, ...]:
        if not initial.referencing:
            raise NoReferencingAttestationsError(f"No attestations found referencing attestationId: {root_id}")
        log_event(
            self.logger,
            f"found {len(initial.referencing)} attestations referencing {root_id}",
            stage="resolve",
            attestation_id=root_id,
            event="REFERENCING_FOUND",
            status="ok",
            count=len(initial.referencing),
        )
        return tuple(Attestation.from_graphql(raw) for raw in initial.referencing)

    def resolve(self, chain_id: int, root_attestation_id: str) -> ResolvedAttestations:
        started = time.monotonic()
        self.state = ResolutionState.IDLE
        try:
            store = self._store(chain_id)
            if self.cancel_event is not None and self.cancel_event.is_set():
                self.state = ResolutionState.CANCELLED
                raise ResolutionCancelledError("Resolution cancelled before the first query")

            initial = store.fetch_root_and_referencing(root_attestation_id)
            self._advance(ResolutionState.ROOT_FETCHED, chain_id=chain_id, attestation_id=root_attestation_id)

            observations = self._observations(initial, root_attestation_id)
            if initial.root is None:
                raise RootAttestationNotFoundError(f"No attestation found for attestationId: {root_attestation_id}")
            location_uid = extract_location_uid(initial.root, self.decoder)
            self._advance(ResolutionState.REFERENCE_EXTRACTED, chain_id=chain_id, attestation_id=location_uid)

            raw_boundary = store.fetch_attestation(location_uid)
            if raw_boundary is None:
                raise BoundaryAttestationNotFoundError(f"No location attestation found for locationUID: {location_uid}")
            boundary = Attestation.from_graphql(raw_boundary)
            self._advance(ResolutionState.BOUNDARY_RESOLVED, chain_id=chain_id, attestation_id=boundary.uid)
            self._advance(
                ResolutionState.DONE,
                chain_id=chain_id,
                attestation_id=root_attestation_id,
                count=len(observations),
                duration_ms=int((time.monotonic() - started) * 1000),
            )
        except PipelineError as exc:
            if self.state is not ResolutionState.CANCELLED:
                self.state = ResolutionState.FAILED
            log_event(
                self.logger,
                str(exc),
                level=logging.WARNING,
                stage="resolve",
                chain_id=chain_id,
                attestation_id=root_attestation_id,
                event="RESOLVE_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            raise

        return ResolvedAttestations(observations=observations, boundary=boundary)
