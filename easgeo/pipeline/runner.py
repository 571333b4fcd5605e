"""Whole-pipeline runner: resolve then evaluate, retried as one unit."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from easgeo.common.http import HttpClient, RetryableHttpError, RetryConfig, TimeoutConfig
from easgeo.common.logging import log_event
from easgeo.common.models import ContainmentResult, ResolvedAttestations
from easgeo.pipeline.containment import ContainmentEvaluator
from easgeo.pipeline.resolver import AttestationResolver


@dataclass(frozen=True)
class CheckOutcome:
    chain_id: int
    root_attestation_id: str
    resolved: ResolvedAttestations
    results: list[ContainmentResult]

    def to_dict(self) -> dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "attestationId": self.root_attestation_id,
            "locationAttestationId": self.resolved.boundary.uid,
            "observationCount": len(self.resolved.observations),
            "containedCount": sum(1 for result in self.results if result.is_contained_in_polygon),
            "results": [result.to_dict() for result in self.results],
        }


def _run_once(
    http_client: HttpClient,
    chain_id: int,
    root_attestation_id: str,
    *,
    endpoints: Mapping[int, str] | None,
    timeout: TimeoutConfig | None,
    logger: logging.Logger | None,
    cancel_event: threading.Event | None,
) -> CheckOutcome:
    resolver = AttestationResolver(
        http_client,
        endpoints=endpoints,
        timeout=timeout,
        logger=logger,
        cancel_event=cancel_event,
    )
    resolved = resolver.resolve(chain_id, root_attestation_id)
    results = ContainmentEvaluator(logger=logger).evaluate(resolved.boundary, resolved.observations)
    return CheckOutcome(
        chain_id=chain_id,
        root_attestation_id=root_attestation_id,
        resolved=resolved,
        results=results,
    )


def run_check(
    chain_id: int,
    root_attestation_id: str,
    *,
    endpoints: Mapping[int, str] | None = None,
    timeout: TimeoutConfig | None = None,
    rate_per_sec: float = 5.0,
    retry_config: RetryConfig | None = None,
    http_client: HttpClient | None = None,
    logger: logging.Logger | None = None,
    cancel_event: threading.Event | None = None,
) -> CheckOutcome:
    retry_cfg = retry_config or RetryConfig()
    owns_client = http_client is None
    client = http_client or HttpClient(timeout=timeout, rate_per_sec=rate_per_sec)

    def _log_retry(retry_state) -> None:
        log_event(
            logger,
            f"retrying check after attempt {retry_state.attempt_number}",
            level=logging.WARNING,
            stage="run",
            chain_id=chain_id,
            attestation_id=root_attestation_id,
            event="CHECK_RETRY",
            status="retry",
        )

    # Retries restart from the first query; the boundary reference is only
    # valid for the root fetch that produced it.
    @retry(
        stop=stop_after_attempt(retry_cfg.max_attempts),
        wait=wait_exponential_jitter(
            initial=retry_cfg.multiplier,
            max=retry_cfg.max_wait,
            jitter=retry_cfg.jitter,
        ),
        retry=retry_if_exception_type(RetryableHttpError),
        before_sleep=_log_retry,
        reraise=True,
    )
    def _wrapped() -> CheckOutcome:
        return _run_once(
            client,
            chain_id,
            root_attestation_id,
            endpoints=endpoints,
            timeout=timeout,
            logger=logger,
            cancel_event=cancel_event,
        )

    try:
        return _wrapped()
    finally:
        if owns_client:
            client.close()
