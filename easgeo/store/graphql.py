"""GraphQL access to the attestation indexer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from easgeo.common.errors import RootAttestationNotFoundError
from easgeo.common.http import HttpClient, HttpRequestError, TimeoutConfig
from easgeo.common.logging import log_event

ATTESTATION_FIELDS = """
    id
    schemaId
    refUID
    decodedDataJson
"""

ROOT_AND_REFERENCING_QUERY = f"""query GetAttestation($uid: String!) {{
  attestation(where: {{ id: $uid }}) {{{ATTESTATION_FIELDS}  }}
  attestations(where: {{ refUID: {{ equals: $uid }} }}) {{{ATTESTATION_FIELDS}  }}
}}"""

ATTESTATION_QUERY = f"""query GetLocationAttestation($uid: String!) {{
  attestation(where: {{ id: $uid }}) {{{ATTESTATION_FIELDS}  }}
}}"""


@dataclass(frozen=True)
class RootQueryResult:
    root: dict[str, Any] | None
    referencing: list[dict[str, Any]]


def _graphql_errors(payload: dict[str, Any]) -> str:
    errors = payload.get("errors") or []
    messages = [str(error.get("message", error)) if isinstance(error, dict) else str(error) for error in errors]
    return "; ".join(messages)


def _is_record(value: Any) -> bool:
    return isinstance(value, dict) and bool(value.get("id"))


class AttestationStore:
    """Queries one chain's indexer endpoint over an HttpClient session."""

    def __init__(
        self,
        endpoint: str,
        http_client: HttpClient,
        *,
        timeout: TimeoutConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.http_client = http_client
        self.timeout = timeout
        self.logger = logger

    def _post(self, query: str, uid: str) -> dict[str, Any]:
        return self.http_client.post_json(
            self.endpoint,
            json_body={"query": query, "variables": {"uid": uid}},
            timeout=self.timeout,
        )

    def fetch_root_and_referencing(self, uid: str) -> RootQueryResult:
        payload = self._post(ROOT_AND_REFERENCING_QUERY, uid)
        data = payload.get("data")
        if not data:
            detail = _graphql_errors(payload)
            suffix = f": {detail}" if detail else ""
            raise RootAttestationNotFoundError(f"No data returned from GraphQL query for {uid}{suffix}")
        if not isinstance(data, dict):
            raise RootAttestationNotFoundError(f"Malformed data returned from GraphQL query for {uid}")

        root = data.get("attestation")
        if root is not None and not _is_record(root):
            raise RootAttestationNotFoundError(f"Malformed attestation record returned for {uid}")
        referencing = data.get("attestations") or []
        if not isinstance(referencing, list) or not all(_is_record(raw) for raw in referencing):
            raise RootAttestationNotFoundError(f"Malformed referencing attestations returned for {uid}")
        return RootQueryResult(root=root, referencing=referencing)

    def fetch_attestation(self, uid: str) -> dict[str, Any] | None:
        """Lenient lookup: HTTP status failures and missing records both give None.

        Transport failures (no response at all, unparseable body) still raise.
        """
        try:
            payload = self._post(ATTESTATION_QUERY, uid)
        except HttpRequestError as exc:
            if exc.status_code is None:
                raise
            log_event(
                self.logger,
                f"lookup for {uid} returned HTTP {exc.status_code}",
                level=logging.WARNING,
                stage="store",
                attestation_id=uid,
                event="LOOKUP_HTTP_STATUS",
                status="warning",
                error_code=exc.error_code,
            )
            return None

        data = payload.get("data")
        record = data.get("attestation") if isinstance(data, dict) else None
        return record if _is_record(record) else None
