"""Data models passed between the resolver and the containment evaluator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from easgeo.common.constants import DEFAULT_SRS, ZERO_UID
from easgeo.common.errors import PayloadDecodeError


def _normalise_uid(value: Any) -> str | None:
    if value in (None, ""):
        return None
    text = str(value)
    if text.lower() == ZERO_UID:
        return None
    return text


@dataclass(frozen=True)
class Attestation:
    uid: str
    schema_id: str
    ref_uid: str | None
    data: str

    @classmethod
    def from_graphql(cls, raw: dict[str, Any]) -> "Attestation":
        """Normalize a raw store record (`id`, `schemaId`, `refUID`, `decodedDataJson`)."""
        if not isinstance(raw, dict) or not raw.get("id"):
            raise PayloadDecodeError(f"Attestation record has no id: {raw!r}")
        return cls(
            uid=str(raw["id"]),
            schema_id=str(raw.get("schemaId") or ""),
            ref_uid=_normalise_uid(raw.get("refUID")),
            data=raw.get("decodedDataJson") or "",
        )


@dataclass(frozen=True)
class Location:
    geometry_type: str
    coordinates: Any
    srs: str = DEFAULT_SRS

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.geometry_type, "coordinates": self.coordinates, "srs": self.srs}


@dataclass(frozen=True)
class ContainmentResult:
    attestation_id: str
    location: Location
    is_contained_in_polygon: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "attestationId": self.attestation_id,
            "location": self.location.to_dict(),
            "isContainedInPolygon": self.is_contained_in_polygon,
        }


@dataclass(frozen=True)
class ResolvedAttestations:
    observations: tuple[Attestation, ...]
    boundary: Attestation
