"""Decoding of indexer `decodedDataJson` payloads into name-keyed mappings.

The indexer serialises schema-decoded attestation data as a JSON array of
entries shaped like::

    {"name": "locationUID", "type": "bytes32", "signature": "bytes32 locationUID",
     "value": {"name": "locationUID", "type": "bytes32", "value": "0x..."}}

Flat entries (`{"name": ..., "value": <scalar>}`) are accepted as well.
Numeric ABI values arrive as `{"type": "BigNumber", "hex": "0x..."}` objects
and are converted to `int`.
"""

from __future__ import annotations

import json
from typing import Any

from easgeo.common.errors import PayloadDecodeError


def _normalise_value(value: Any) -> Any:
    if isinstance(value, dict):
        if value.get("type") == "BigNumber" and "hex" in value:
            try:
                return int(str(value["hex"]), 16)
            except ValueError as exc:
                raise PayloadDecodeError(f"Invalid BigNumber hex: {value['hex']!r}") from exc
        return {key: _normalise_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_normalise_value(item) for item in value]
    return value


def _entry_value(entry: dict[str, Any]) -> Any:
    value = entry.get("value")
    # Nested `{name, type, value}` wrapper from the SDK's schema encoder.
    if isinstance(value, dict) and "value" in value and ("name" in value or "type" in value):
        if value.get("type") != "BigNumber":
            value = value["value"]
    return _normalise_value(value)


def decode(raw: str | None) -> dict[str, Any]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise PayloadDecodeError("Attestation payload is empty")
    if not isinstance(raw, str):
        raise PayloadDecodeError(f"Attestation payload must be a JSON string, got {type(raw).__name__}")

    try:
        entries = json.loads(raw)
    except ValueError as exc:
        raise PayloadDecodeError(f"Attestation payload is not valid JSON: {exc}") from exc

    if not isinstance(entries, list):
        raise PayloadDecodeError("Attestation payload must be a JSON array of fields")

    decoded: dict[str, Any] = {}
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict) or "name" not in entry:
            raise PayloadDecodeError(f"Payload entry {idx} has no field name")
        name = str(entry["name"])
        if not name:
            raise PayloadDecodeError(f"Payload entry {idx} has an empty field name")
        decoded[name] = _entry_value(entry)
    return decoded


class PayloadDecoder:
    def decode(self, raw: str | None) -> dict[str, Any]:
        return decode(raw)
