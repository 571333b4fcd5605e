"""Chain id to attestation store endpoint lookup."""

from __future__ import annotations

from typing import Mapping

from easgeo.common.constants import DEFAULT_CHAINS
from easgeo.common.errors import UnsupportedChainError

DEFAULT_ENDPOINTS = {chain_id: entry["endpoint"] for chain_id, entry in DEFAULT_CHAINS.items()}


def get_endpoint(chain_id: int, endpoints: Mapping[int, str] | None = None) -> str | None:
    table = DEFAULT_ENDPOINTS if endpoints is None else endpoints
    if isinstance(chain_id, bool):
        return None
    return table.get(chain_id)


def require_endpoint(chain_id: int, endpoints: Mapping[int, str] | None = None) -> str:
    endpoint = get_endpoint(chain_id, endpoints)
    if endpoint is None:
        raise UnsupportedChainError(chain_id)
    return endpoint
