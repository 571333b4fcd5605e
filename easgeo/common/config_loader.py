"""Configuration loading and validation."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from easgeo.common.constants import DEFAULT_CHAINS
from easgeo.common.errors import ConfigError
from easgeo.common.fs import read_yaml
from easgeo.common.http import TimeoutConfig
from easgeo.common.schema import validate_chains_config

CHAINS_FILENAME = "chains.yml"


@dataclass(frozen=True)
class HttpSettings:
    timeout: TimeoutConfig
    rate_per_sec: float


@dataclass(frozen=True)
class ConfigBundle:
    chains: dict[int, dict]
    http: HttpSettings

    def endpoints(self) -> dict[int, str]:
        return {chain_id: entry["endpoint"] for chain_id, entry in self.chains.items()}


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _int_chain_keys(cfg: dict) -> dict:
    chains = cfg.get("chains")
    if not isinstance(chains, dict):
        return cfg
    keyed = {}
    for key, value in chains.items():
        try:
            keyed[int(key)] = value
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Chain id must be an integer, got {key!r}") from exc
    return {**cfg, "chains": keyed}


def _read_optional_yaml(path: Path | None) -> dict | None:
    if path is None or not path.exists():
        return None
    loaded = read_yaml(path)
    if loaded is None:
        return None
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return _int_chain_keys(loaded)


def default_config() -> dict:
    return {"chains": copy.deepcopy(DEFAULT_CHAINS), "http": {}}


def load_config(
    config_dir: Path | None = None,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    cfg = default_config()
    for directory in (config_dir, overlay_config_dir):
        if directory is None:
            continue
        layer = _read_optional_yaml(directory / CHAINS_FILENAME)
        if layer is not None:
            cfg = _deep_merge(cfg, layer)

    validated = validate_chains_config(cfg, allow_unknown=allow_unknown)
    http = validated["http"]
    defaults = TimeoutConfig()
    return ConfigBundle(
        chains=validated["chains"],
        http=HttpSettings(
            timeout=TimeoutConfig(
                connect=float(http.get("connect_timeout", defaults.connect)),
                read=float(http.get("read_timeout", defaults.read)),
            ),
            rate_per_sec=float(http.get("rate_per_sec", 5.0)),
        ),
    )
