"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from urllib.parse import urlparse

from easgeo.common.errors import ConfigError

HTTP_KEYS = {"connect_timeout", "read_timeout", "rate_per_sec"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_number(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number, got {value!r}")


def validate_endpoint_url(url: str, ctx: str) -> str:
    parsed = urlparse(str(url))
    if parsed.scheme != "https" or not parsed.netloc:
        raise ConfigError(f"{ctx} must be an https URL, got {url!r}")
    return str(url)


def validate_chains_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    if not isinstance(cfg, dict):
        raise ConfigError("chains config must be a mapping")
    _assert_required_keys(cfg, {"chains"}, "chains config")
    _assert_no_unknown_keys(cfg, {"chains", "http"}, "chains config", allow_unknown)

    chains = cfg["chains"]
    if not isinstance(chains, dict) or not chains:
        raise ConfigError("chains must be a non-empty mapping")

    normalised: dict[int, dict] = {}
    for key, entry in chains.items():
        try:
            chain_id = int(key)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Chain id must be an integer, got {key!r}") from exc
        ctx = f"chains[{chain_id}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{ctx} must be a mapping")
        _assert_required_keys(entry, {"name", "endpoint"}, ctx)
        _assert_no_unknown_keys(entry, {"name", "endpoint"}, ctx, allow_unknown)
        validate_endpoint_url(entry["endpoint"], f"{ctx}.endpoint")
        normalised[chain_id] = entry

    http = cfg.get("http") or {}
    if not isinstance(http, dict):
        raise ConfigError("http must be a mapping")
    _assert_no_unknown_keys(http, HTTP_KEYS, "http", allow_unknown)
    for key in HTTP_KEYS & set(http):
        _assert_positive_number(http[key], f"http.{key}")

    return {**cfg, "chains": normalised, "http": http}
