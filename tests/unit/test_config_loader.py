from pathlib import Path

import pytest

from easgeo.common.config_loader import load_config
from easgeo.common.errors import ConfigError


def test_load_config_without_files_uses_builtin_chains(tmp_path: Path):
    bundle = load_config(tmp_path)

    assert set(bundle.chains) == {1, 10, 11155111}
    assert bundle.endpoints()[10] == "https://optimism.easscan.org/graphql"
    assert bundle.http.timeout.connect == 10.0
    assert bundle.http.rate_per_sec == 5.0


def test_load_config_reads_repository_defaults():
    bundle = load_config(Path(__file__).resolve().parents[2] / "config")

    assert bundle.endpoints()[11155111] == "https://sepolia.easscan.org/graphql"
    assert bundle.http.rate_per_sec == 2.0


def test_overlay_adds_chain_and_overrides_http(tmp_path: Path):
    base = tmp_path / "base"
    overlay = tmp_path / "overlay"
    base.mkdir()
    overlay.mkdir()
    (base / "chains.yml").write_text(
        """chains:
  1:
    name: mainnet
    endpoint: https://mainnet.easscan.org/graphql
http:
  read_timeout: 15
""",
        encoding="utf-8",
    )
    (overlay / "chains.yml").write_text(
        """chains:
  "8453":
    name: base
    endpoint: https://base.easscan.org/graphql
http:
  read_timeout: 45
""",
        encoding="utf-8",
    )

    bundle = load_config(base, overlay_config_dir=overlay)

    assert bundle.endpoints()[8453] == "https://base.easscan.org/graphql"
    assert bundle.endpoints()[1] == "https://mainnet.easscan.org/graphql"
    assert bundle.http.timeout.read == 45.0


def test_overlay_can_repoint_existing_chain(tmp_path: Path):
    (tmp_path / "chains.yml").write_text(
        """chains:
  11155111:
    endpoint: https://indexer.internal.example/graphql
""",
        encoding="utf-8",
    )

    bundle = load_config(None, overlay_config_dir=tmp_path)

    assert bundle.chains[11155111]["name"] == "sepolia"
    assert bundle.endpoints()[11155111] == "https://indexer.internal.example/graphql"


def test_empty_overlay_file_is_ignored(tmp_path: Path):
    (tmp_path / "chains.yml").write_text("", encoding="utf-8")

    bundle = load_config(tmp_path)

    assert set(bundle.chains) == {1, 10, 11155111}


def test_non_mapping_config_rejected(tmp_path: Path):
    (tmp_path / "chains.yml").write_text("- not\n- a\n- mapping\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_plain_http_endpoint_rejected(tmp_path: Path):
    (tmp_path / "chains.yml").write_text(
        """chains:
  10:
    name: optimism
    endpoint: http://optimism.easscan.org/graphql
""",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError, match="https"):
        load_config(tmp_path)


def test_unknown_keys_rejected_unless_allowed(tmp_path: Path):
    (tmp_path / "chains.yml").write_text(
        """chains:
  10:
    name: optimism
    endpoint: https://optimism.easscan.org/graphql
    explorer: https://optimism.easscan.org
""",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError, match="Unknown keys"):
        load_config(tmp_path)
    assert load_config(tmp_path, allow_unknown=True).chains[10]["explorer"] == "https://optimism.easscan.org"


def test_non_integer_chain_id_rejected(tmp_path: Path):
    (tmp_path / "chains.yml").write_text(
        """chains:
  optimism:
    name: optimism
    endpoint: https://optimism.easscan.org/graphql
""",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError, match="integer"):
        load_config(tmp_path)


def test_invalid_http_value_rejected(tmp_path: Path):
    (tmp_path / "chains.yml").write_text("http:\n  rate_per_sec: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="positive"):
        load_config(tmp_path)
