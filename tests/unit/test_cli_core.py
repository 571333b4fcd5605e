import json
from pathlib import Path

from easgeo.cli import main, parse_args, run_command
from easgeo.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS


def test_parse_args_defaults():
    args = parse_args(["check", "0xAAA"])
    assert args.command == "check"
    assert args.attestation_ids == ["0xAAA"]
    assert args.chain_id is None
    assert args.overlay_config_dir is None
    assert args.max_attempts == 1
    assert args.strict is False


def test_parse_args_accepts_multiple_ids_and_options():
    args = parse_args(["check", "0xAAA", "0xDDD", "--chain-id", "10", "--overlay-config-dir", "config/live", "--strict"])
    assert args.attestation_ids == ["0xAAA", "0xDDD"]
    assert args.chain_id == 10
    assert args.overlay_config_dir == "config/live"
    assert args.strict is True


def test_chains_command_writes_endpoint_table(tmp_path: Path):
    output = tmp_path / "chains.json"
    args = parse_args(["chains", "--config-dir", str(tmp_path), "--output", str(output)])

    assert run_command(args) == EXIT_SUCCESS
    chains = json.loads(output.read_text(encoding="utf-8"))
    assert chains["1"]["endpoint"] == "https://mainnet.easscan.org/graphql"
    assert set(chains) == {"1", "10", "11155111"}


def test_check_without_chain_id_is_hard_failure(tmp_path: Path):
    assert main(["check", "0xAAA", "--config-dir", str(tmp_path)]) == EXIT_HARD_FAIL


def test_check_without_ids_is_hard_failure(tmp_path: Path):
    assert main(["check", "--chain-id", "1", "--config-dir", str(tmp_path)]) == EXIT_HARD_FAIL


def test_unsupported_chain_reported_as_hard_failure(tmp_path: Path):
    output = tmp_path / "report.json"
    code = main(["check", "0xAAA", "--chain-id", "137", "--config-dir", str(tmp_path), "--output", str(output)])

    assert code == EXIT_HARD_FAIL
    report = json.loads(output.read_text(encoding="utf-8"))
    assert report["status"] == "error"
    assert report["errors"][0]["error_code"] == "UNSUPPORTED_CHAIN"
