"""CLI entrypoint for attestation containment checks."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from easgeo.common.config_loader import load_config
from easgeo.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from easgeo.common.errors import ConfigError, PipelineError
from easgeo.common.http import HttpClient, RetryConfig
from easgeo.common.ids import generate_run_id
from easgeo.common.logging import build_logger, log_event
from easgeo.pipeline.reports import build_run_report, write_run_report
from easgeo.pipeline.runner import CheckOutcome, run_check


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("attestation_ids", nargs="*", metavar="ATTESTATION_ID")
    parser.add_argument("--chain-id", type=int, default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--output", default=None)
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--max-attempts", type=int, default=1)
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def _emit(payload: dict, output: str | None) -> None:
    if output:
        write_run_report(Path(output), payload)
    else:
        sys.stdout.write(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n")


def run_command(args: argparse.Namespace, http_client: HttpClient | None = None) -> int:
    run_id = args.run_id or generate_run_id()
    log_level = "WARNING" if args.log_level == "WARN" else args.log_level
    logger = build_logger(run_id, level=log_level, log_path=Path(args.log_file) if args.log_file else None)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    bundle = load_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)

    if args.command == "chains":
        _emit({str(chain_id): entry for chain_id, entry in sorted(bundle.chains.items())}, args.output)
        return EXIT_SUCCESS

    if args.chain_id is None:
        raise ConfigError("--chain-id is required for check")
    if not args.attestation_ids:
        raise ConfigError("at least one ATTESTATION_ID is required for check")

    outcomes: list[CheckOutcome] = []
    failures: dict[str, dict] = {}
    retry_config = RetryConfig(max_attempts=max(1, args.max_attempts))

    log_event(logger, "check start", run_id=run_id, stage="check", chain_id=args.chain_id, event="CHECK_START", status="ok")
    for root_id in args.attestation_ids:
        try:
            outcomes.append(
                run_check(
                    args.chain_id,
                    root_id,
                    endpoints=bundle.endpoints(),
                    timeout=bundle.http.timeout,
                    rate_per_sec=bundle.http.rate_per_sec,
                    retry_config=retry_config,
                    http_client=http_client,
                    logger=logger,
                )
            )
        except PipelineError as exc:
            failures[root_id] = {"error_code": exc.error_code, "message": str(exc)}
            log_event(
                logger,
                f"check failed for attestation {root_id}",
                run_id=run_id,
                stage="check",
                chain_id=args.chain_id,
                attestation_id=root_id,
                event="CHECK_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            if args.strict:
                return EXIT_HARD_FAIL
    log_event(
        logger,
        "check end",
        run_id=run_id,
        stage="check",
        chain_id=args.chain_id,
        event="CHECK_END",
        status="ok",
        count=len(outcomes),
    )

    _emit(build_run_report(run_id, args.chain_id, outcomes, failures), args.output)
    if failures and not outcomes:
        return EXIT_HARD_FAIL
    if failures:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError as exc:
        sys.stderr.write(f"{exc.error_code}: {exc}\n")
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
