"""Run report aggregation."""

from __future__ import annotations

from pathlib import Path

from easgeo.common.fs import write_json
from easgeo.common.time_utils import utc_timestamp_iso
from easgeo.pipeline.runner import CheckOutcome


def build_run_report(
    run_id: str,
    chain_id: int,
    outcomes: list[CheckOutcome],
    failures: dict[str, dict],
) -> dict:
    totals = {
        "roots": len(outcomes) + len(failures),
        "observations": 0,
        "contained": 0,
        "not_contained": 0,
    }
    for outcome in outcomes:
        contained = sum(1 for result in outcome.results if result.is_contained_in_polygon)
        totals["observations"] += len(outcome.results)
        totals["contained"] += contained
        totals["not_contained"] += len(outcome.results) - contained

    status = "success"
    if failures and not outcomes:
        status = "error"
    elif failures:
        status = "partial"

    return {
        "run_id": run_id,
        "generated_at": utc_timestamp_iso(),
        "chain_id": chain_id,
        "status": status,
        "totals": totals,
        "checks": [outcome.to_dict() for outcome in outcomes],
        "errors": [{"attestationId": root_id, **failure} for root_id, failure in sorted(failures.items())],
    }


def write_run_report(path: Path, report: dict) -> Path:
    write_json(path, report)
    return path
