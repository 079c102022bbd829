# browser_focus/reporting/writer.py
"""
Build a RunReport from runner outcomes and persist it as JSON and CSV.
"""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Tuple

from ..core.controller.runner import StepOutcome
from .schemas import RunReport, StepReport


def build_report(
    script: str,
    browser: str,
    outcomes: Iterable[StepOutcome],
    *,
    started_at: datetime,
    finished_at: datetime,
    windows: List[str] | None = None,
) -> RunReport:
    steps = [
        StepReport(
            index=o.index,
            name=o.name,
            ok=o.ok,
            attempts=o.attempts,
            extracted=None if o.extracted is None else str(o.extracted),
            meta=o.meta or {},
            artifact_path=o.artifact_path,
            detail=o.detail,
        )
        for o in outcomes
    ]
    success = sum(1 for s in steps if s.ok)
    return RunReport(
        script=script,
        browser=browser,
        started_at=started_at,
        finished_at=finished_at,
        total=len(steps),
        success=success,
        failure=len(steps) - success,
        windows=windows or [],
        steps=steps,
    )


def write_report(report: RunReport, out_dir: Path) -> Tuple[Path, Path]:
    """
    Write a RunReport into out_dir as JSON and CSV.
    Returns (json_path, csv_path).
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / "report.json"
    csv_path = out_dir / "report.csv"

    json_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")

    # CSV: one row per step
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["index", "name", "ok", "attempts", "extracted", "artifact", "detail"])
        for step in report.steps:
            writer.writerow(
                [
                    step.index,
                    step.name,
                    "OK" if step.ok else "FAIL",
                    step.attempts,
                    step.extracted or "",
                    step.artifact_path or "",
                    step.detail,
                ]
            )

    return json_path, csv_path
