import csv
import json
from datetime import datetime, timezone

from browser_focus.core.controller.runner import StepOutcome
from browser_focus.reporting.writer import build_report, write_report


def test_report_round_trip_to_disk(tmp_path) -> None:
    now = datetime.now(timezone.utc)
    outcomes = [
        StepOutcome(index=1, name="open_url", ok=True, detail="https://one.example/"),
        StepOutcome(index=2, name="execute_script", ok=True, extracted=12),
        StepOutcome(
            index=3,
            name="focus_window",
            ok=False,
            detail="[focus_window] failed",
            artifact_path="a/fail-03-focus_window.png",
            attempts=2,
        ),
    ]
    report = build_report("s.json", "chromium", outcomes, started_at=now, finished_at=now)
    assert (report.total, report.success, report.failure) == (3, 2, 1)
    assert not report.ok
    assert report.steps[1].extracted == "12"

    json_path, csv_path = write_report(report, tmp_path / "out")
    assert json.loads(json_path.read_text(encoding="utf-8"))["browser"] == "chromium"
    with csv_path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][:3] == ["index", "name", "ok"]
    assert rows[3][2] == "FAIL" and rows[3][3] == "2"
