"""
CLI entrypoint.

doctor:   print effective settings
actions:  list registered actions
validate: offline ActionSpec[] check (no browser)
run:      execute a script through the AutomationInterface and write a report
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Tuple, get_args

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core import registry
from ..core.action import ActionSpec
from ..core.controller.runner import Runner, StepOutcome
from ..core.errors import BrowserFocusError
from ..core.interface import AutomationInterface
from ..core.logging_config import configure_logging
from ..core.settings import BrowserName, settings
from ..reporting.writer import build_report, write_report

app = typer.Typer(help="browser-focus CLI")
console = Console()
logger = logging.getLogger(__name__)


def _load_specs(script: Path, cmd: str) -> list[ActionSpec]:
    if not script.exists():
        typer.secho(f"[{cmd}] file not found: {script}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    try:
        data = json.loads(script.read_text(encoding="utf-8"))
        specs = TypeAdapter(list[ActionSpec]).validate_python(data)
    except json.JSONDecodeError as je:
        typer.secho(f"[{cmd}] not valid JSON: {je}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    except ValidationError as ve:
        typer.secho(f"[{cmd}] invalid file format for ActionSpec[]", fg=typer.colors.RED)
        console.print(ve)
        raise typer.Exit(code=2)

    # importing the implementations registers them
    import browser_focus.actions.impl  # noqa: F401

    return specs


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings to confirm CLI is usable."""
    console.print("[bold green]browser-focus[/] environment")
    console.print(f"- browser:  {settings.browser}")
    console.print(f"- headless: {settings.headless}")
    console.print(f"- timeouts: default {settings.default_timeout_ms}ms, "
                  f"script {settings.script_timeout_ms}ms, window {settings.window_timeout_ms}ms")
    console.print(f"- log level: {settings.log_level}")


@app.command("actions")
def actions() -> None:
    """List registered actions and their parameters."""
    import browser_focus.actions.impl  # noqa: F401

    table = Table(title="Actions", show_header=True, header_style="bold")
    table.add_column("name")
    table.add_column("params")
    table.add_column("summary")
    for name, meta in registry.list_actions().items():
        fields = ", ".join(meta.params_model.model_fields) if meta.params_model else "-"
        table.add_row(name, fields, meta.summary)
    console.print(table)


@app.command("validate")
def validate(script: Path = typer.Argument(..., help="Path to JSON file of ActionSpec[]")) -> None:
    """
    Offline spec validation: read JSON array [{name, args}] and validate each item
    against the params model bound in the registry. Print a table result and exit
    non-zero if any failures.
    """
    specs = _load_specs(script, "validate")

    table = Table(title="Validation Results", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("result")
    table.add_column("detail")

    failures = 0
    for i, spec in enumerate(specs, start=1):
        try:
            registry.validate_spec(spec)
            table.add_row(str(i), spec.name, "[green]OK[/]", "-")
        except KeyError as ke:
            failures += 1
            table.add_row(str(i), spec.name, "[red]Not Registered[/]", escape(str(ke)))
        except ValidationError as ve:
            failures += 1
            msg = ve.errors()[0].get("msg", "invalid args")
            table.add_row(str(i), spec.name, "[red]Invalid Args[/]", msg)
        except ValueError as ve:
            failures += 1
            table.add_row(str(i), spec.name, "[red]Invalid Args[/]", escape(str(ve)))

    console.print(table)
    if failures:
        raise typer.Exit(code=1)
    typer.secho("[validate] all specs passed", fg=typer.colors.GREEN)


@app.command("run")
def run(
    script: Path = typer.Argument(..., help="Path to JSON file of ActionSpec[]"),
    browser: Optional[str] = typer.Option(
        None, "--browser", help="chromium | firefox | webkit (default from BF_BROWSER)"
    ),
    headless: Optional[bool] = typer.Option(
        None, "--headless/--no-headless", help="Run browser headless"
    ),
    slowmo: int = typer.Option(0, "--slowmo", help="Slow motion in ms (debug)"),
    retries: int = typer.Option(0, "--retries", help="Retry times on ActionExecutionError"),
    stop_on_failure: bool = typer.Option(False, "--stop-on-failure", help="Stop at first failure"),
    artifacts_dir: Path = typer.Option(
        Path("artifacts"), "--artifacts-dir", help="Where to save failure screenshots"
    ),
    report_dir: Optional[Path] = typer.Option(
        None, "--report-dir", help="Write report.json/report.csv here"
    ),
    # NOTE: Typer parses tuple as two space-separated ints, e.g. "--random-delay-ms 500 1500"
    random_delay_ms: Tuple[int, int] = typer.Option(
        (0, 0),
        "--random-delay-ms",
        help="Random delay range in ms, e.g. --random-delay-ms 500 1500",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING..."),
) -> None:
    """
    Execute a list of actions: read JSON -> structure check -> run in browser.
    Prints a table of results; returns non-zero on any failure.
    """
    overrides: dict[str, Any] = {}
    if browser is not None:
        if browser not in get_args(BrowserName):
            typer.secho(f"[run] unknown browser: {browser}", fg=typer.colors.RED)
            raise typer.Exit(code=2)
        overrides["browser"] = browser
    if headless is not None:
        overrides["headless"] = headless
    if slowmo:
        overrides["slow_mo_ms"] = slowmo
    cfg = settings.model_copy(update=overrides)
    configure_logging(log_level or cfg.log_level)

    specs = _load_specs(script, "run")

    async def _run() -> int:
        started_at = datetime.now(timezone.utc)
        rnd = None if (random_delay_ms[0] == 0 and random_delay_ms[1] == 0) else random_delay_ms
        runner = Runner(
            retries=retries,
            artifacts_dir=artifacts_dir,
            random_delay_ms=rnd,
            stop_on_failure=stop_on_failure,
        )
        async with AutomationInterface(cfg) as iface:
            rows: list[StepOutcome] = await runner.run(iface, specs)
            try:
                windows = [w.label() for w in await iface.windows()]
            except BrowserFocusError as e:
                logger.warning("could not list windows at end of run: %s", e)
                windows = []

        _render(rows)
        if report_dir is not None:
            report = build_report(
                str(script),
                cfg.browser,
                rows,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
                windows=windows,
            )
            json_path, csv_path = write_report(report, report_dir)
            console.print(f"[bold green]Report written[/]: {json_path}  |  {csv_path}")
        return 1 if any(not r.ok for r in rows) else 0

    try:
        code = asyncio.run(_run())
    except BrowserFocusError as e:
        typer.secho(f"[run] browser session failed: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    if code != 0:
        raise typer.Exit(code=code)
    typer.secho("[run] completed successfully", fg=typer.colors.GREEN)


def _render(rows: list[StepOutcome]) -> None:
    table = Table(title="Run Results", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("result")
    table.add_column("detail")

    for r in rows:
        result = "[green]OK[/]" if r.ok else "[red]FAIL[/]"
        detail = r.detail
        if (not r.ok) and r.artifact_path:
            detail = f"{detail} (artifact: {r.artifact_path})"
        table.add_row(str(r.index), r.name, result, escape(detail))

    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
