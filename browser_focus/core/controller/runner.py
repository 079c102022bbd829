# browser_focus/core/controller/runner.py
"""
Sequential runner for ActionSpec[].

Responsibilities:
- Validate each spec via registry
- Execute actions against an AutomationInterface with retries
- Optional random per-step delay
- On failure: save screenshot artifact (if artifacts_dir is set)
- Return per-step outcomes for CLI rendering and reporting
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .. import registry
from ..action import ActionSpec
from ..errors import ActionExecutionError
from ..interface import AutomationInterface

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    """UI-friendly outcome used by CLI and reporters."""

    index: int
    name: str
    ok: bool
    detail: str = "-"
    artifact_path: str | None = None
    attempts: int = 1
    extracted: Any = None
    meta: dict[str, Any] | None = None


class Runner:
    def __init__(
        self,
        *,
        retries: int = 0,
        artifacts_dir: Path | None = None,
        random_delay_ms: tuple[int, int] | None = None,
        stop_on_failure: bool = False,
    ) -> None:
        self.retries = max(0, retries)
        self.artifacts_dir = artifacts_dir
        self.random_delay_ms = random_delay_ms
        self.stop_on_failure = stop_on_failure
        if self.artifacts_dir:
            self.artifacts_dir.mkdir(parents=True, exist_ok=True)

    async def run(self, iface: AutomationInterface, specs: list[ActionSpec]) -> list[StepOutcome]:
        outcomes: list[StepOutcome] = []

        for i, spec in enumerate(specs, start=1):
            outcome = await self._run_step(iface, i, spec)
            outcomes.append(outcome)
            await self._maybe_delay()
            if not outcome.ok and self.stop_on_failure:
                logger.info("stopping after failed step %d (%s)", i, spec.name)
                break

        return outcomes

    async def _run_step(self, iface: AutomationInterface, index: int, spec: ActionSpec) -> StepOutcome:
        name = spec.name

        # 1) validate params
        try:
            _meta, params = registry.validate_spec(spec)
        except (ValueError, KeyError) as e:
            return StepOutcome(index=index, name=name, ok=False, detail=f"invalid spec: {e}")

        # 2) execute with retries
        fn = registry.get_action(name)
        attempt = 0
        while True:
            attempt += 1
            try:
                res = await fn(iface, params)
            except ActionExecutionError as e:
                if attempt > self.retries:
                    logger.warning("step %d (%s) failed: %s", index, name, e)
                    artifact = await self._on_failure(iface, index, name)
                    return StepOutcome(
                        index=index,
                        name=name,
                        ok=False,
                        detail=str(e),
                        artifact_path=artifact,
                        attempts=attempt,
                    )
                logger.info("step %d (%s) failed, retry %d/%d", index, name, attempt, self.retries)
                # simple backoff
                await asyncio.sleep(0.5 * attempt)
                continue

            return StepOutcome(
                index=index,
                name=name,
                ok=bool(res.ok),
                detail=_detail(res.extracted_content, res.meta),
                attempts=attempt,
                extracted=res.extracted_content,
                meta=res.meta,
            )

    async def _maybe_delay(self) -> None:
        if not self.random_delay_ms:
            return
        low, high = self.random_delay_ms
        if low < 0 or high < 0 or high < low:
            return
        ms = random.randint(low, high)
        await asyncio.sleep(ms / 1000)

    async def _on_failure(self, iface: AutomationInterface, index: int, name: str) -> str | None:
        """Best-effort failure artifact (screenshot)."""
        if not self.artifacts_dir or not iface.started:
            return None
        png = self.artifacts_dir / f"fail-{index:02d}-{name}.png"
        try:
            await iface.screenshot(str(png), full_page=True)
            return str(png)
        except Exception as e:  # noqa: BLE001
            logger.debug("no failure screenshot for step %d: %s", index, e)
            return None


def _detail(extracted: Any, meta: dict[str, Any]) -> str:
    """Human-friendly detail for CLI."""
    if extracted is not None:
        text = str(extracted)
        return (text[:120] + "…") if len(text) > 120 else text
    if "url" in meta:
        return str(meta["url"])
    if "selector" in meta:
        return f'selector="{meta["selector"]}"'
    if "frame" in meta:
        return f"frame={meta['frame']}"
    return "-"
