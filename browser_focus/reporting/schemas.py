"""
Reporting data models for script runs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class StepReport(BaseModel):
    """One executed step."""

    index: int
    name: str
    ok: bool
    attempts: int = 1
    extracted: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    artifact_path: Optional[str] = None
    detail: str = "-"


class RunReport(BaseModel):
    """Outcome of one script run."""

    script: str
    browser: str
    started_at: datetime
    finished_at: datetime
    total: int
    success: int
    failure: int
    windows: List[str] = Field(default_factory=list, description="Windows open at the end")
    steps: List[StepReport]

    @property
    def ok(self) -> bool:
        return self.failure == 0
