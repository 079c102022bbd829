"""
Structured action return value, reported up to the runner/CLI.
"""
# @file purpose: Define ActionResult model for action outputs.

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """
    - ok: whether the action succeeded
    - extracted_content: value read by the action (text, script result, url...)
    - meta: diagnostics (selector, url, window handle...) for logs and reports
    """

    ok: bool = True
    extracted_content: Optional[Any] = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(cls, **meta: Any) -> "ActionResult":
        return cls(ok=True, meta=meta)

    @classmethod
    def extracted(cls, value: Any, **meta: Any) -> "ActionResult":
        return cls(ok=True, extracted_content=value, meta=meta)
