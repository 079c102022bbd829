"""
Window bookkeeping data contracts.
- WindowHandle: opaque id issued by the session driver
- WindowRecord: snapshot of one live window (position, title, url, frame focus)
- ElementRef: driver-agnostic element reference (e.g. the <iframe> to focus)
- FrameRef: anything focus_frame() accepts
"""
# @file purpose: Define window/frame data contracts.

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# opaque, issued by the session driver; invalid once its window closes
WindowHandle = str


class WindowRecord(BaseModel):
    """One live browser window, as seen at query time."""

    handle: str
    index: int = Field(..., ge=0, description="Position in the live ordering at query time.")
    title: str = ""
    url: str = ""
    frame: Optional[str] = Field(
        default=None, description="Focused frame inside the window; None for the top document."
    )

    def label(self) -> str:
        frame = f" [frame {self.frame}]" if self.frame else ""
        return f"{self.index}: {self.title!r} <{self.url}>{frame}"


class ElementRef(BaseModel):
    """Reference to an element by CSS/xpath selector."""

    model_config = ConfigDict(frozen=True)

    selector: str = Field(..., min_length=1)

    def __str__(self) -> str:
        return self.selector


# int -> child frame index, str -> frame name or iframe id, ElementRef or a
# driver-native element (e.g. a Playwright Locator) -> that iframe element.
FrameRef = Union[int, str, ElementRef, Any]
