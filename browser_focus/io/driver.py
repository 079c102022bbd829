"""
Browser session protocol (abstraction).

This Protocol defines the browser control surface that the window registry
and the AutomationInterface rely on. It allows plugging different backends
(Playwright today, a WebDriver/CDP backend later) without touching either.

Notes:
- A session has exactly one focused window and, inside it, one focused frame.
  Every page-level primitive (goto, click, execute_script, ...) applies to
  that focused context.
- Window handles are opaque strings issued by the implementation.
  `list_window_handles()` must enumerate live windows in a stable order.
- `window_title()` / `window_url()` read a window without moving focus.
- `open_new_window()` returns the handle of the window it created, which is
  not necessarily the newest one (the page may open popups while loading).
- Implementations raise `browser_focus.core.errors.TimeoutError` when a wait
  runs out and `FrameNotFoundError` when a frame reference does not resolve.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence


class BrowserSession(Protocol):
    # -------- lifecycle --------
    async def start(self) -> None: ...
    async def stop(self) -> None: ...

    # -------- windows & frames --------
    async def list_window_handles(self) -> Sequence[str]: ...
    async def current_window_handle(self) -> str: ...
    async def switch_to_window(self, handle: str) -> None: ...
    async def switch_to_frame(self, ref: Any) -> str: ...
    async def switch_to_default_content(self) -> None: ...
    async def open_new_window(self, url: str) -> str: ...  # handle of the window it created
    async def close_current_window(self) -> None: ...
    async def current_url(self) -> str: ...
    async def current_title(self) -> str: ...
    async def window_url(self, handle: str) -> str: ...
    async def window_title(self, handle: str) -> str: ...

    # -------- navigation & waits --------
    async def goto(self, url: str, *, timeout_ms: int | None = None) -> None: ...
    async def back(self) -> None: ...
    async def forward(self) -> None: ...
    async def refresh(self) -> None: ...
    async def wait_for(self, selector: str, *, timeout_ms: int | None = None) -> None: ...

    # -------- basic interactions --------
    async def click(self, selector: str, *, timeout_ms: int | None = None) -> None: ...
    async def type_text(
        self,
        selector: str,
        text: str,
        *,
        timeout_ms: int | None = None,
        clear_first: bool = True,
    ) -> None: ...
    async def text_content(self, selector: str, *, timeout_ms: int | None = None) -> str | None: ...
    async def get_attribute(
        self, selector: str, name: str, *, timeout_ms: int | None = None
    ) -> str | None: ...
    async def page_source(self) -> str: ...

    # -------- scripts & dialogs --------
    async def execute_script(self, script: str, *args: Any) -> Any: ...
    async def execute_async_script(
        self, script: str, *args: Any, timeout_ms: int | None = None
    ) -> Any: ...
    async def is_dialog_visible(self) -> bool: ...
    async def dialog_text(self) -> str | None: ...
    async def accept_dialog(self, prompt_text: str | None = None) -> None: ...
    async def dismiss_dialog(self) -> None: ...

    # -------- utilities --------
    async def screenshot(self, path: str, *, full_page: bool = True) -> None: ...
