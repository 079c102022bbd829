"""
In-memory BrowserSession used by the unit tests.
It honours the io/driver.py protocol without launching a browser.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio

from browser_focus.core.errors import (
    FrameNotFoundError,
    NoDialogError,
    TimeoutError,
    UnknownWindowError,
)
from browser_focus.core.interface import AutomationInterface
from browser_focus.core.models import ElementRef
from browser_focus.core.settings import Settings
from browser_focus.core.window_registry import SessionWindowRegistry


@dataclass
class FakeFrame:
    name: str
    id: str
    url: str
    title: str = ""


@dataclass
class FakeWindow:
    handle: str
    history: List[str]
    pos: int = 0
    frames: List[FakeFrame] = field(default_factory=list)

    @property
    def url(self) -> str:
        return self.history[self.pos]


class FakeSession:
    def __init__(self, titles: Optional[Dict[str, str]] = None) -> None:
        self.titles = dict(titles or {})
        self.frames_by_url: Dict[str, List[FakeFrame]] = {}
        self.popup_links: Dict[str, str] = {}  # selector -> url opened on click
        self.bodies: Dict[str, str] = {}
        self.script_results: Dict[str, Any] = {}
        self.calls: List[tuple] = []
        self.started = False
        self.crashed = False
        self.dialog: Optional[str] = None
        self.accepted: List[Optional[str]] = []
        self._ids = itertools.count()
        self._windows: Dict[str, FakeWindow] = {}
        self._current: Optional[str] = None
        self._frame: Optional[FakeFrame] = None

    # ---- test helpers ----

    def popup(self, url: str) -> str:
        """A page-triggered window: registered, not focused."""
        handle = f"w{next(self._ids)}"
        self._windows[handle] = FakeWindow(handle, [url], frames=list(self.frames_by_url.get(url, [])))
        return handle

    def vanish(self, handle: str) -> None:
        self._windows.pop(handle)
        if self._current == handle:
            self._current = None

    @property
    def focused(self) -> Optional[str]:
        return self._current

    def _check(self) -> None:
        if self.crashed:
            raise RuntimeError("browser disconnected")

    def _win(self) -> FakeWindow:
        self._check()
        if self._current is None:
            raise RuntimeError("No focused window")
        return self._windows[self._current]

    def _title(self, url: str) -> str:
        return self.titles.get(url, url)

    # ---- lifecycle ----

    async def start(self) -> None:
        self.started = True
        self._current = self.popup("about:blank")

    async def stop(self) -> None:
        self.started = False
        self._windows.clear()
        self._current = None

    # ---- windows & frames ----

    async def list_window_handles(self) -> List[str]:
        self._check()
        return list(self._windows)

    async def current_window_handle(self) -> str:
        return self._win().handle

    async def switch_to_window(self, handle: str) -> None:
        self._check()
        self.calls.append(("switch_to_window", handle))
        if handle not in self._windows:
            raise UnknownWindowError(handle)
        self._current = handle
        self._frame = None

    async def switch_to_frame(self, ref: Any) -> str:
        win = self._win()
        frames = win.frames
        found = None
        if isinstance(ref, int) and not isinstance(ref, bool):
            found = frames[ref] if 0 <= ref < len(frames) else None
        elif isinstance(ref, str):
            found = next((f for f in frames if ref in (f.name, f.id)), None)
        elif isinstance(ref, ElementRef):
            found = next((f for f in frames if ref.selector == f"#{f.id}"), None)
        if found is None:
            raise FrameNotFoundError(ref)
        self._frame = found
        return found.name

    async def switch_to_default_content(self) -> None:
        self._win()
        self._frame = None

    async def open_new_window(self, url: str) -> str:
        self._check()
        return self.popup(url)

    async def close_current_window(self) -> None:
        win = self._win()
        self.calls.append(("close", win.handle))
        self.vanish(win.handle)

    async def current_url(self) -> str:
        win = self._win()
        return self._frame.url if self._frame else win.url

    async def current_title(self) -> str:
        win = self._win()
        return self._frame.title if self._frame else self._title(win.url)

    async def window_url(self, handle: str) -> str:
        self._check()
        return self._windows[handle].url

    async def window_title(self, handle: str) -> str:
        self._check()
        return self._title(self._windows[handle].url)

    # ---- navigation ----

    async def goto(self, url: str, *, timeout_ms: Optional[int] = None) -> None:
        win = self._win()
        del win.history[win.pos + 1:]
        win.history.append(url)
        win.pos += 1
        win.frames = list(self.frames_by_url.get(url, []))
        self._frame = None

    async def back(self) -> None:
        win = self._win()
        win.pos = max(0, win.pos - 1)
        self._frame = None

    async def forward(self) -> None:
        win = self._win()
        win.pos = min(len(win.history) - 1, win.pos + 1)
        self._frame = None

    async def refresh(self) -> None:
        self._win()
        self._frame = None

    async def wait_for(self, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        self._win()
        if selector == "#never":
            raise TimeoutError(f"wait for {selector}")

    # ---- interactions ----

    async def click(self, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        self._win()
        self.calls.append(("click", selector))
        if selector in self.popup_links:
            self.popup(self.popup_links[selector])

    async def type_text(self, selector: str, text: str, *, timeout_ms=None, clear_first=True) -> None:
        self._win()
        self.calls.append(("type", selector, text))

    async def text_content(self, selector: str, *, timeout_ms: Optional[int] = None) -> Optional[str]:
        win = self._win()
        return f"{selector}@{self._frame.url if self._frame else win.url}"

    async def get_attribute(self, selector: str, name: str, *, timeout_ms=None) -> Optional[str]:
        self._win()
        return f"{name}-of-{selector}"

    async def page_source(self) -> str:
        win = self._win()
        body = self.bodies.get(win.url, "")
        return f"<html><head><title>{self._title(win.url)}</title></head><body>{body}</body></html>"

    # ---- scripts & dialogs ----

    async def execute_script(self, script: str, *args: Any) -> Any:
        self._win()
        self.calls.append(("script", script, args))
        if script.startswith("alert("):
            self.dialog = " and ".join(str(a) for a in args) or script
            return None
        return self.script_results.get(script)

    async def execute_async_script(self, script: str, *args: Any, timeout_ms=None) -> Any:
        self._win()
        self.calls.append(("async_script", script, args, timeout_ms))
        if script == "hang":
            raise TimeoutError(f"async script did not complete within {timeout_ms} ms")
        return self.script_results.get(script)

    async def is_dialog_visible(self) -> bool:
        return self.dialog is not None

    async def dialog_text(self) -> Optional[str]:
        return self.dialog

    async def accept_dialog(self, prompt_text: Optional[str] = None) -> None:
        if self.dialog is None:
            raise NoDialogError("no dialog is open in the focused window")
        self.accepted.append(prompt_text)
        self.dialog = None

    async def dismiss_dialog(self) -> None:
        if self.dialog is None:
            raise NoDialogError("no dialog is open in the focused window")
        self.dialog = None

    # ---- utilities ----

    async def screenshot(self, path: str, *, full_page: bool = True) -> None:
        self._win()
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        Path(path).write_bytes(b"\x89PNG fake")


URL1 = "https://one.example/"
URL2 = "https://two.example/"
URL3 = "https://three.example/"
TITLES = {URL1: "One", URL2: "Two", URL3: "Three"}


@pytest.fixture
def session() -> FakeSession:
    return FakeSession(titles=TITLES)


@pytest_asyncio.fixture
async def registry(session: FakeSession) -> SessionWindowRegistry:
    await session.start()
    await session.goto(URL1)
    reg = SessionWindowRegistry(session, window_timeout_ms=200, poll_interval_ms=10)
    await reg.attach()
    return reg


@pytest_asyncio.fixture
async def iface(session: FakeSession):
    cfg = Settings(window_timeout_ms=200, _env_file=None)
    interface = AutomationInterface(cfg, session_factory=lambda _cfg: session)
    await interface.start()
    try:
        yield interface
    finally:
        await interface.stop()
