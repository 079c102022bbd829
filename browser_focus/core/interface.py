"""
AutomationInterface: the facade scripts and actions talk to.

Owns one BrowserSession plus its SessionWindowRegistry. Page-level calls go
straight to the session (they apply to the focused window/frame); window and
frame focus goes through the registry so focus history stays consistent.
"""
# @file purpose: High-level browser automation facade over a BrowserSession.

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional, Tuple

from .errors import InterfaceNotStartedError, session_call
from .models import WindowRecord
from .settings import Settings
from .window_registry import SessionWindowRegistry
from ..io.driver import BrowserSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], BrowserSession]


def playwright_session(settings: Settings) -> BrowserSession:
    """Default factory: a Playwright driver for the configured browser variant."""
    from ..io.playwright_driver import PlaywrightDriver

    return PlaywrightDriver(
        browser=settings.browser,
        headless=settings.headless,
        slow_mo_ms=settings.slow_mo_ms,
        default_timeout_ms=settings.default_timeout_ms,
        script_timeout_ms=settings.script_timeout_ms,
    )


class AutomationInterface:
    """
    Usage:
        async with AutomationInterface(Settings()) as iface:
            await iface.go("https://example.com/")
            await iface.open_window("https://example.org/")
            await iface.focus_window(0)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._factory = session_factory or playwright_session
        self._session: Optional[BrowserSession] = None
        self._registry: Optional[SessionWindowRegistry] = None

    # ---------------- lifecycle ----------------

    @property
    def started(self) -> bool:
        return self._session is not None

    @property
    def registry(self) -> SessionWindowRegistry:
        return self._require("use windows")[1]

    async def start(self) -> None:
        if self._session is not None:
            return
        session = self._factory(self.settings)
        await session_call("start session", session.start())
        registry = SessionWindowRegistry(session, window_timeout_ms=self.settings.window_timeout_ms)
        try:
            await registry.attach()
        except BaseException:
            await session.stop()
            raise
        self._session, self._registry = session, registry
        logger.info("automation interface started (%s)", self.settings.browser)

    async def stop(self) -> None:
        if self._session is None:
            return
        session, registry = self._session, self._registry
        self._session, self._registry = None, None
        if registry is not None:
            registry.detach()
        await session_call("stop session", session.stop())
        logger.info("automation interface stopped")

    async def restart(self) -> None:
        if self._session is None:
            raise InterfaceNotStartedError("restart")
        await self.stop()
        await self.start()

    async def __aenter__(self) -> "AutomationInterface":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ---------------- navigation ----------------

    async def go(self, url: str) -> None:
        session, registry = self._require("go")
        await session_call(f"go {url}", session.goto(url))
        registry.forget_frame()

    async def backward(self) -> None:
        session, registry = self._require("go backward")
        await session_call("go backward", session.back())
        registry.forget_frame()

    async def forward(self) -> None:
        session, registry = self._require("go forward")
        await session_call("go forward", session.forward())
        registry.forget_frame()

    async def refresh(self) -> None:
        session, registry = self._require("refresh")
        await session_call("refresh", session.refresh())
        registry.forget_frame()

    async def get_url(self) -> str:
        return await self._require("get url")[1].current_url()

    async def get_title(self) -> str:
        return await self._require("get title")[1].current_title()

    async def pause(self, ms: int) -> None:
        await asyncio.sleep(ms / 1000)

    # ---------------- page & elements ----------------

    async def page_source(self) -> str:
        session, _ = self._require("read page source")
        return await session_call("read page source", session.page_source())

    async def contains(self, text: str, case_sensitive: bool = True) -> bool:
        source = await self.page_source()
        if case_sensitive:
            return text in source
        return text.lower() in source.lower()

    async def wait_for(self, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        session, _ = self._require("wait")
        await session_call(f"wait for {selector}", session.wait_for(selector, timeout_ms=timeout_ms))

    async def click(self, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        session, _ = self._require("click")
        await session_call(f"click {selector}", session.click(selector, timeout_ms=timeout_ms))

    async def type_text(self, selector: str, text: str, *, timeout_ms: Optional[int] = None) -> None:
        session, _ = self._require("type")
        await session_call(
            f"type into {selector}", session.type_text(selector, text, timeout_ms=timeout_ms)
        )

    async def text(self, selector: str, *, timeout_ms: Optional[int] = None) -> Optional[str]:
        session, _ = self._require("read text")
        return await session_call(
            f"read text of {selector}", session.text_content(selector, timeout_ms=timeout_ms)
        )

    async def attribute(self, selector: str, name: str) -> Optional[str]:
        session, _ = self._require("read attribute")
        return await session_call(
            f"read {name} of {selector}", session.get_attribute(selector, name)
        )

    async def screenshot(self, path: str, *, full_page: bool = True) -> None:
        session, _ = self._require("take screenshot")
        await session_call("screenshot", session.screenshot(path, full_page=full_page))

    # ---------------- scripts & dialogs ----------------

    async def execute_javascript(self, script: str, *args: Any) -> Any:
        session, _ = self._require("execute javascript")
        return await session_call("execute javascript", session.execute_script(script, *args))

    async def execute_async_javascript(
        self, script: str, *args: Any, timeout_ms: Optional[int] = None
    ) -> Any:
        session, _ = self._require("execute async javascript")
        return await session_call(
            "execute async javascript",
            session.execute_async_script(script, *args, timeout_ms=timeout_ms),
        )

    async def is_dialog_visible(self) -> bool:
        session, _ = self._require("check dialog")
        return await session_call("check dialog", session.is_dialog_visible())

    async def dialog_text(self) -> Optional[str]:
        session, _ = self._require("read dialog")
        return await session_call("read dialog", session.dialog_text())

    async def accept_dialog(self, prompt_text: Optional[str] = None) -> None:
        session, _ = self._require("accept dialog")
        await session_call("accept dialog", session.accept_dialog(prompt_text))

    async def dismiss_dialog(self) -> None:
        session, _ = self._require("dismiss dialog")
        await session_call("dismiss dialog", session.dismiss_dialog())

    # ---------------- windows & frames ----------------

    async def open_window(self, url: str) -> str:
        return await self._require("open window")[1].open_window(url)

    async def focus_window(self, target: int | str) -> str:
        """Focus by index (int) or by exact title/URL (str)."""
        registry = self._require("focus window")[1]
        if isinstance(target, bool):
            raise TypeError("focus_window() takes an index or a title/URL string")
        if isinstance(target, int):
            return await registry.focus_by_index(target)
        return await registry.focus_by_title_or_url(target)

    async def focus_handle(self, handle: str) -> str:
        return await self._require("focus window")[1].focus_by_handle(handle)

    async def close_window(self) -> str:
        return await self._require("close window")[1].close_current_window()

    async def wait_for_window(
        self, count: Optional[int] = None, *, timeout_ms: Optional[int] = None
    ) -> int:
        """Wait for a new window (or for `count` live windows); returns the live count."""
        registry = self._require("wait for window")[1]
        if count is None:
            await registry.wait_for_new_window(timeout_ms)
            return registry.live_count
        return await registry.wait_for_window_count(count, timeout_ms)

    async def focus_frame(self, ref: Any) -> str:
        return await self._require("focus frame")[1].focus_frame(ref)

    async def focus_default(self) -> None:
        await self._require("focus default content")[1].focus_default_content()

    async def windows(self) -> List[WindowRecord]:
        return await self._require("list windows")[1].windows()

    async def windows_string(self) -> str:
        return await self._require("list windows")[1].describe()

    # ---------------- internals ----------------

    def _require(self, operation: str) -> Tuple[BrowserSession, SessionWindowRegistry]:
        if self._session is None or self._registry is None:
            raise InterfaceNotStartedError(operation)
        return self._session, self._registry
