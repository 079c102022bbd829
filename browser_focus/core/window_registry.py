"""
Window/frame focus bookkeeping for one browser session.

The registry keeps:
- the live windows in creation order (index i == i-th live window right now)
- a FocusStack whose top is always the focused window
- the frame label focused inside each window

Every resolving operation first reconciles with the session (`sync()`), then
resolves read-only, and only touches the stack after the session switch
succeeded. A failed request therefore leaves focus where it was.
"""
# @file purpose: Resolve focus requests to window handles and track focus history.

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from .errors import (
    IndexOutOfRangeError,
    NoMatchingWindowError,
    NoWindowToCloseError,
    TimeoutError,
    UnderlyingSessionError,
    UnknownWindowError,
    session_call,
)
from .focus_stack import FocusStack
from .models import WindowHandle, WindowRecord
from ..io.driver import BrowserSession

logger = logging.getLogger(__name__)


class SessionWindowRegistry:
    def __init__(
        self,
        session: BrowserSession,
        *,
        window_timeout_ms: int = 10_000,
        poll_interval_ms: int = 100,
    ) -> None:
        self._session = session
        self.window_timeout_ms = window_timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self._known: List[str] = []
        self._stack = FocusStack()
        self._frames: Dict[str, str] = {}

    async def attach(self) -> None:
        """Seed from the session's current windows; the focused one becomes the stack base."""
        handles = await session_call("list windows", self._session.list_window_handles())
        current = await session_call("read focused window", self._session.current_window_handle())
        self._known = list(handles)
        if current not in self._known:
            self._known.append(current)
        self._stack = FocusStack(current)
        self._frames.clear()
        logger.debug("attached to session with %d window(s), focus %s", len(self._known), current)

    def detach(self) -> None:
        self._known.clear()
        self._stack.clear()
        self._frames.clear()

    # ---------------- state ----------------

    @property
    def current_handle(self) -> Optional[WindowHandle]:
        return self._stack.top

    @property
    def handles(self) -> List[WindowHandle]:
        """Known live handles in index order, as of the last sync."""
        return list(self._known)

    @property
    def focus_history(self) -> List[str]:
        return self._stack.as_list()

    @property
    def live_count(self) -> int:
        return len(self._known)

    def current_frame(self) -> Optional[str]:
        top = self._stack.top
        return self._frames.get(top) if top is not None else None

    async def sync(self) -> List[str]:
        """
        Reconcile with the session's live windows.
        Returns the handles discovered since the last sync (popups, new tabs).
        """
        live = list(await session_call("list windows", self._session.list_window_handles()))
        if not live:
            raise UnderlyingSessionError("sync windows", RuntimeError("session has no open windows"))

        focused = self._stack.top
        for handle in [h for h in self._known if h not in live]:
            self._known.remove(handle)
            self._stack.remove(handle)
            self._frames.pop(handle, None)
            logger.info("window %s went away", handle)

        discovered = [h for h in live if h not in self._known]
        self._known.extend(discovered)
        for handle in discovered:
            logger.info("new window %s detected", handle)

        if self._stack.top != focused:
            # focused window vanished on its own
            await self._refocus()
        return discovered

    async def windows(self) -> List[WindowRecord]:
        """Fresh records for every live window (titles/urls read now)."""
        await self.sync()
        records = []
        for index, handle in enumerate(self._known):
            records.append(
                WindowRecord(
                    handle=handle,
                    index=index,
                    title=await self._title_of(handle),
                    url=await self._url_of(handle),
                    frame=self._frames.get(handle),
                )
            )
        return records

    async def describe(self) -> str:
        lines = []
        for record in await self.windows():
            marker = "*" if record.handle == self._stack.top else " "
            lines.append(f"{marker} {record.label()}")
        return "\n".join(lines)

    # ---------------- window focus ----------------

    async def open_window(self, url: str) -> WindowHandle:
        """Open a new window at `url`, focus it and return its handle."""
        await self.sync()
        handle = await session_call(f"open window {url}", self._session.open_new_window(url))
        await self.sync()
        if handle not in self._known:
            raise UnderlyingSessionError(
                f"open window {url}", RuntimeError(f"new window {handle} is not live")
            )
        await self._switch(handle)
        logger.info("opened window %s at %s", handle, url)
        return handle

    async def focus_by_index(self, index: int) -> WindowHandle:
        await self.sync()
        if index < 0 or index >= len(self._known):
            raise IndexOutOfRangeError(index, len(self._known))
        handle = self._known[index]
        await self._switch(handle)
        return handle

    async def focus_by_title_or_url(self, query: str) -> WindowHandle:
        """First window whose title equals `query`, else first whose url equals it."""
        await self.sync()
        match = None
        for handle in self._known:
            if await self._title_of(handle) == query:
                match = handle
                break
        if match is None:
            for handle in self._known:
                if await self._url_of(handle) == query:
                    match = handle
                    break
        if match is None:
            raise NoMatchingWindowError(query)
        await self._switch(match)
        return match

    async def focus_by_handle(self, handle: WindowHandle) -> WindowHandle:
        await self.sync()
        if handle not in self._known:
            raise UnknownWindowError(handle)
        await self._switch(handle)
        return handle

    async def close_current_window(self) -> WindowHandle:
        """
        Close the focused window and refocus the previous one in focus history
        (or the first live window when history is exhausted). Returns the new focus.
        """
        await self.sync()
        closing = self._stack.top
        if closing is None or len(self._known) <= 1:
            raise NoWindowToCloseError(closing)

        await session_call(f"close window {closing}", self._session.close_current_window())
        self._known.remove(closing)
        self._stack.remove(closing)
        self._frames.pop(closing, None)

        target = await self._refocus()
        logger.info("closed window %s, focus back on %s", closing, target)
        return target

    async def wait_for_new_window(self, timeout_ms: Optional[int] = None) -> WindowHandle:
        """Block until a window not seen by the registry appears; returns its handle."""
        if timeout_ms is None:
            timeout_ms = self.window_timeout_ms
        discovered = await self._poll(bool, timeout_ms)
        if discovered is None:
            raise TimeoutError(f"no new window appeared within {timeout_ms} ms")
        return discovered[-1]

    async def wait_for_window_count(self, count: int, timeout_ms: Optional[int] = None) -> int:
        """Block until at least `count` windows are live; returns the live count."""
        if timeout_ms is None:
            timeout_ms = self.window_timeout_ms
        if await self._poll(lambda _discovered: len(self._known) >= count, timeout_ms) is None:
            raise TimeoutError(
                f"expected {count} window(s) within {timeout_ms} ms, have {len(self._known)}"
            )
        return len(self._known)

    # ---------------- frames ----------------

    async def focus_frame(self, ref: Any) -> str:
        """Focus a frame inside the focused window; the focus stack is untouched."""
        top = self._require_focus()
        label = await session_call(f"focus frame {ref!r}", self._session.switch_to_frame(ref))
        parent = self._frames.get(top)
        self._frames[top] = f"{parent} > {label}" if parent else str(label)
        logger.debug("focused frame %s in %s", self._frames[top], top)
        return self._frames[top]

    async def focus_default_content(self) -> None:
        top = self._require_focus()
        await session_call("focus default content", self._session.switch_to_default_content())
        self._frames.pop(top, None)

    # ---------------- live reads ----------------

    async def current_url(self) -> str:
        self._require_focus()
        return await session_call("read url", self._session.current_url())

    async def current_title(self) -> str:
        self._require_focus()
        return await session_call("read title", self._session.current_title())

    def forget_frame(self) -> None:
        """Top-level navigation drops frame focus in the focused window."""
        top = self._stack.top
        if top is not None:
            self._frames.pop(top, None)

    # ---------------- internals ----------------

    async def _switch(self, handle: str) -> None:
        await session_call(f"switch to window {handle}", self._session.switch_to_window(handle))
        self._frames.pop(handle, None)
        self._stack.push(handle)
        logger.debug("focus on %s (history: %s)", handle, self._stack.as_list())

    async def _refocus(self) -> str:
        """
        Focus the most recent live window in history, else the first live one.
        Candidates that went away before the switch are dropped on the way.
        """
        while self._known:
            target = self._stack.top or self._known[0]
            try:
                await self._switch(target)
                return target
            except UnknownWindowError:
                logger.info("window %s went away before it could be focused", target)
                self._stack.remove(target)
                self._frames.pop(target, None)
                if target in self._known:
                    self._known.remove(target)
        raise UnderlyingSessionError("refocus", RuntimeError("session has no open windows"))

    async def _poll(
        self, ready: Callable[[List[str]], bool], timeout_ms: int
    ) -> Optional[List[str]]:
        """Sync until `ready(discovered_so_far)`; None once the deadline passes."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000
        discovered: List[str] = []
        while True:
            discovered.extend(await self.sync())
            if ready(discovered):
                return discovered
            if loop.time() >= deadline:
                return None
            await asyncio.sleep(self.poll_interval_ms / 1000)

    async def _title_of(self, handle: str) -> str:
        return await session_call(f"read title of {handle}", self._session.window_title(handle))

    async def _url_of(self, handle: str) -> str:
        return await session_call(f"read url of {handle}", self._session.window_url(handle))

    def _require_focus(self) -> str:
        top = self._stack.top
        if top is None:
            raise UnknownWindowError("<none>")
        return top
