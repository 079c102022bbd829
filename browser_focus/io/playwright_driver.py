"""
Playwright-based BrowserSession implementation.

Conforms to io/driver.py's BrowserSession Protocol:
- one BrowserContext per session; each Page is a window with a handle "window-N"
- popups opened by the page (target=_blank, window.open) are registered as
  they appear, in creation order
- frame focus is tracked per window as the active Frame; switching windows
  resets it to the top-level document
- dialogs are held open until accept_dialog()/dismiss_dialog(); a script or
  click that raises a dialog returns early instead of blocking
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Awaitable, Dict, Iterator, List, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Dialog,
    ElementHandle,
    Frame,
    Locator,
    Page,
    Playwright,
    TimeoutError as PwTimeoutError,
    async_playwright,
)

from ..core.errors import FrameNotFoundError, NoDialogError, TimeoutError, UnknownWindowError
from ..core.models import ElementRef

logger = logging.getLogger(__name__)

_SYNC_SCRIPT = "([script, args]) => new Function(script).apply(window, args)"
_ASYNC_SCRIPT = (
    "([script, args]) => new Promise((resolve) => {"
    " new Function(script).apply(window, args.concat([resolve])); })"
)


class PlaywrightDriver:
    """
    A concrete BrowserSession based on Playwright.
    `browser` selects the variant: "chromium", "firefox" or "webkit".
    """

    def __init__(
        self,
        *,
        browser: str = "chromium",
        headless: bool = True,
        slow_mo_ms: int = 0,
        default_timeout_ms: int = 30_000,
        script_timeout_ms: int = 30_000,
    ) -> None:
        self.browser_name = browser
        self.headless = headless
        self.slow_mo_ms = slow_mo_ms
        self.default_timeout_ms = default_timeout_ms
        self.script_timeout_ms = script_timeout_ms

        self._pw: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._ids = itertools.count()
        self._pages: Dict[str, Page] = {}  # insertion order == creation order
        self._handles: Dict[Page, str] = {}
        self._current: Optional[Page] = None
        self._frames: Dict[Page, Frame] = {}
        self._dialogs: Dict[Page, Dialog] = {}
        self._dialog_events: Dict[Page, asyncio.Event] = {}
        self._pending: Dict[Page, List[asyncio.Future]] = {}  # parked behind a dialog

    # ---------------- lifecycle ----------------

    async def start(self) -> None:
        """Launch the browser, open one context and its first window."""
        if self._browser is not None:
            return
        pw = await async_playwright().start()
        self._pw = pw
        launcher = getattr(pw, self.browser_name, None)
        try:
            if launcher is None:
                raise ValueError(f"unsupported browser: {self.browser_name}")
            self._browser = await launcher.launch(headless=self.headless, slow_mo=self.slow_mo_ms)
            self._context = await self._browser.new_context(bypass_csp=True)
            self._context.set_default_timeout(self.default_timeout_ms)
            self._context.on("page", self._register)
            page = await self._context.new_page()
        except BaseException:
            await self.stop()
            raise
        self._register(page)
        self._current = page
        logger.debug("started %s (headless=%s)", self.browser_name, self.headless)

    async def stop(self) -> None:
        """Close the context and browser, then stop Playwright."""
        for tasks in self._pending.values():
            for task in tasks:
                task.cancel()
        self._pending.clear()
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._pw is not None:
                await self._pw.stop()
            self._pw = None
            self._browser = None
            self._context = None
            self._pages.clear()
            self._handles.clear()
            self._frames.clear()
            self._dialogs.clear()
            self._dialog_events.clear()
            self._current = None

    # ---------------- windows & frames ----------------

    async def list_window_handles(self) -> List[str]:
        return [h for h, page in self._pages.items() if not page.is_closed()]

    async def current_window_handle(self) -> str:
        return self._handles[self._page()]

    async def switch_to_window(self, handle: str) -> None:
        page = self._pages.get(handle)
        if page is None or page.is_closed():
            raise UnknownWindowError(handle)
        self._current = page
        self._frames.pop(page, None)
        await page.bring_to_front()

    async def switch_to_frame(self, ref: Any) -> str:
        base = self._active_frame()
        frame = await self._resolve_frame(base, ref)
        if frame is None:
            raise FrameNotFoundError(ref)
        self._frames[self._page()] = frame
        return frame.name or frame.url

    async def switch_to_default_content(self) -> None:
        self._frames.pop(self._page(), None)

    async def open_new_window(self, url: str) -> str:
        self._ensure_started()
        assert self._context is not None
        page = await self._context.new_page()
        handle = self._register(page)
        with _translate_timeout(f"open {url}"):
            await page.goto(url, timeout=self.default_timeout_ms, wait_until="load")
        return handle

    async def close_current_window(self) -> None:
        page = self._page()
        await page.close()
        self._forget(page)

    async def current_url(self) -> str:
        return self._active_frame().url

    async def current_title(self) -> str:
        return await self._bounded(self._active_frame().title(), "read title")

    async def window_url(self, handle: str) -> str:
        return self._window(handle).url

    async def window_title(self, handle: str) -> str:
        return await self._bounded(self._window(handle).title(), f"read title of {handle}")

    # ---------------- navigation & waits ----------------

    async def goto(self, url: str, *, timeout_ms: Optional[int] = None) -> None:
        page = self._page()
        self._frames.pop(page, None)
        with _translate_timeout(f"goto {url}"):
            await page.goto(url, timeout=timeout_ms or self.default_timeout_ms, wait_until="load")

    async def back(self) -> None:
        page = self._page()
        self._frames.pop(page, None)
        with _translate_timeout("go back"):
            await page.go_back()

    async def forward(self) -> None:
        page = self._page()
        self._frames.pop(page, None)
        with _translate_timeout("go forward"):
            await page.go_forward()

    async def refresh(self) -> None:
        page = self._page()
        self._frames.pop(page, None)
        with _translate_timeout("reload"):
            await page.reload()

    async def wait_for(self, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        locator = self._active_frame().locator(selector)
        with _translate_timeout(f"wait for {selector}"):
            await locator.wait_for(state="visible", timeout=timeout_ms or self.default_timeout_ms)

    # ---------------- interactions ----------------

    async def click(self, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        locator = self._active_frame().locator(selector).first
        to = timeout_ms or self.default_timeout_ms
        with _translate_timeout(f"click {selector}"):
            await locator.wait_for(state="visible", timeout=to)
            await locator.scroll_into_view_if_needed()
            await self._guard_dialog(locator.click(timeout=to))

    async def type_text(
        self,
        selector: str,
        text: str,
        *,
        timeout_ms: Optional[int] = None,
        clear_first: bool = True,
    ) -> None:
        """
        Prefer fill() for determinism; fall back to type() for tricky widgets.
        """
        locator = self._active_frame().locator(selector).first
        to = timeout_ms or self.default_timeout_ms
        with _translate_timeout(f"type into {selector}"):
            await locator.wait_for(state="visible", timeout=to)
            if clear_first:
                try:
                    await locator.fill(text, timeout=to)
                    return
                except PwTimeoutError:
                    logger.debug("fill() timed out on %s, falling back to typing", selector)
            await locator.click(timeout=to)
            await locator.press_sequentially(text, timeout=to)

    async def text_content(self, selector: str, *, timeout_ms: Optional[int] = None) -> Optional[str]:
        locator = self._active_frame().locator(selector).first
        to = timeout_ms or self.default_timeout_ms
        with _translate_timeout(f"read text of {selector}"):
            await locator.wait_for(state="attached", timeout=to)
            text = await locator.text_content(timeout=to)
        return text.strip() if text is not None else None

    async def get_attribute(
        self, selector: str, name: str, *, timeout_ms: Optional[int] = None
    ) -> Optional[str]:
        locator = self._active_frame().locator(selector).first
        to = timeout_ms or self.default_timeout_ms
        with _translate_timeout(f"read {name} of {selector}"):
            await locator.wait_for(state="attached", timeout=to)
            if name in ("src", "href"):
                # resolved property, like WebDriver's getAttribute
                return await locator.evaluate(f"(el) => el.{name}")
            return await locator.get_attribute(name, timeout=to)

    async def page_source(self) -> str:
        return await self._bounded(self._active_frame().content(), "read page source")

    # ---------------- scripts & dialogs ----------------

    async def execute_script(self, script: str, *args: Any) -> Any:
        """Run `script` as a function body; `arguments[i]` and `return` work as in WebDriver."""
        frame = self._active_frame()
        return await self._guard_dialog(frame.evaluate(_SYNC_SCRIPT, [script, list(args)]))

    async def execute_async_script(
        self, script: str, *args: Any, timeout_ms: Optional[int] = None
    ) -> Any:
        """
        The last argument passed to `script` is a completion callback; its
        argument becomes the return value. Bounded by the script timeout.
        """
        frame = self._active_frame()
        to = timeout_ms or self.script_timeout_ms
        run = frame.evaluate(_ASYNC_SCRIPT, [script, list(args)])
        try:
            return await asyncio.wait_for(self._guard_dialog(run), timeout=to / 1000)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"async script did not complete within {to} ms") from e

    async def is_dialog_visible(self) -> bool:
        return self._current is not None and self._current in self._dialogs

    async def dialog_text(self) -> Optional[str]:
        dialog = self._dialogs.get(self._page())
        return dialog.message if dialog is not None else None

    async def accept_dialog(self, prompt_text: Optional[str] = None) -> None:
        page = self._page()
        dialog = self._take_dialog(page)
        if prompt_text is not None:
            await dialog.accept(prompt_text)
        else:
            await dialog.accept()
        await self._settle(page)

    async def dismiss_dialog(self) -> None:
        page = self._page()
        dialog = self._take_dialog(page)
        await dialog.dismiss()
        await self._settle(page)

    # ---------------- utilities ----------------

    async def screenshot(self, path: str, *, full_page: bool = True) -> None:
        page = self._page()
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=path, full_page=full_page)

    # ---------------- internals ----------------

    def _register(self, page: Page) -> str:
        if page in self._handles:
            return self._handles[page]
        handle = f"window-{next(self._ids)}"
        self._pages[handle] = page
        self._handles[page] = handle
        self._dialog_events[page] = asyncio.Event()
        page.on("dialog", lambda dialog: self._on_dialog(page, dialog))
        page.on("close", lambda _page: self._forget(page))
        logger.debug("registered %s (%s)", handle, page.url)
        return handle

    def _forget(self, page: Page) -> None:
        handle = self._handles.pop(page, None)
        if handle is None:
            return
        self._pages.pop(handle, None)
        self._frames.pop(page, None)
        self._dialogs.pop(page, None)
        self._dialog_events.pop(page, None)
        for task in self._pending.pop(page, []):
            task.cancel()
        if self._current is page:
            self._current = None
        logger.debug("forgot %s", handle)

    def _on_dialog(self, page: Page, dialog: Dialog) -> None:
        logger.debug("%s dialog on %s: %s", dialog.type, self._handles.get(page), dialog.message)
        self._dialogs[page] = dialog
        event = self._dialog_events.get(page)
        if event is not None:
            event.set()

    def _take_dialog(self, page: Page) -> Dialog:
        dialog = self._dialogs.pop(page, None)
        if dialog is None:
            raise NoDialogError("no dialog is open in the focused window")
        event = self._dialog_events.get(page)
        if event is not None:
            event.clear()
        return dialog

    async def _guard_dialog(self, op: Awaitable[Any]) -> Any:
        """
        Await `op` unless a dialog opens first; then park `op` until the dialog
        is handled and return None.
        """
        page = self._page()
        task = asyncio.ensure_future(op)
        opened = asyncio.ensure_future(self._dialog_events[page].wait())
        try:
            done, _ = await asyncio.wait({task, opened}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            opened.cancel()
        if task in done:
            return task.result()
        self._pending.setdefault(page, []).append(task)
        return None

    async def _settle(self, page: Page) -> None:
        """Let the operations parked behind a dialog finish, unless another dialog opens."""
        tasks = self._pending.pop(page, [])
        if not tasks:
            return
        event = self._dialog_events.get(page)
        opened = asyncio.ensure_future(event.wait()) if event is not None else None
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.default_timeout_ms / 1000
        try:
            while True:
                waiting = [t for t in tasks if not t.done()]
                remaining = deadline - loop.time()
                if not waiting or (opened is not None and opened.done()) or remaining <= 0:
                    break
                if opened is not None:
                    waiting.append(opened)
                await asyncio.wait(waiting, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if opened is not None:
                opened.cancel()
        still = [t for t in tasks if not t.done()]
        if still:
            self._pending[page] = still
        for task in tasks:
            if task.done() and not task.cancelled() and task.exception() is not None:
                logger.warning("operation interrupted by dialog failed: %s", task.exception())

    async def _resolve_frame(self, base: Frame, ref: Any) -> Optional[Frame]:
        children = base.child_frames
        if isinstance(ref, bool):
            return None
        if isinstance(ref, int):
            return children[ref] if 0 <= ref < len(children) else None
        if isinstance(ref, str):
            for child in children:
                if child.name == ref:
                    return child
            ref = ElementRef(selector=f'iframe[id="{ref}"], frame[id="{ref}"]')
        if isinstance(ref, ElementRef):
            element = await base.query_selector(ref.selector)
        elif isinstance(ref, Locator):
            element = await ref.element_handle()
        elif isinstance(ref, ElementHandle):
            element = ref
        else:
            return None
        return await element.content_frame() if element is not None else None

    async def _bounded(self, op: Awaitable[Any], what: str) -> Any:
        try:
            return await asyncio.wait_for(op, timeout=self.default_timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"{what} timed out after {self.default_timeout_ms} ms") from e

    def _active_frame(self) -> Frame:
        page = self._page()
        frame = self._frames.get(page)
        if frame is None or frame.is_detached():
            self._frames.pop(page, None)
            return page.main_frame
        return frame

    def _window(self, handle: str) -> Page:
        page = self._pages.get(handle)
        if page is None or page.is_closed():
            raise UnknownWindowError(handle)
        return page

    def _page(self) -> Page:
        self._ensure_started()
        if self._current is None or self._current.is_closed():
            raise RuntimeError("No focused window. Switch to a live window first.")
        return self._current

    def _ensure_started(self) -> None:
        if self._browser is None:
            raise RuntimeError("Browser not started. Call start() first.")


@contextmanager
def _translate_timeout(what: str) -> Iterator[None]:
    """Turn Playwright timeouts into browser_focus TimeoutError."""
    try:
        yield
    except PwTimeoutError as e:
        raise TimeoutError(f"{what}: {e}") from e
