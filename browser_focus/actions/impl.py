"""
Action implementations bound to AutomationInterface:
- navigation: open_url / back / forward / refresh / pause
- elements: wait_for / click / type / extract_text / contains / snapshot
- windows & frames: open_window / focus_window / close_window /
  wait_for_window / focus_frame / focus_default
- scripts & dialogs: execute_script / execute_async_script /
  accept_dialog / dismiss_dialog

Each action:
  1) Expects an AutomationInterface + validated params (Pydantic v2)
  2) Returns ActionResult, or raises ActionExecutionError on failure
"""

# @file purpose: Implement and register actions.
from __future__ import annotations

from typing import Any

from browser_focus.core.errors import ActionExecutionError
from browser_focus.core.interface import AutomationInterface
from browser_focus.core.models import ElementRef
from browser_focus.core.registry import action
from browser_focus.core.result import ActionResult

from .params import (
    AcceptDialogParams,
    ClickParams,
    ContainsParams,
    ExtractTextParams,
    FocusFrameParams,
    FocusWindowParams,
    OpenUrlParams,
    PauseParams,
    ScriptParams,
    SnapshotParams,
    TypeParams,
    WaitForParams,
    WaitForWindowParams,
)


# ---------------------------------------------------------------- navigation


@action("open_url", params_model=OpenUrlParams)
async def open_url(iface: AutomationInterface, params: OpenUrlParams) -> ActionResult:
    """Navigate the focused window to a URL."""
    try:
        await iface.go(str(params.url))
        return ActionResult.success(step="open_url", url=str(params.url))
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="open_url", message="failed to open url", url=str(params.url), cause=e
        ) from e


async def _history(iface: AutomationInterface, step: str) -> ActionResult:
    move = {"back": iface.backward, "forward": iface.forward, "refresh": iface.refresh}[step]
    try:
        await move()
        return ActionResult.success(step=step, url=await iface.get_url())
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(action=step, message=f"failed to {step}", cause=e) from e


@action("back")
async def back(iface: AutomationInterface, params: None) -> ActionResult:
    """Go back one entry in the focused window's history."""
    return await _history(iface, "back")


@action("forward")
async def forward(iface: AutomationInterface, params: None) -> ActionResult:
    """Go forward one entry in the focused window's history."""
    return await _history(iface, "forward")


@action("refresh")
async def refresh(iface: AutomationInterface, params: None) -> ActionResult:
    """Reload the focused window."""
    return await _history(iface, "refresh")


@action("pause", params_model=PauseParams)
async def pause(iface: AutomationInterface, params: PauseParams) -> ActionResult:
    """Sleep for a number of milliseconds."""
    await iface.pause(params.ms)
    return ActionResult.success(step="pause", ms=params.ms)


# ---------------------------------------------------------------- elements


@action("wait_for", params_model=WaitForParams)
async def wait_for(iface: AutomationInterface, params: WaitForParams) -> ActionResult:
    """Wait until an element is visible in the focused frame."""
    try:
        await iface.wait_for(params.selector, timeout_ms=params.timeout_ms)
        return ActionResult.success(step="wait_for", selector=params.selector)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="wait_for",
            message="element did not become visible in time",
            selector=params.selector,
            cause=e,
        ) from e


@action("click", params_model=ClickParams)
async def click(iface: AutomationInterface, params: ClickParams) -> ActionResult:
    """Click an element; popups it opens become addressable windows."""
    try:
        await iface.click(params.selector)
        return ActionResult.success(step="click", selector=params.selector)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="click", message="failed to click element", selector=params.selector, cause=e
        ) from e


@action("type", params_model=TypeParams)
async def type_action(iface: AutomationInterface, params: TypeParams) -> ActionResult:
    """
    Type text into an input.
    Named type_action to avoid shadowing Python's built-in `type`.
    """
    try:
        await iface.type_text(params.selector, params.text)
        return ActionResult.success(step="type", selector=params.selector, length=len(params.text))
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="type", message="failed to input text", selector=params.selector, cause=e
        ) from e


@action("extract_text", params_model=ExtractTextParams)
async def extract_text(iface: AutomationInterface, params: ExtractTextParams) -> ActionResult:
    """Read an element's text (or one of its attributes)."""
    try:
        if params.attribute:
            value = await iface.attribute(params.selector, params.attribute)
        else:
            value = await iface.text(params.selector)
        return ActionResult.extracted(
            value, step="extract_text", selector=params.selector, empty=value is None
        )
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="extract_text",
            message="failed to extract text",
            selector=params.selector,
            details={"attribute": params.attribute},
            cause=e,
        ) from e


@action("contains", params_model=ContainsParams)
async def contains(iface: AutomationInterface, params: ContainsParams) -> ActionResult:
    """Check whether the page source contains a string."""
    try:
        found = await iface.contains(params.text, params.case_sensitive)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="contains", message="failed to read page source", cause=e
        ) from e
    if params.expect is not None and found != params.expect:
        raise ActionExecutionError(
            action="contains",
            message="page text expectation not met",
            details={"text": params.text, "expected": params.expect, "found": found},
        )
    return ActionResult.extracted(found, step="contains", text=params.text)


@action("snapshot", params_model=SnapshotParams)
async def snapshot_action(iface: AutomationInterface, params: SnapshotParams) -> ActionResult:
    """Save a screenshot of the focused window."""
    try:
        await iface.screenshot(params.path, full_page=params.full_page)
        return ActionResult.success(step="snapshot", path=params.path, full_page=params.full_page)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="snapshot",
            message="failed to take screenshot",
            details={"path": params.path, "full_page": params.full_page},
            cause=e,
        ) from e


# ---------------------------------------------------------------- windows & frames


@action("open_window", params_model=OpenUrlParams)
async def open_window(iface: AutomationInterface, params: OpenUrlParams) -> ActionResult:
    """Open a new window at a URL and focus it."""
    try:
        handle = await iface.open_window(str(params.url))
        return ActionResult.success(step="open_window", url=str(params.url), window=handle)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="open_window", message="failed to open window", url=str(params.url), cause=e
        ) from e


@action("focus_window", params_model=FocusWindowParams)
async def focus_window(iface: AutomationInterface, params: FocusWindowParams) -> ActionResult:
    """Focus a window by index or by exact title/URL."""
    target: Any = params.index if params.index is not None else params.query
    try:
        handle = await iface.focus_window(target)
        return ActionResult.success(step="focus_window", window=handle, url=await iface.get_url())
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="focus_window",
            message="failed to focus window",
            details={"target": target},
            cause=e,
        ) from e


@action("close_window")
async def close_window(iface: AutomationInterface, params: None) -> ActionResult:
    """Close the focused window and refocus the previous one."""
    try:
        handle = await iface.close_window()
        return ActionResult.success(step="close_window", window=handle, url=await iface.get_url())
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="close_window", message="failed to close window", cause=e
        ) from e


@action("wait_for_window", params_model=WaitForWindowParams)
async def wait_for_window(iface: AutomationInterface, params: WaitForWindowParams) -> ActionResult:
    """Wait for a popup/new window to appear."""
    try:
        live = await iface.wait_for_window(params.count, timeout_ms=params.timeout_ms)
        return ActionResult.extracted(live, step="wait_for_window", windows=live)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="wait_for_window",
            message="window did not appear in time",
            details={"count": params.count, "timeout_ms": params.timeout_ms},
            cause=e,
        ) from e


@action("focus_frame", params_model=FocusFrameParams)
async def focus_frame(iface: AutomationInterface, params: FocusFrameParams) -> ActionResult:
    """Focus a frame of the focused window by index, name/id or iframe selector."""
    ref: Any
    if params.index is not None:
        ref = params.index
    elif params.name is not None:
        ref = params.name
    else:
        ref = ElementRef(selector=params.selector or "")
    try:
        label = await iface.focus_frame(ref)
        return ActionResult.success(step="focus_frame", frame=label)
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="focus_frame",
            message="failed to focus frame",
            selector=params.selector,
            details={"ref": str(ref)},
            cause=e,
        ) from e


@action("focus_default")
async def focus_default(iface: AutomationInterface, params: None) -> ActionResult:
    """Return to the top-level document of the focused window."""
    try:
        await iface.focus_default()
        return ActionResult.success(step="focus_default")
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="focus_default", message="failed to leave frame", cause=e
        ) from e


# ---------------------------------------------------------------- scripts & dialogs


@action("execute_script", params_model=ScriptParams)
async def execute_script(iface: AutomationInterface, params: ScriptParams) -> ActionResult:
    """Run JavaScript in the focused frame; `arguments[i]` and `return` apply."""
    try:
        value = await iface.execute_javascript(params.script, *params.args)
        return ActionResult.extracted(value, step="execute_script")
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="execute_script",
            message="script failed",
            details={"script": params.script[:80]},
            cause=e,
        ) from e


@action("execute_async_script", params_model=ScriptParams)
async def execute_async_script(iface: AutomationInterface, params: ScriptParams) -> ActionResult:
    """Run asynchronous JavaScript; the last argument is the completion callback."""
    try:
        value = await iface.execute_async_javascript(
            params.script, *params.args, timeout_ms=params.timeout_ms
        )
        return ActionResult.extracted(value, step="execute_async_script")
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="execute_async_script",
            message="async script failed",
            details={"script": params.script[:80], "timeout_ms": params.timeout_ms},
            cause=e,
        ) from e


@action("accept_dialog", params_model=AcceptDialogParams)
async def accept_dialog(iface: AutomationInterface, params: AcceptDialogParams) -> ActionResult:
    """Accept the open alert/confirm/prompt, optionally answering a prompt."""
    try:
        message = await iface.dialog_text()
        await iface.accept_dialog(params.prompt_text)
        return ActionResult.extracted(message, step="accept_dialog")
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="accept_dialog", message="failed to accept dialog", cause=e
        ) from e


@action("dismiss_dialog")
async def dismiss_dialog(iface: AutomationInterface, params: None) -> ActionResult:
    """Dismiss the open dialog."""
    try:
        message = await iface.dialog_text()
        await iface.dismiss_dialog()
        return ActionResult.extracted(message, step="dismiss_dialog")
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(
            action="dismiss_dialog", message="failed to dismiss dialog", cause=e
        ) from e
