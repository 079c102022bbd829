"""
Project-level exception types, one per failure the caller can act on.
- BrowserFocusError: base of every custom error
- Window/frame resolution: IndexOutOfRangeError, NoMatchingWindowError,
  UnknownWindowError, FrameNotFoundError, NoWindowToCloseError
- TimeoutError: waits that gave up (avoids mixing with the builtin)
- UnderlyingSessionError: anything the wrapped browser session raised
- ActionExecutionError: action layer failures, with context for the CLI
"""
# @file purpose: Define error taxonomy for browser-focus.

from typing import Any, Awaitable, TypeVar

T = TypeVar("T")


class BrowserFocusError(Exception):
    """Base class for all custom errors in browser-focus."""


class IndexOutOfRangeError(BrowserFocusError):
    """Raised when a focus index is outside the live window list."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Given focus window index is out of bounds: {index} current size: {size}")
        self.index = index
        self.size = size


class NoMatchingWindowError(BrowserFocusError):
    """Raised when no live window has the requested title or URL."""

    def __init__(self, query: str) -> None:
        super().__init__(f"The given focus window string matched no title or URL: {query}")
        self.query = query


class UnknownWindowError(BrowserFocusError):
    """Raised when a handle is not (or no longer) a live window."""

    def __init__(self, handle: str) -> None:
        super().__init__(f"Given window handle is not a live window: {handle}")
        self.handle = handle


class FrameNotFoundError(BrowserFocusError):
    """Raised when a frame reference does not resolve in the focused window."""

    def __init__(self, ref: Any) -> None:
        super().__init__(f"Given frame reference matched no frame: {ref!r}")
        self.ref = ref


class NoWindowToCloseError(BrowserFocusError):
    """Raised when closing would leave the session without a window."""

    def __init__(self, handle: str | None = None) -> None:
        super().__init__("Cannot close the last window of the session")
        self.handle = handle


class NoDialogError(BrowserFocusError):
    """Raised when a dialog operation is attempted while no dialog is open."""


class InterfaceNotStartedError(BrowserFocusError):
    """Raised when the automation interface is used before start()."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Automation interface not yet started; cannot {operation}.")
        self.operation = operation


class TimeoutError(BrowserFocusError):
    """Raised on operation timeout within the interface."""


class UnderlyingSessionError(BrowserFocusError):
    """
    Raised when the wrapped browser session fails (crash, disconnect, protocol error).
    The session should be considered unusable until the interface is restarted.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"browser session failed during {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class ActionExecutionError(BrowserFocusError):
    """
    Raised when an action fails to execute.
    Wraps the context (selector, url, details) so the CLI/runner can print
    consistent diagnostics.
    """

    def __init__(
        self,
        action: str,
        message: str,
        *,
        selector: str | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.action: str = action
        self.selector: str | None = selector
        self.url: str | None = url
        self.details: dict[str, Any] = details or {}
        self.cause: BaseException | None = cause

    def __str__(self) -> str:
        parts = [f"[{self.action}] {super().__str__()}"]
        if self.selector:
            parts.append(f"selector={self.selector}")
        if self.url:
            parts.append(f"url={self.url}")
        if self.details:
            kv = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"details={{ {kv} }}")
        if self.cause is not None:
            parts.append(f"cause={self.cause}")
        return " | ".join(parts)


async def session_call(operation: str, op: Awaitable[T]) -> T:
    """
    Await a browser session call, wrapping anything that is not already a
    BrowserFocusError into UnderlyingSessionError.
    """
    try:
        return await op
    except BrowserFocusError:
        raise
    except Exception as e:  # noqa: BLE001
        raise UnderlyingSessionError(operation, e) from e
