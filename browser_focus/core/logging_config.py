"""
Logging setup: stdlib loggers per module, rendered through rich.
Modules only do `logger = logging.getLogger(__name__)`; the CLI calls
configure_logging() once.
"""
# @file purpose: Configure logging with a rich console handler.

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_NOISY_LOGGERS = ("asyncio",)


def configure_logging(level: str | int = "INFO", *, console: Console | None = None) -> None:
    """
    Install a RichHandler on the root logger.
    `level` accepts names ("debug", "INFO") or numeric levels; unknown names fall back to INFO.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))

    root = logging.getLogger()
    for h in list(root.handlers):
        if isinstance(h, RichHandler):
            root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
