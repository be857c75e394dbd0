# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing status messages and debug logging setup."""

from __future__ import annotations

import logging
import sys
from typing import Final

from rich.text import Text

from .console import detect_tty, get_console_manager

PACKAGE_LOGGER: Final[str] = "errsnip"
_CONFIGURED_FLAG: Final[str] = "_errsnip_verbose_configured"


def _print_line(msg: str, *, style: str, use_color: bool | None) -> None:
    """Render ``msg`` to standard error using the shared console.

    Args:
        msg: Message text to print.
        style: Rich style applied when colour output is active.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    color_enabled = detect_tty(sys.stderr) if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, stderr=True)
    text = Text(msg)
    if color_enabled:
        text.stylize(style)
    console.print(text)


def fail(msg: str, *, use_color: bool | None = None) -> None:
    """Emit a failure message."""

    _print_line(msg, style="bold red", use_color=use_color)


def enable_debug_logging() -> logging.Logger:
    """Stream debug records of every errsnip logger to standard error.

    Calling this more than once leaves a single handler installed.

    Returns:
        logging.Logger: The package logger.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    if getattr(logger, _CONFIGURED_FLAG, False):
        return logger
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    setattr(logger, _CONFIGURED_FLAG, True)
    return logger


__all__ = ["enable_debug_logging", "fail"]
