# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal detection and Rich console helpers."""

from __future__ import annotations

import sys
from typing import Literal, TextIO

from rich.console import Console


def detect_tty(stream: TextIO | None = None) -> bool:
    """Return ``True`` when ``stream`` appears to be backed by a terminal.

    Args:
        stream: Stream to probe; defaults to :data:`sys.stdout`.

    Returns:
        bool: ``True`` when the stream reports TTY support, ``False`` otherwise.
    """

    target = sys.stdout if stream is None else stream
    try:
        return bool(target.isatty())
    except (AttributeError, ValueError):
        return False


class ConsoleManager:
    """Provision Rich :class:`Console` instances keyed by colour and stream."""

    def __init__(self) -> None:
        self._cache: dict[tuple[bool, bool, bool], Console] = {}

    def get(self, *, color: bool, stderr: bool = False) -> Console:
        """Return a console configured for the ``color`` preference.

        Args:
            color: ``True`` when ANSI colour output should be enabled.
            stderr: ``True`` to write to standard error instead of standard output.

        Returns:
            Console: Cached or newly constructed console.
        """

        tty = detect_tty(sys.stderr if stderr else sys.stdout)
        key = (color, stderr, tty)
        if key not in self._cache:
            color_system: Literal["auto", "standard", "256", "truecolor", "windows"] | None = (
                "auto" if color and tty else None
            )
            self._cache[key] = Console(
                color_system=color_system,
                force_terminal=tty,
                no_color=not (color and tty),
                stderr=stderr,
                emoji=False,
                highlight=False,
                soft_wrap=True,
            )
        return self._cache[key]


_CONSOLE_MANAGER = ConsoleManager()


def get_console_manager() -> ConsoleManager:
    """Return the process-wide console manager."""

    return _CONSOLE_MANAGER


__all__ = ["ConsoleManager", "detect_tty", "get_console_manager"]
