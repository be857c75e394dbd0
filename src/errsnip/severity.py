# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Ordered severity levels attached to diagnostics and labels.

    Members compare by rank rather than by their string value, so
    ``Severity.HELP < Severity.WARNING < Severity.ERROR`` holds.
    """

    HELP = "help"
    NOTE = "note"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Return the numeric rank used for ordering and colour priority.

        Returns:
            int: Rank where larger values denote more severe diagnostics.
        """

        return _SEVERITY_RANK[self]

    @property
    def is_failure(self) -> bool:
        """Return whether the severity marks a failed run.

        Returns:
            bool: ``True`` for :attr:`Severity.ERROR`.
        """

        return self.rank >= _SEVERITY_RANK[Severity.ERROR]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value


_SEVERITY_RANK: Final[Mapping[Severity, int]] = {
    Severity.HELP: 0,
    Severity.NOTE: 1,
    Severity.INFO: 2,
    Severity.WARNING: 3,
    Severity.ERROR: 4,
}

_SEVERITY_ALIASES: Final[dict[str, Severity]] = {
    "err": Severity.ERROR,
    "fatal": Severity.ERROR,
    "warn": Severity.WARNING,
    "information": Severity.INFO,
    "notice": Severity.NOTE,
    "hint": Severity.HELP,
}


def coerce_severity(value: Severity | str | None, default: Severity = Severity.ERROR) -> Severity:
    """Return a :class:`Severity` for ``value`` accepting common spellings.

    Args:
        value: Severity instance, case-insensitive name, or ``None``.
        default: Severity returned when ``value`` is ``None`` or blank.

    Returns:
        Severity: Normalised severity.

    Raises:
        ValueError: If ``value`` is a string naming no known severity.
    """

    if value is None:
        return default
    if isinstance(value, Severity):
        return value
    token = value.strip().lower()
    if not token:
        return default
    if token in _SEVERITY_ALIASES:
        return _SEVERITY_ALIASES[token]
    return Severity(token)


__all__ = [
    "Severity",
    "coerce_severity",
]
