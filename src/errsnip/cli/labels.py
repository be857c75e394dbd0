# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Parse ``--label`` command line values into labels."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from ..models import Label
from ..severity import Severity, coerce_severity
from ..source import NamedSource
from ..span import Span

MESSAGE_SEPARATOR: Final[str] = "="
FIELD_SEPARATOR: Final[str] = ":"


class LabelSyntaxError(ValueError):
    """Raised when a ``--label`` value does not follow ``START:END[:SEVERITY]=MESSAGE``."""


@dataclass(frozen=True, slots=True)
class LabelSpec:
    """Parsed ``--label`` value prior to span conversion."""

    start: int
    end: int
    severity: Severity | None
    message: str

    def to_label(self, source: NamedSource, *, chars: bool = False) -> Label:
        """Return the label, treating offsets as characters when ``chars`` is set."""

        span = source.char_span(self.start, self.end) if chars else Span(self.start, self.end)
        return Label(span=span, message=self.message, severity=self.severity)


def parse_label(raw: str) -> LabelSpec:
    """Parse a single ``START:END[:SEVERITY]=MESSAGE`` value.

    Args:
        raw: Command line value.

    Returns:
        LabelSpec: Parsed components.

    Raises:
        LabelSyntaxError: If the value is malformed.
    """

    spec, separator, message = raw.partition(MESSAGE_SEPARATOR)
    if not separator:
        message = ""
    fields = spec.split(FIELD_SEPARATOR)
    if len(fields) not in {2, 3}:
        raise LabelSyntaxError(f"expected START:END[:SEVERITY]=MESSAGE, got {raw!r}")
    try:
        start, end = int(fields[0]), int(fields[1])
    except ValueError as exc:
        raise LabelSyntaxError(f"label offsets must be integers in {raw!r}") from exc
    if start < 0 or end < 0:
        raise LabelSyntaxError(f"label offsets must not be negative in {raw!r}")
    severity: Severity | None = None
    if len(fields) == 3:
        try:
            severity = coerce_severity(fields[2])
        except ValueError as exc:
            raise LabelSyntaxError(f"unknown severity {fields[2]!r} in {raw!r}") from exc
    return LabelSpec(start=start, end=end, severity=severity, message=message)


def parse_labels(values: Iterable[str]) -> list[LabelSpec]:
    return [parse_label(value) for value in values]


__all__ = ["LabelSpec", "LabelSyntaxError", "parse_label", "parse_labels"]
