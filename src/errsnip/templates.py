# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Declarative diagnostic templates with tracked argument positions.

Templates let applications declare the shape of a diagnostic once (code,
message, help, severity) and stamp out instances later. Values substituted
into the message are recorded as spans so the renderer can style them apart
from the literal text.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from string import Formatter
from typing import Any, Final

from .models import Diagnostic, DiagnosticBuilder
from .severity import Severity

_FORMATTER: Final[Formatter] = Formatter()


def format_with_spans(
    template: str,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> tuple[str, tuple[tuple[int, int], ...]]:
    """Format ``template`` and report where each substituted value landed.

    Args:
        template: :meth:`str.format` style template.
        args: Positional replacement values.
        kwargs: Keyword replacement values.

    Returns:
        tuple[str, tuple[tuple[int, int], ...]]: Formatted text and the
        ``(start, end)`` character spans of every non-empty substitution.

    Raises:
        KeyError: If a named field has no value.
        IndexError: If a positional field has no value.
        ValueError: If automatic and manual field numbering are mixed.
    """

    values = dict(kwargs or {})
    pieces: list[str] = []
    spans: list[tuple[int, int]] = []
    cursor = 0
    auto_index = 0
    manual = False
    for literal, field_name, format_spec, conversion in _FORMATTER.parse(template):
        pieces.append(literal)
        cursor += len(literal)
        if field_name is None:
            continue
        if field_name == "" or field_name[0] in ".[":
            if manual:
                raise ValueError("cannot switch from manual field numbering to automatic")
            field_name = f"{auto_index}{field_name}"
            auto_index += 1
        elif field_name.split(".", 1)[0].split("[", 1)[0].isdigit():
            manual = True
        obj, _ = _FORMATTER.get_field(field_name, args, values)
        obj = _FORMATTER.convert_field(obj, conversion)
        spec = _FORMATTER.vformat(format_spec, args, values) if format_spec else ""
        text = _FORMATTER.format_field(obj, spec)
        pieces.append(text)
        if text:
            spans.append((cursor, cursor + len(text)))
        cursor += len(text)
    return "".join(pieces), tuple(spans)


@dataclass(frozen=True, slots=True)
class MessageTemplate:
    """Reusable diagnostic shape.

    Attributes:
        message: Message template using :meth:`str.format` fields.
        code: Stable diagnostic code.
        severity: Severity of produced diagnostics.
        help: Optional help template formatted with the same arguments.
    """

    message: str
    code: str | None = None
    severity: Severity = Severity.ERROR
    help: str | None = None

    def build(self, *args: Any, **kwargs: Any) -> DiagnosticBuilder:
        """Return a builder with the formatted message, code, help and severity.

        Args:
            *args: Positional template values.
            **kwargs: Keyword template values.

        Returns:
            DiagnosticBuilder: Builder ready for labels and a source.
        """

        message, spans = format_with_spans(self.message, args, kwargs)
        builder = DiagnosticBuilder(message, message_spans=spans).code(self.code).severity(self.severity)
        if self.help is not None:
            builder.help(self.help.format(*args, **kwargs))
        return builder

    def __call__(self, *args: Any, **kwargs: Any) -> Diagnostic:
        return self.build(*args, **kwargs).finish()


__all__ = ["MessageTemplate", "format_with_spans"]
