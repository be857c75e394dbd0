# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Byte spans and their resolution into line/column coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .errors import MalformedSpanError, SpanOutOfBoundsError

if TYPE_CHECKING:
    from .source import NamedSource

_CONTINUATION_MASK: Final[int] = 0xC0
_CONTINUATION_BITS: Final[int] = 0x80


@dataclass(frozen=True, slots=True, order=True)
class Span:
    """Half-open byte range ``[start, end)`` into a source's UTF-8 text.

    Spans are not validated on construction; the resolver reports malformed or
    out-of-bounds spans when they are laid out against a concrete source.
    """

    start: int
    end: int

    @classmethod
    def at(cls, offset: int, length: int = 0) -> Span:
        """Return a span starting at ``offset`` covering ``length`` bytes."""

        return cls(offset, offset + length)

    @classmethod
    def coerce(cls, value: Span | tuple[int, int] | range) -> Span:
        """Return ``value`` as a span.

        Args:
            value: Existing span, ``(start, end)`` pair or ``range``.

        Returns:
            Span: Equivalent span.
        """

        if isinstance(value, Span):
            return value
        if isinstance(value, range):
            return cls(value.start, value.stop)
        start, end = value
        return cls(int(start), int(end))

    @property
    def length(self) -> int:
        """Return the number of bytes covered by the span."""

        return max(self.end - self.start, 0)

    def is_empty(self) -> bool:
        """Return whether the span covers no bytes."""

        return self.start >= self.end

    def contains(self, offset: int) -> bool:
        """Return whether ``offset`` falls inside the span."""

        return self.start <= offset < self.end

    def intersects(self, other: Span) -> bool:
        """Return whether both spans share at least one byte."""

        return self.start < other.end and other.start < self.end

    def cover(self, other: Span) -> Span:
        """Return the smallest span covering both spans."""

        return Span(min(self.start, other.start), max(self.end, other.end))

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-based line and column; columns count Unicode characters."""

    line: int
    column: int

    def human(self) -> str:
        """Return the one-based ``line:column`` form shown to users."""

        return f"{self.line + 1}:{self.column + 1}"


@dataclass(frozen=True, slots=True)
class LineSpan:
    """Portion of a span that falls on a single line.

    Attributes:
        line: Zero-based line index.
        start_column: First covered column.
        end_column: Column one past the last covered character.
        full: ``True`` for intermediate lines covered from start to end.
    """

    line: int
    start_column: int
    end_column: int
    full: bool = False

    @property
    def width(self) -> int:
        """Return the number of covered columns."""

        return self.end_column - self.start_column


def _check_offset(source: NamedSource, offset: int, span: Span) -> None:
    data = source.encoded
    if offset < len(data) and data[offset] & _CONTINUATION_MASK == _CONTINUATION_BITS:
        raise MalformedSpanError(
            f"span {span} splits a multi-byte character at offset {offset}",
            start=span.start,
            end=span.end,
            length=len(data),
            source_name=source.name,
        )


def validate_span(source: NamedSource, span: Span) -> None:
    """Raise when ``span`` cannot be resolved against ``source``.

    Args:
        source: Source the span points into.
        span: Span to validate.

    Raises:
        MalformedSpanError: If the span is negative, inverted, or splits a character.
        SpanOutOfBoundsError: If the span reaches past the end of the source.
    """

    length = source.byte_length
    if span.start < 0 or span.end < 0:
        raise MalformedSpanError(
            f"span {span} has a negative offset",
            start=span.start,
            end=span.end,
            length=length,
            source_name=source.name,
        )
    if span.start > length:
        raise SpanOutOfBoundsError(
            f"span {span} starts past the end of {source.name or 'source'} ({length} bytes)",
            start=span.start,
            end=span.end,
            length=length,
            source_name=source.name,
        )
    if span.start > span.end:
        raise MalformedSpanError(
            f"span {span} ends before it starts",
            start=span.start,
            end=span.end,
            length=length,
            source_name=source.name,
        )
    if span.end > length:
        raise SpanOutOfBoundsError(
            f"span {span} is out of bounds for {source.name or 'source'} of {length} bytes",
            start=span.start,
            end=span.end,
            length=length,
            source_name=source.name,
        )
    _check_offset(source, span.start, span)
    _check_offset(source, span.end, span)


def column_of(source: NamedSource, line: int, offset: int) -> int:
    """Return the character column of byte ``offset`` on ``line``."""

    line_start = source.line_starts[line]
    return len(source.encoded[line_start:offset].decode("utf-8"))


def locate(source: NamedSource, offset: int) -> Position:
    """Return the line/column position of byte ``offset``.

    Args:
        source: Source to resolve against.
        offset: Byte offset within ``[0, byte_length]``.

    Returns:
        Position: Zero-based position.
    """

    validate_span(source, Span(offset, offset))
    line = source.line_of(offset)
    return Position(line, column_of(source, line, offset))


def resolve_span(source: NamedSource, span: Span) -> list[LineSpan]:
    """Split ``span`` into per-line sub-spans.

    A span inside one line yields one entry; a span crossing ``k`` line
    boundaries yields ``k + 1`` entries. The first entry runs to the end of its
    line, the last one stops at the span end, and intermediate lines are
    marked ``full``.

    Args:
        source: Source the span points into.
        span: Span to resolve.

    Returns:
        list[LineSpan]: Sub-spans ordered by line.
    """

    validate_span(source, span)
    start_line = source.line_of(span.start)
    end_line = source.line_of(span.end)
    start_column = column_of(source, start_line, span.start)
    end_column = column_of(source, end_line, span.end)
    if start_line == end_line:
        return [LineSpan(start_line, start_column, end_column)]

    entries = [LineSpan(start_line, start_column, len(source.line_text(start_line)))]
    for line in range(start_line + 1, end_line):
        entries.append(LineSpan(line, 0, len(source.line_text(line)), full=True))
    entries.append(LineSpan(end_line, 0, end_column))
    return entries


__all__ = [
    "LineSpan",
    "Position",
    "Span",
    "column_of",
    "locate",
    "resolve_span",
    "validate_span",
]
