# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for span validation and line/column resolution."""

from __future__ import annotations

import pytest

from errsnip.errors import MalformedSpanError, SpanError, SpanOutOfBoundsError
from errsnip.source import NamedSource
from errsnip.span import LineSpan, Position, Span, locate, resolve_span

PROGRAM = "def add(a, b):\n    return a + b\n\nprint(add(1, 2))\n"


def _denoted(source: NamedSource, parts: list[LineSpan]) -> str:
    return "\n".join(source.line_text(part.line)[part.start_column : part.end_column] for part in parts)


def test_span_helpers() -> None:
    span = Span.at(4, 3)

    assert span == Span(4, 7)
    assert span.length == 3
    assert Span(5, 5).is_empty()
    assert span.contains(6) and not span.contains(7)
    assert span.intersects(Span(6, 9))
    assert not span.intersects(Span(7, 9))
    assert span.cover(Span(1, 2)) == Span(1, 7)
    assert Span.coerce((1, 2)) == Span(1, 2)
    assert Span.coerce(range(3, 8)) == Span(3, 8)
    assert str(span) == "4..7"


def test_zero_width_span_is_truthy() -> None:
    assert Span(3, 3)


@pytest.mark.parametrize("needle", ["add", "return a + b", "print", "(1, 2)", "b"])
def test_single_line_spans_round_trip_through_columns(needle: str) -> None:
    source = NamedSource(name="prog.py", content=PROGRAM)
    span = source.span_of(needle)

    parts = resolve_span(source, span)

    assert len(parts) == 1
    assert _denoted(source, parts) == source.slice(span) == needle


def test_columns_count_characters_not_bytes() -> None:
    source = NamedSource(name="u.txt", content="größe = 1\n")
    span = source.span_of("=")

    (part,) = resolve_span(source, span)

    assert part == LineSpan(line=0, start_column=6, end_column=7)
    assert source.line_text(0)[part.start_column : part.end_column] == "="


@pytest.mark.parametrize(
    ("start_needle", "end_needle", "boundaries"),
    [
        ("def", "return", 1),
        ("(a, b):", "print", 3),
        ("add(a", "b\n", 2),
    ],
)
def test_multiline_spans_split_per_line(start_needle: str, end_needle: str, boundaries: int) -> None:
    source = NamedSource(name="prog.py", content=PROGRAM)
    span = Span(source.span_of(start_needle).start, source.span_of(end_needle).end)

    parts = resolve_span(source, span)

    assert len(parts) == boundaries + 1
    assert [part.line for part in parts] == list(range(parts[0].line, parts[0].line + boundaries + 1))
    assert all(part.full for part in parts[1:-1])
    assert not parts[0].full and not parts[-1].full
    assert _denoted(source, parts) == source.slice(span)


def test_locate_reports_zero_based_position() -> None:
    source = NamedSource(name="prog.py", content=PROGRAM)

    position = locate(source, source.span_of("return").start)

    assert position == Position(1, 4)
    assert position.human() == "2:5"


def test_span_at_end_of_source_is_valid() -> None:
    source = NamedSource(name="a", content="abc")

    assert resolve_span(source, Span(3, 3)) == [LineSpan(0, 3, 3)]


@pytest.mark.parametrize(
    ("span", "error"),
    [
        (Span(10, 12), SpanOutOfBoundsError),
        (Span(1, 12), SpanOutOfBoundsError),
        (Span(3, 1), MalformedSpanError),
        (Span(-1, 2), MalformedSpanError),
        (Span(1, 2), MalformedSpanError),
    ],
)
def test_invalid_spans_raise(span: Span, error: type[SpanError]) -> None:
    source = NamedSource(name="bad.txt", content="ébc")

    with pytest.raises(error) as excinfo:
        resolve_span(source, span)

    assert excinfo.value.start == span.start
    assert excinfo.value.end == span.end
    assert excinfo.value.length == 4
    assert excinfo.value.source_name == "bad.txt"
