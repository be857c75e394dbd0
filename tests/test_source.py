# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for named sources and the source registry."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

import pytest

from errsnip.errors import MalformedSpanError, SourceConflictError, SpanOutOfBoundsError
from errsnip.source import NamedSource, SourceProvider, SourceRegistry, ensure_source, source_key
from errsnip.span import Span


def test_line_starts_include_trailing_empty_line(main_source: NamedSource) -> None:
    assert main_source.line_starts == (0, 12, 24, 26)
    assert main_source.line_count == 4
    assert main_source.line_text(1) == "  let x = ;"
    assert main_source.line_text(3) == ""


def test_line_of_uses_byte_offsets() -> None:
    source = NamedSource(name="u.txt", content="héllo\nwörld")

    assert source.byte_length == len("héllo\nwörld".encode())
    assert source.line_of(0) == 0
    assert source.line_of(6) == 0
    assert source.line_of(7) == 1


def test_line_text_drops_carriage_return() -> None:
    source = NamedSource(name="crlf.txt", content="one\r\ntwo\r\n")

    assert source.line_text(0) == "one"
    assert source.line_text(1) == "two"


def test_char_span_and_span_of_convert_to_bytes() -> None:
    source = NamedSource(name="u.txt", content="naïve café café")

    assert source.char_span(0, 5) == Span(0, 6)
    first = source.span_of("café")
    second = source.span_of("café", occurrence=1)
    assert source.slice(first) == "café"
    assert source.slice(second) == "café"
    assert second.start > first.start
    with pytest.raises(ValueError, match="fewer than 3"):
        source.span_of("café", occurrence=2)


@pytest.mark.parametrize(
    ("start", "end", "error"),
    [(10, 20, SpanOutOfBoundsError), (2, 5, SpanOutOfBoundsError), (3, 1, MalformedSpanError), (-1, 2, MalformedSpanError)],
)
def test_char_span_rejects_indices_outside_the_content(start: int, end: int, error: type[Exception]) -> None:
    source = NamedSource(name="c.rs", content="abc\n")

    with pytest.raises(error):
        source.char_span(start, end)


def test_anonymous_and_path_sources(tmp_path: Path) -> None:
    path = tmp_path / "demo.py"
    path.write_text("print('hi')\n", encoding="utf-8")

    loaded = NamedSource.from_path(path)
    anonymous = NamedSource.anonymous("x = 1")

    assert loaded.name == path.as_posix()
    assert loaded.content == "print('hi')\n"
    assert anonymous.name is None


@dataclass(frozen=True)
class _Generated:
    name: str | None
    content: str


def test_any_object_with_name_and_content_is_a_provider() -> None:
    generated = _Generated(name="gen.txt", content="a\nb")

    assert isinstance(generated, SourceProvider)
    converted = ensure_source(generated)
    assert isinstance(converted, NamedSource)
    assert converted.line_count == 2


def test_source_key_separates_anonymous_sources() -> None:
    first = NamedSource.anonymous("a")
    second = NamedSource.anonymous("a")

    assert source_key(first) != source_key(second)
    assert source_key(NamedSource(name="x", content="")) == ("x", 0)


def test_registry_returns_shared_instance() -> None:
    registry = SourceRegistry()

    first = registry.register("lib.rs", "fn f() {}")
    again = registry.register("lib.rs", "fn f() {}")

    assert first is again
    assert "lib.rs" in registry
    assert registry["lib.rs"] is first
    assert len(registry) == 1
    assert list(registry) == [first]
    with pytest.raises(SourceConflictError):
        registry.register("lib.rs", "fn g() {}")


def test_registry_is_safe_across_threads() -> None:
    registry = SourceRegistry()
    results: list[NamedSource] = []

    def worker() -> None:
        results.append(registry.register("shared.rs", "let a = 1;"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(registry) == 1
    assert all(result is results[0] for result in results)
