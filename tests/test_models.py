# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for diagnostic models, builders and severities."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from errsnip.models import Diagnostic, Help, Label, Suggestion, SuggestionKind
from errsnip.severity import Severity, coerce_severity
from errsnip.source import NamedSource
from errsnip.span import Span


def test_severity_ordering_and_failure() -> None:
    assert Severity.HELP < Severity.NOTE < Severity.INFO < Severity.WARNING < Severity.ERROR
    assert sorted([Severity.ERROR, Severity.HELP, Severity.WARNING]) == [
        Severity.HELP,
        Severity.WARNING,
        Severity.ERROR,
    ]
    assert Severity.ERROR.is_failure
    assert not Severity.WARNING.is_failure
    assert str(Severity.INFO) == "info"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("Error", Severity.ERROR), ("warn", Severity.WARNING), ("hint", Severity.HELP), (" note ", Severity.NOTE)],
)
def test_coerce_severity(raw: str, expected: Severity) -> None:
    assert coerce_severity(raw) is expected


def test_coerce_severity_rejects_unknown_names() -> None:
    with pytest.raises(ValueError):
        coerce_severity("catastrophic")


def test_builder_assembles_every_field() -> None:
    source = NamedSource(name="lib.rs", content="fn f() {}\n")
    cause = Diagnostic(message="root cause")

    diagnostic = (
        Diagnostic.build("top")
        .code("E1")
        .severity("warning")
        .source(source)
        .label((0, 2), "keyword", severity="note")
        .label(Label.help(Span(3, 4), "name"))
        .help("try this")
        .related(Diagnostic.build("sibling"))
        .cause(cause)
        .finish()
    )

    assert diagnostic.code == "E1"
    assert diagnostic.severity is Severity.WARNING
    assert diagnostic.source is source
    assert [label.span for label in diagnostic.labels] == [Span(0, 2), Span(3, 4)]
    assert diagnostic.labels[0].severity is Severity.NOTE
    assert diagnostic.labels[1].severity is Severity.HELP
    assert diagnostic.help_text == "try this"
    assert diagnostic.related[0].message == "sibling"
    assert diagnostic.cause is cause
    assert not diagnostic.is_failure
    assert str(diagnostic) == "top"


def test_label_severity_falls_back_to_default() -> None:
    label = Label(span=range(1, 3), message="m")

    assert label.span == Span(1, 3)
    assert label.severity is None
    assert label.severity_or(Severity.INFO) is Severity.INFO
    assert Label.warning((0, 1)).severity_or(Severity.ERROR) is Severity.WARNING


def test_diagnostics_are_immutable() -> None:
    diagnostic = Diagnostic(message="frozen")

    with pytest.raises(ValidationError):
        diagnostic.message = "thawed"  # type: ignore[misc]


def test_with_helpers_return_copies() -> None:
    base = Diagnostic(message="base")

    changed = (
        base.with_code("X1")
        .with_severity("info")
        .with_label(Label.error((0, 0)))
        .with_help("hint")
        .with_related(Diagnostic(message="rel"))
        .with_cause(Diagnostic(message="why"))
    )

    assert base.code is None and base.labels == () and base.cause is None
    assert changed.code == "X1"
    assert changed.severity is Severity.INFO
    assert len(changed.labels) == 1
    assert changed.help[0] == Help(message="hint")
    assert [cause.message for cause in changed.causes()] == ["why"]


def test_causes_respects_limit() -> None:
    chain = Diagnostic(message="0", cause=Diagnostic(message="1", cause=Diagnostic(message="2")))

    assert [item.message for item in chain.causes()] == ["1", "2"]
    assert [item.message for item in chain.causes(limit=1)] == ["1"]


def test_suggestions() -> None:
    source = NamedSource(name="s.rs", content="let mut x = 1;")

    insert = Suggestion.insert(source, 4, "ref ")
    delete = Suggestion.delete(source, source.span_of("mut "))
    replace = Suggestion.replace(source, source.span_of("1"), "42")

    assert insert.kind is SuggestionKind.INSERT and insert.span == Span(4, 4)
    assert insert.marker_width == 4
    assert delete.marker_width == 4
    assert replace.marker_width == 2
    assert Suggestion.insert(source, 0, "a\nbcd").marker_width == 1
    assert delete.changed_text == "mut "
    assert Help(message="fix").with_suggestion(insert).suggestions == (insert,)


def test_from_exception_follows_cause_chain() -> None:
    try:
        try:
            raise KeyError("missing")
        except KeyError as exc:
            raise ValueError("bad value") from exc
    except ValueError as exc:
        diagnostic = Diagnostic.from_exception(exc)

    assert diagnostic.message == "bad value"
    assert diagnostic.code == "ValueError"
    assert diagnostic.cause is not None
    assert diagnostic.cause.code == "KeyError"
    assert diagnostic.cause.message == "'missing'"


def test_from_exception_uses_implicit_context() -> None:
    try:
        try:
            raise OSError("disk")
        except OSError:
            raise RuntimeError()
    except RuntimeError as exc:
        diagnostic = Diagnostic.from_exception(exc, severity=Severity.WARNING)

    assert diagnostic.message == "RuntimeError"
    assert diagnostic.severity is Severity.WARNING
    assert diagnostic.cause is not None and diagnostic.cause.message == "disk"


def test_from_exception_skips_suppressed_context() -> None:
    try:
        try:
            raise OSError("disk")
        except OSError:
            raise RuntimeError("clean") from None
    except RuntimeError as exc:
        diagnostic = Diagnostic.from_exception(exc)

    assert diagnostic.cause is None


def test_from_exception_maps_groups_to_related() -> None:
    group = ExceptionGroup("several failures", [ValueError("a"), TypeError("b")])

    diagnostic = Diagnostic.from_exception(group)

    assert diagnostic.message == "several failures"
    assert [related.code for related in diagnostic.related] == ["ValueError", "TypeError"]


def test_from_exception_depth_is_bounded() -> None:
    error: BaseException = ValueError("0")
    for index in range(1, 10):
        try:
            raise ValueError(str(index)) from error
        except ValueError as exc:
            error = exc

    diagnostic = Diagnostic.from_exception(error, max_depth=3)

    assert [cause.message for cause in diagnostic.causes()] == ["8", "7"]
