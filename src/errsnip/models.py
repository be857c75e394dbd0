# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic data models and the builder used to assemble them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from enum import Enum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .severity import Severity, coerce_severity
from .source import SourceProvider
from .span import Span

type SpanLike = Span | tuple[int, int] | range
type HelpLike = Help | str

DEFAULT_EXCEPTION_DEPTH: Final[int] = 32


class SuggestionKind(str, Enum):
    """Enumerate the edits a suggestion can propose."""

    DELETE = "delete"
    INSERT = "insert"
    REPLACE = "replace"


class Label(BaseModel):
    """Annotate a span of source text with a short message."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    span: Span
    message: str = ""
    severity: Severity | None = None
    source: SourceProvider | None = None

    @field_validator("span", mode="before")
    @classmethod
    def _coerce_span(cls, value: SpanLike) -> Span:
        """Accept ``(start, end)`` pairs and ranges in place of spans.

        Args:
            value: Span-like input.

        Returns:
            Span: Normalised span.
        """

        return Span.coerce(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: Severity | str | None) -> Severity | None:
        """Normalise severity names while keeping ``None`` as "inherit".

        Args:
            value: Severity input.

        Returns:
            Severity | None: Parsed severity or ``None``.
        """

        if value is None:
            return None
        return coerce_severity(value)

    @classmethod
    def error(cls, span: SpanLike, message: str = "", *, source: SourceProvider | None = None) -> Label:
        """Return an error-severity label."""

        return cls(span=span, message=message, severity=Severity.ERROR, source=source)

    @classmethod
    def warning(cls, span: SpanLike, message: str = "", *, source: SourceProvider | None = None) -> Label:
        """Return a warning-severity label."""

        return cls(span=span, message=message, severity=Severity.WARNING, source=source)

    @classmethod
    def info(cls, span: SpanLike, message: str = "", *, source: SourceProvider | None = None) -> Label:
        """Return an info-severity label."""

        return cls(span=span, message=message, severity=Severity.INFO, source=source)

    @classmethod
    def note(cls, span: SpanLike, message: str = "", *, source: SourceProvider | None = None) -> Label:
        """Return a note-severity label."""

        return cls(span=span, message=message, severity=Severity.NOTE, source=source)

    @classmethod
    def help(cls, span: SpanLike, message: str = "", *, source: SourceProvider | None = None) -> Label:
        """Return a help-severity label."""

        return cls(span=span, message=message, severity=Severity.HELP, source=source)

    def severity_or(self, default: Severity) -> Severity:
        """Return the label severity, falling back to ``default`` when unset."""

        return self.severity if self.severity is not None else default


class Suggestion(BaseModel):
    """Propose an edit to a source that would resolve a diagnostic."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: SuggestionKind
    source: SourceProvider
    span: Span
    text: str = ""

    @field_validator("span", mode="before")
    @classmethod
    def _coerce_span(cls, value: SpanLike) -> Span:
        """Accept ``(start, end)`` pairs and ranges in place of spans."""

        return Span.coerce(value)

    @classmethod
    def delete(cls, source: SourceProvider, span: SpanLike) -> Suggestion:
        """Return a suggestion removing ``span`` from ``source``."""

        return cls(kind=SuggestionKind.DELETE, source=source, span=span)

    @classmethod
    def insert(cls, source: SourceProvider, offset: int, text: str) -> Suggestion:
        """Return a suggestion inserting ``text`` at byte ``offset``."""

        return cls(kind=SuggestionKind.INSERT, source=source, span=Span(offset, offset), text=text)

    @classmethod
    def replace(cls, source: SourceProvider, span: SpanLike, text: str) -> Suggestion:
        """Return a suggestion replacing ``span`` with ``text``."""

        return cls(kind=SuggestionKind.REPLACE, source=source, span=span, text=text)

    @property
    def changed_text(self) -> str:
        """Return the text the suggestion adds, or removes for deletions."""

        if self.kind is SuggestionKind.DELETE:
            return self.source.content.encode("utf-8")[self.span.start : self.span.end].decode("utf-8")
        return self.text

    @property
    def marker_width(self) -> int:
        """Return how many columns the rendered marker should cover.

        Returns:
            int: Width of the first line of the changed text, at least one.
        """

        return max(len(self.changed_text.split("\n", 1)[0]), 1)


class Help(BaseModel):
    """Hint displayed beneath a diagnostic, optionally carrying suggestions."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: str
    suggestions: tuple[Suggestion, ...] = Field(default_factory=tuple)

    def with_suggestion(self, suggestion: Suggestion) -> Help:
        """Return a copy of the help entry with ``suggestion`` appended."""

        return self.model_copy(update={"suggestions": (*self.suggestions, suggestion)})


def _coerce_help(value: HelpLike) -> Help:
    return value if isinstance(value, Help) else Help(message=str(value))


class Diagnostic(BaseModel):
    """Immutable description of a problem anchored to source text.

    A diagnostic may reference a primary source shared with other diagnostics
    but never owns it. Labels without their own source fall back to the
    primary source, and labels without a severity fall back to
    :attr:`severity`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: str
    code: str | None = None
    severity: Severity = Severity.ERROR
    source: SourceProvider | None = None
    labels: tuple[Label, ...] = Field(default_factory=tuple)
    help: tuple[Help, ...] = Field(default_factory=tuple)
    related: tuple[Diagnostic, ...] = Field(default_factory=tuple)
    cause: Diagnostic | None = None
    message_spans: tuple[tuple[int, int], ...] = Field(default_factory=tuple)

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: Severity | str | None) -> Severity:
        """Normalise severity names such as ``"warn"``.

        Args:
            value: Severity input.

        Returns:
            Severity: Parsed severity, defaulting to :attr:`Severity.ERROR`.
        """

        return coerce_severity(value)

    @field_validator("help", mode="before")
    @classmethod
    def _coerce_help(cls, value: HelpLike | Sequence[HelpLike] | None) -> tuple[Help, ...]:
        """Accept a bare string or a sequence of strings for help entries.

        Args:
            value: Help input.

        Returns:
            tuple[Help, ...]: Normalised help entries.
        """

        if value is None:
            return ()
        if isinstance(value, (str, Help)):
            return (_coerce_help(value),)
        return tuple(_coerce_help(entry) for entry in value)

    @classmethod
    def build(cls, message: str) -> DiagnosticBuilder:
        """Return a builder seeded with ``message``."""

        return DiagnosticBuilder(message)

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        severity: Severity = Severity.ERROR,
        max_depth: int = DEFAULT_EXCEPTION_DEPTH,
    ) -> Diagnostic:
        """Convert ``exc`` into a diagnostic, following its chain of causes.

        ``__cause__`` (or an unsuppressed ``__context__``) becomes the cause
        chain; members of an :class:`ExceptionGroup` become related diagnostics.

        Args:
            exc: Exception to convert.
            severity: Severity applied to every converted diagnostic.
            max_depth: Maximum number of chained exceptions to follow.

        Returns:
            Diagnostic: Diagnostic mirroring the exception chain.
        """

        return _diagnostic_from_exception(exc, severity, max_depth, set())

    @property
    def is_failure(self) -> bool:
        """Return whether the diagnostic counts as a failure."""

        return self.severity.is_failure

    @property
    def help_text(self) -> str | None:
        """Return all help messages joined by newlines, or ``None``."""

        if not self.help:
            return None
        return "\n".join(entry.message for entry in self.help)

    def causes(self, limit: int | None = None) -> Iterator[Diagnostic]:
        """Yield the cause chain, nearest cause first.

        Args:
            limit: Optional maximum number of causes to yield.

        Yields:
            Diagnostic: Each cause in turn.
        """

        current = self.cause
        count = 0
        while current is not None and (limit is None or count < limit):
            yield current
            current = current.cause
            count += 1

    def with_code(self, code: str | None) -> Diagnostic:
        """Return a copy with ``code`` set."""

        return self.model_copy(update={"code": code})

    def with_severity(self, severity: Severity | str) -> Diagnostic:
        """Return a copy with ``severity`` set."""

        return self.model_copy(update={"severity": coerce_severity(severity)})

    def with_source(self, source: SourceProvider | None) -> Diagnostic:
        """Return a copy pointing at ``source``."""

        return self.model_copy(update={"source": source})

    def with_label(self, label: Label) -> Diagnostic:
        """Return a copy with ``label`` appended."""

        return self.model_copy(update={"labels": (*self.labels, label)})

    def with_help(self, help_entry: HelpLike) -> Diagnostic:
        """Return a copy with ``help_entry`` appended."""

        return self.model_copy(update={"help": (*self.help, _coerce_help(help_entry))})

    def with_related(self, related: Diagnostic) -> Diagnostic:
        """Return a copy with ``related`` appended."""

        return self.model_copy(update={"related": (*self.related, related)})

    def with_cause(self, cause: Diagnostic | None) -> Diagnostic:
        """Return a copy whose cause is ``cause``."""

        return self.model_copy(update={"cause": cause})

    def __str__(self) -> str:
        return self.message


class DiagnosticBuilder:
    """Assemble a :class:`Diagnostic` field by field.

    Every method returns the builder so calls can be chained; :meth:`finish`
    produces the immutable diagnostic.
    """

    def __init__(self, message: str, *, message_spans: Iterable[tuple[int, int]] = ()) -> None:
        self._message = message
        self._message_spans = tuple(message_spans)
        self._code: str | None = None
        self._severity = Severity.ERROR
        self._source: SourceProvider | None = None
        self._labels: list[Label] = []
        self._help: list[Help] = []
        self._related: list[Diagnostic] = []
        self._cause: Diagnostic | None = None

    def code(self, code: str | None) -> DiagnosticBuilder:
        self._code = code
        return self

    def severity(self, severity: Severity | str) -> DiagnosticBuilder:
        self._severity = coerce_severity(severity)
        return self

    def source(self, source: SourceProvider | None) -> DiagnosticBuilder:
        self._source = source
        return self

    def label(
        self,
        span: Label | SpanLike,
        message: str = "",
        *,
        severity: Severity | str | None = None,
        source: SourceProvider | None = None,
    ) -> DiagnosticBuilder:
        """Append a label, either prebuilt or from its parts.

        Args:
            span: Existing label, or the span to annotate.
            message: Label message when ``span`` is not a label.
            severity: Optional label severity.
            source: Optional source overriding the diagnostic's.

        Returns:
            DiagnosticBuilder: The builder.
        """

        if isinstance(span, Label):
            self._labels.append(span)
        else:
            self._labels.append(Label(span=span, message=message, severity=severity, source=source))
        return self

    def labels(self, labels: Iterable[Label]) -> DiagnosticBuilder:
        self._labels.extend(labels)
        return self

    def help(self, help_entry: HelpLike) -> DiagnosticBuilder:
        self._help.append(_coerce_help(help_entry))
        return self

    def related(self, related: Diagnostic | DiagnosticBuilder) -> DiagnosticBuilder:
        self._related.append(related.finish() if isinstance(related, DiagnosticBuilder) else related)
        return self

    def cause(self, cause: Diagnostic | DiagnosticBuilder | None) -> DiagnosticBuilder:
        self._cause = cause.finish() if isinstance(cause, DiagnosticBuilder) else cause
        return self

    def finish(self) -> Diagnostic:
        """Return the assembled diagnostic.

        Returns:
            Diagnostic: Immutable diagnostic carrying every configured field.
        """

        return Diagnostic(
            message=self._message,
            code=self._code,
            severity=self._severity,
            source=self._source,
            labels=tuple(self._labels),
            help=tuple(self._help),
            related=tuple(self._related),
            cause=self._cause,
            message_spans=self._message_spans,
        )


def _exception_message(exc: BaseException) -> str:
    text = str(exc)
    return text if text else type(exc).__name__


def _diagnostic_from_exception(
    exc: BaseException,
    severity: Severity,
    depth_left: int,
    seen: set[int],
) -> Diagnostic:
    seen.add(id(exc))
    related: tuple[Diagnostic, ...] = ()
    if isinstance(exc, BaseExceptionGroup):
        related = tuple(
            _diagnostic_from_exception(member, severity, depth_left - 1, seen)
            for member in exc.exceptions
            if id(member) not in seen
        )
    chained = exc.__cause__
    if chained is None and not exc.__suppress_context__:
        chained = exc.__context__
    cause = None
    if chained is not None and depth_left > 1 and id(chained) not in seen:
        cause = _diagnostic_from_exception(chained, severity, depth_left - 1, seen)
    message = exc.message if isinstance(exc, BaseExceptionGroup) else _exception_message(exc)
    return Diagnostic(
        message=message,
        code=type(exc).__name__,
        severity=severity,
        related=related,
        cause=cause,
    )


__all__ = [
    "Diagnostic",
    "DiagnosticBuilder",
    "Help",
    "Label",
    "Suggestion",
    "SuggestionKind",
]
