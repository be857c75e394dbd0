# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lay out diagnostic labels into non-colliding annotation rows.

The layout engine resolves every label of a diagnostic against its source,
groups labels per source and per line, assigns single-line labels to stacked
underline rows and multi-line labels to bracket lanes, and emits a flat list
of :class:`RenderRow` instructions. Rows carry plain text plus severity runs;
colouring is left to the renderer.
"""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from .models import Diagnostic, Label
from .severity import Severity
from .source import NamedSource, SourceProvider, ensure_source, source_key
from .span import LineSpan, Position, resolve_span

LOGGER = logging.getLogger(__name__)

DEFAULT_CONTEXT_LINES: Final[int] = 1
MIN_WRAP_WIDTH: Final[int] = 12
LANE_WIDTH: Final[int] = 2
CONNECTOR_TAIL: Final[int] = 2


class RowKind(str, Enum):
    """Enumerate the kinds of rows a snippet is made of."""

    SOURCE = "source"
    UNDERLINE = "underline"
    CONNECTOR = "connector"
    BRACKET_START = "bracket-start"
    BRACKET_END = "bracket-end"
    ELISION = "elision"


@dataclass(frozen=True, slots=True)
class Glyphs:
    """Characters used to draw underlines, connectors and brackets."""

    hbar: str = "─"
    hook: str = "┬"
    vbar: str = "│"
    elision: str = "∶"
    top_left: str = "╭"
    bottom_left: str = "╰"
    tee: str = "├"
    caret: str = "^"
    arrow: str = "▶"

    @classmethod
    def unicode(cls) -> Glyphs:
        return cls()

    @classmethod
    def ascii(cls) -> Glyphs:
        return cls(
            hbar="-",
            hook="+",
            vbar="|",
            elision=":",
            top_left=",",
            bottom_left="`",
            tee="|",
            caret="^",
            arrow=">",
        )


@dataclass(frozen=True, slots=True)
class StyledRun:
    """Half-open column range of a row painted with a severity colour."""

    start: int
    end: int
    severity: Severity


@dataclass(frozen=True, slots=True)
class RenderRow:
    """One output row of a snippet, excluding the gutter.

    Attributes:
        kind: Role of the row.
        text: Row text to the right of the gutter bar.
        line: Zero-based source line for :attr:`RowKind.SOURCE` rows.
        runs: Severity-coloured column ranges within :attr:`text`.
        highlights: Labelled columns of a source row, painted only when
            source highlighting is enabled.
    """

    kind: RowKind
    text: str
    line: int | None = None
    runs: tuple[StyledRun, ...] = ()
    highlights: tuple[StyledRun, ...] = ()


@dataclass(frozen=True, slots=True)
class SnippetLayout:
    """Render instructions for all labels pointing into one source.

    Attributes:
        source_name: Display name of the source, ``None`` when anonymous.
        anchor: Position of the first label, shown in the snippet header.
        rows: Ordered rows to print beneath the header.
    """

    source_name: str | None
    anchor: Position
    rows: tuple[RenderRow, ...]

    @property
    def max_line_number(self) -> int:
        """Return the largest one-based line number among source rows."""

        return max((row.line + 1 for row in self.rows if row.line is not None), default=0)


@dataclass(frozen=True, slots=True)
class ResolvedLabel:
    """Label paired with its resolved position and effective severity."""

    label: Label
    severity: Severity
    parts: tuple[LineSpan, ...]
    order: int

    @property
    def start(self) -> Position:
        first = self.parts[0]
        return Position(first.line, first.start_column)

    @property
    def end(self) -> Position:
        last = self.parts[-1]
        return Position(last.line, last.end_column)

    @property
    def is_multiline(self) -> bool:
        return len(self.parts) > 1

    @property
    def message(self) -> str:
        return self.label.message

    @property
    def columns(self) -> tuple[int, int]:
        """Return the occupied column range, giving empty spans one column."""

        part = self.parts[0]
        return part.start_column, max(part.end_column, part.start_column + 1)

    @property
    def hook_column(self) -> int:
        return self.columns[1] - 1


@dataclass(slots=True)
class _Bracket:
    label: ResolvedLabel
    lane: int


@dataclass(slots=True)
class _Canvas:
    """Sparse character grid with per-cell severity."""

    cells: list[str | None] = field(default_factory=list)
    styles: list[Severity | None] = field(default_factory=list)

    def put(self, column: int, text: str, severity: Severity | None = None) -> None:
        if column < 0:
            return
        end = column + len(text)
        if end > len(self.cells):
            missing = end - len(self.cells)
            self.cells.extend([None] * missing)
            self.styles.extend([None] * missing)
        for offset, char in enumerate(text):
            self.cells[column + offset] = char
            self.styles[column + offset] = severity

    def finish(self, kind: RowKind, *, pad_line: str = "", pad_offset: int = 0, line: int | None = None) -> RenderRow:
        chars: list[str] = []
        for index, cell in enumerate(self.cells):
            if cell is not None:
                chars.append(cell)
                continue
            source_index = index - pad_offset
            if 0 <= source_index < len(pad_line) and pad_line[source_index] == "\t":
                chars.append("\t")
            else:
                chars.append(" ")
        text = "".join(chars).rstrip(" ")
        return RenderRow(kind=kind, text=text, line=line, runs=_runs(self.styles[: len(text)]))


def _runs(styles: Sequence[Severity | None]) -> tuple[StyledRun, ...]:
    runs: list[StyledRun] = []
    start = 0
    current: Severity | None = None
    for index, severity in enumerate([*styles, None]):
        if severity == current:
            continue
        if current is not None:
            runs.append(StyledRun(start, index, current))
        start = index
        current = severity
    return tuple(runs)


def _message_lines(message: str, available: int | None) -> list[str]:
    lines: list[str] = []
    for paragraph in message.splitlines() or [""]:
        if available is None or available < MIN_WRAP_WIDTH or len(paragraph) <= available:
            lines.append(paragraph)
            continue
        lines.extend(textwrap.wrap(paragraph, width=available, break_on_hyphens=False) or [""])
    return lines


def assign_rows(labels: Iterable[ResolvedLabel]) -> list[list[ResolvedLabel]]:
    """Partition single-line labels into rows without column overlap.

    Labels are taken by start column ascending, longer spans first on ties,
    and placed into the first row they do not intersect. Non-overlapping labels
    share a row; mutually overlapping labels land in increasing rows.

    Args:
        labels: Single-line labels sharing one source line.

    Returns:
        list[list[ResolvedLabel]]: Rows, topmost first, each sorted by column.
    """

    ordered = sorted(labels, key=lambda item: (item.columns[0], -(item.columns[1] - item.columns[0]), item.order))
    rows: list[list[ResolvedLabel]] = []
    for candidate in ordered:
        start, end = candidate.columns
        for row in rows:
            if all(end <= other.columns[0] or other.columns[1] <= start for other in row):
                row.append(candidate)
                break
        else:
            rows.append([candidate])
    return rows


def assign_lanes(brackets: Iterable[ResolvedLabel]) -> list[_Bracket]:
    """Give every multi-line label a margin lane free for its whole line range."""

    ordered = sorted(brackets, key=lambda item: (item.start, -item.end.line, item.order))
    lane_ends: list[int] = []
    assigned: list[_Bracket] = []
    for candidate in ordered:
        for lane, last_line in enumerate(lane_ends):
            if last_line < candidate.start.line:
                lane_ends[lane] = candidate.end.line
                assigned.append(_Bracket(candidate, lane))
                break
        else:
            lane_ends.append(candidate.end.line)
            assigned.append(_Bracket(candidate, len(lane_ends) - 1))
    return assigned


def resolve_label(source: NamedSource, label: Label, default: Severity, order: int) -> ResolvedLabel:
    """Resolve ``label`` against ``source``.

    Raises:
        SpanError: If the label span cannot be resolved.
    """

    parts = tuple(resolve_span(source, label.span))
    return ResolvedLabel(label=label, severity=label.severity_or(default), parts=parts, order=order)


class SnippetBuilder:
    """Build the rows for the labels of one source."""

    def __init__(
        self,
        source: NamedSource,
        labels: Sequence[ResolvedLabel],
        *,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        glyphs: Glyphs | None = None,
        max_width: int | None = None,
    ) -> None:
        self._source = source
        self._labels = list(labels)
        self._context = max(context_lines, 0)
        self._glyphs = glyphs or Glyphs.unicode()
        self._max_width = max_width
        self._single: dict[int, list[ResolvedLabel]] = {}
        for resolved in self._labels:
            if not resolved.is_multiline:
                self._single.setdefault(resolved.start.line, []).append(resolved)
        self._brackets = assign_lanes(item for item in self._labels if item.is_multiline)
        lanes = max((bracket.lane for bracket in self._brackets), default=-1) + 1
        self._margin = lanes * LANE_WIDTH + (1 if lanes else 0)
        self._active: dict[int, _Bracket] = {}
        self._rows: list[RenderRow] = []

    def build(self) -> SnippetLayout:
        """Return the snippet layout for the configured labels."""

        first = min(self._labels, key=lambda item: item.order)
        previous: int | None = None
        for line in self._visible_lines():
            if previous is not None and line > previous + 1:
                self._emit_elision()
            self._emit_line(line)
            previous = line
        return SnippetLayout(source_name=self._source.name, anchor=first.start, rows=tuple(self._rows))

    def _visible_lines(self) -> list[int]:
        referenced: set[int] = set(self._single)
        for bracket in self._brackets:
            referenced.add(bracket.label.start.line)
            referenced.add(bracket.label.end.line)
        last_context_line = self._source.line_count - 1
        if last_context_line > 0 and self._source.content.endswith("\n"):
            last_context_line -= 1
        visible: set[int] = set(referenced)
        for line in referenced:
            low = max(line - self._context, 0)
            high = min(line + self._context, last_context_line)
            visible.update(range(low, high + 1))
        return sorted(visible)

    def _canvas(self) -> _Canvas:
        canvas = _Canvas()
        for lane, bracket in sorted(self._active.items()):
            canvas.put(lane * LANE_WIDTH, self._glyphs.vbar, bracket.label.severity)
        return canvas

    def _emit_elision(self) -> None:
        canvas = self._canvas()
        self._rows.append(canvas.finish(RowKind.ELISION))

    def _emit_line(self, line: int) -> None:
        text = self._source.line_text(line)
        lanes = self._canvas().finish(RowKind.SOURCE)
        row_text = f"{lanes.text:<{self._margin}}{text}" if text else lanes.text
        self._rows.append(
            RenderRow(
                kind=RowKind.SOURCE,
                text=row_text,
                line=line,
                runs=lanes.runs,
                highlights=self._highlights(line),
            ),
        )

        singles = self._single.get(line, [])
        if len(singles) == 1:
            self._emit_inline(singles[0], text)
        elif singles:
            for stacked in assign_rows(singles):
                self._emit_stacked(stacked, text)

        for bracket in self._brackets:
            if bracket.label.end.line == line:
                self._emit_bracket_end(bracket, text)
        for bracket in self._brackets:
            if bracket.label.start.line == line:
                self._emit_bracket_start(bracket, text)

    def _highlights(self, line: int) -> tuple[StyledRun, ...]:
        runs: list[StyledRun] = []
        for resolved in self._labels:
            for part in resolved.parts:
                if part.line == line and part.end_column > part.start_column:
                    runs.append(
                        StyledRun(self._margin + part.start_column, self._margin + part.end_column, resolved.severity),
                    )
        return tuple(runs)

    def _available(self, column: int) -> int | None:
        if self._max_width is None:
            return None
        return self._max_width - column

    def _emit_inline(self, resolved: ResolvedLabel, text: str) -> None:
        start, end = resolved.columns
        canvas = self._canvas()
        canvas.put(self._margin + start, self._glyphs.caret * (end - start), resolved.severity)
        message_column = self._margin + end + 1
        lines = _message_lines(resolved.message, self._available(message_column)) if resolved.message else []
        if lines:
            canvas.put(message_column, lines[0], resolved.severity)
        self._rows.append(canvas.finish(RowKind.UNDERLINE, pad_line=text, pad_offset=self._margin))
        for continuation in lines[1:]:
            follow = self._canvas()
            follow.put(message_column, continuation, resolved.severity)
            self._rows.append(follow.finish(RowKind.CONNECTOR, pad_line=text, pad_offset=self._margin))

    def _emit_stacked(self, row: list[ResolvedLabel], text: str) -> None:
        glyphs = self._glyphs
        canvas = self._canvas()
        for resolved in row:
            start, end = resolved.columns
            canvas.put(self._margin + start, glyphs.hbar * (end - start), resolved.severity)
            if resolved.message:
                canvas.put(self._margin + resolved.hook_column, glyphs.hook, resolved.severity)
        self._rows.append(canvas.finish(RowKind.UNDERLINE, pad_line=text, pad_offset=self._margin))

        pending = [resolved for resolved in row if resolved.message]
        while pending:
            current = pending.pop()
            hook = self._margin + current.hook_column
            message_column = hook + 1 + CONNECTOR_TAIL + 1
            lines = _message_lines(current.message, self._available(message_column))
            for index, message_line in enumerate(lines):
                canvas = self._canvas()
                for waiting in pending:
                    canvas.put(self._margin + waiting.hook_column, glyphs.vbar, waiting.severity)
                if index == 0:
                    canvas.put(hook, glyphs.bottom_left + glyphs.hbar * CONNECTOR_TAIL, current.severity)
                canvas.put(message_column, message_line, current.severity)
                self._rows.append(canvas.finish(RowKind.CONNECTOR, pad_line=text, pad_offset=self._margin))

    def _emit_bracket_start(self, bracket: _Bracket, text: str) -> None:
        glyphs = self._glyphs
        lane_column = bracket.lane * LANE_WIDTH
        caret_column = self._margin + bracket.label.start.column
        canvas = self._canvas()
        canvas.put(lane_column, glyphs.top_left + glyphs.hbar * (caret_column - lane_column - 1), bracket.label.severity)
        canvas.put(caret_column, glyphs.caret, bracket.label.severity)
        self._rows.append(canvas.finish(RowKind.BRACKET_START, pad_line=text, pad_offset=self._margin))
        self._active[bracket.lane] = bracket

    def _emit_bracket_end(self, bracket: _Bracket, text: str) -> None:
        glyphs = self._glyphs
        self._active.pop(bracket.lane, None)
        lane_column = bracket.lane * LANE_WIDTH
        caret_column = self._margin + max(bracket.label.end.column - 1, 0)
        message_column = caret_column + 2
        lines = _message_lines(bracket.label.message, self._available(message_column)) if bracket.label.message else []
        canvas = self._canvas()
        canvas.put(lane_column, glyphs.bottom_left + glyphs.hbar * (caret_column - lane_column - 1), bracket.label.severity)
        canvas.put(caret_column, glyphs.caret, bracket.label.severity)
        if lines:
            canvas.put(message_column, lines[0], bracket.label.severity)
        self._rows.append(canvas.finish(RowKind.BRACKET_END, pad_line=text, pad_offset=self._margin))
        for continuation in lines[1:]:
            follow = self._canvas()
            follow.put(message_column, continuation, bracket.label.severity)
            self._rows.append(follow.finish(RowKind.CONNECTOR, pad_line=text, pad_offset=self._margin))


def group_labels(diagnostic: Diagnostic) -> list[tuple[NamedSource, list[tuple[int, Label]]]]:
    """Group the labels of ``diagnostic`` by the source they point into.

    Labels fall back to the diagnostic's primary source; labels with no source
    at all are skipped. Groups keep the order in which sources first appear.

    Args:
        diagnostic: Diagnostic whose labels should be grouped.

    Returns:
        list[tuple[NamedSource, list[tuple[int, Label]]]]: Sources paired
        with their labels and each label's original index.
    """

    groups: dict[tuple[str | None, int], tuple[SourceProvider, list[tuple[int, Label]]]] = {}
    for index, label in enumerate(diagnostic.labels):
        provider = label.source if label.source is not None else diagnostic.source
        if provider is None:
            LOGGER.debug("skipping label %r without a source", label.message)
            continue
        key = source_key(provider)
        groups.setdefault(key, (provider, []))[1].append((index, label))
    return [(ensure_source(provider), labels) for provider, labels in groups.values()]


def layout_diagnostic(
    diagnostic: Diagnostic,
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    glyphs: Glyphs | None = None,
    max_width: int | None = None,
) -> list[SnippetLayout]:
    """Return one snippet layout per source referenced by ``diagnostic``.

    Args:
        diagnostic: Diagnostic to lay out.
        context_lines: Unlabelled lines shown around every labelled line.
        glyphs: Characters used for drawing; unicode by default.
        max_width: Optional column budget for row text, used to wrap messages.

    Returns:
        list[SnippetLayout]: Layouts in order of first appearance of each source.

    Raises:
        SpanError: If any label span cannot be resolved.
    """

    layouts: list[SnippetLayout] = []
    for source, labels in group_labels(diagnostic):
        resolved = [resolve_label(source, label, diagnostic.severity, index) for index, label in labels]
        builder = SnippetBuilder(
            source,
            resolved,
            context_lines=context_lines,
            glyphs=glyphs,
            max_width=max_width,
        )
        layouts.append(builder.build())
    return layouts


__all__ = [
    "DEFAULT_CONTEXT_LINES",
    "Glyphs",
    "RenderRow",
    "ResolvedLabel",
    "RowKind",
    "SnippetBuilder",
    "SnippetLayout",
    "StyledRun",
    "assign_lanes",
    "assign_rows",
    "group_labels",
    "layout_diagnostic",
    "resolve_label",
]
