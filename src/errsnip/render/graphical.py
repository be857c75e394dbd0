# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Graphical renderer turning diagnostics into annotated terminal reports."""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Sequence
from typing import Final, TextIO

from rich.style import Style

from ..config import RenderConfig
from ..console import detect_tty
from ..layout import RenderRow, RowKind, SnippetLayout, StyledRun, layout_diagnostic
from ..models import Diagnostic, Help, Suggestion, SuggestionKind
from ..severity import Severity
from ..source import ensure_source
from ..span import column_of, validate_span
from .styled import StyledLine, emit_text
from .theme import Theme, theme_by_name

LOGGER = logging.getLogger(__name__)

HELP_PREFIX: Final[str] = "help: "
CAUSE_PREFIX: Final[str] = "caused by:"
ANONYMOUS_RULE_WIDTH: Final[int] = 3
FOOTER_WIDTH: Final[int] = 2
# Columns taken by " N │ " around a gutter of width N.
GUTTER_FRAME: Final[int] = 4
# Elided causes are counted up to this many so cyclic chains stay finite.
ELIDED_COUNT_LIMIT: Final[int] = 99
_ELISION_STYLE: Final[Style] = Style(dim=True)


def _prefixed(prefix: str, lines: Sequence[StyledLine]) -> list[StyledLine]:
    return [StyledLine(prefix) + line for line in lines]


def _wrap(text: str, width: int | None) -> list[str]:
    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        if width is None or len(paragraph) <= width or width <= 0:
            lines.append(paragraph)
        else:
            lines.extend(textwrap.wrap(paragraph, width=width, break_on_hyphens=False) or [""])
    return lines


def _plural(count: int, noun: str) -> str:
    return noun if count == 1 else f"{noun}s"


class GraphicalRenderer:
    """Render diagnostics as boxed source snippets with annotations.

    Args:
        config: Rendering options; defaults to :class:`RenderConfig` defaults.
        theme: Explicit theme overriding ``config.theme``.
    """

    def __init__(self, config: RenderConfig | None = None, *, theme: Theme | None = None) -> None:
        self._config = config or RenderConfig()
        self._theme = theme or theme_by_name(self._config.theme)

    @property
    def config(self) -> RenderConfig:
        return self._config

    @property
    def theme(self) -> Theme:
        return self._theme

    def render(self, diagnostic: Diagnostic, *, color: bool | None = None) -> str:
        """Return the full report for ``diagnostic``.

        Args:
            diagnostic: Diagnostic to render.
            color: Colour override; falls back to ``config.color`` and then
                to plain text.

        Returns:
            str: Rendered report ending with a newline.

        Raises:
            SpanError: If a label or suggestion span cannot be resolved.
        """

        enabled = self._config.color if color is None else color
        return emit_text(self.render_lines(diagnostic), self._theme.color_system if enabled else None)

    def render_to(self, diagnostic: Diagnostic, sink: TextIO) -> None:
        """Write the report for ``diagnostic`` to ``sink``.

        Colour is detected from ``sink`` when the configuration leaves it unset.
        Errors raised by ``sink`` propagate unchanged.

        Args:
            diagnostic: Diagnostic to render.
            sink: Writable text stream.
        """

        color = self._config.color
        if color is None:
            color = detect_tty(sink)
        sink.write(self.render(diagnostic, color=color))

    def render_lines(self, diagnostic: Diagnostic) -> list[StyledLine]:
        """Return the styled lines of the report for ``diagnostic``."""

        return self._report(diagnostic, depth=0, offset=0)

    # Report sections -----------------------------------------------------

    def _report(self, diagnostic: Diagnostic, depth: int, offset: int) -> list[StyledLine]:
        """Return the lines of one report.

        Args:
            diagnostic: Diagnostic to render.
            depth: Nesting level of related and cause reports.
            offset: Columns the caller prepends to every returned line.
        """

        lines = self._header(diagnostic)
        lines.extend(self._snippets(diagnostic, offset))
        for entry in diagnostic.help:
            lines.extend(self._help(entry, offset))
        if diagnostic.related and depth >= self._config.max_depth:
            count = len(diagnostic.related)
            lines.append(self._elided(f"{count} more related {_plural(count, 'report')} not shown"))
        else:
            for related in diagnostic.related:
                lines.extend(self._related(related, depth, offset))
        if diagnostic.cause is not None:
            lines.extend(self._cause(diagnostic.cause, depth, offset))
        return lines

    def _elided(self, message: str) -> StyledLine:
        indent = " " * self._config.indent
        return StyledLine().append(f"{indent}{self._theme.glyphs.elision} {message}", _ELISION_STYLE)

    def _header(self, diagnostic: Diagnostic) -> list[StyledLine]:
        theme = self._theme
        severity_style = theme.severity_style(diagnostic.severity)
        head = StyledLine()
        head.append(theme.symbol(diagnostic.severity), severity_style)
        head.append(" ")
        head.append(diagnostic.severity.value, severity_style)
        if diagnostic.code:
            head.append("[", severity_style)
            head.append(diagnostic.code, theme.style(theme.code_style))
            head.append("]", severity_style)
        head.append(": ")

        message = StyledLine(diagnostic.message)
        argument_style = theme.style(theme.argument_style)
        for start, end in diagnostic.message_spans:
            message.stylize(argument_style, start, end)
        parts = message.split_lines()
        continuation = " " * self._config.indent
        lines = [head + parts[0]]
        lines.extend(StyledLine(continuation) + part for part in parts[1:])
        return lines

    def _snippets(self, diagnostic: Diagnostic, offset: int) -> list[StyledLine]:
        config = self._config
        glyphs = self._theme.glyphs
        layouts = layout_diagnostic(diagnostic, context_lines=config.context_lines, glyphs=glyphs)
        if not layouts:
            return []
        gutter = len(str(max(layout.max_line_number for layout in layouts)))
        if config.width is not None:
            layouts = layout_diagnostic(
                diagnostic,
                context_lines=config.context_lines,
                glyphs=glyphs,
                max_width=config.width - offset - gutter - GUTTER_FRAME,
            )
        lines: list[StyledLine] = []
        for layout in layouts:
            lines.extend(self._snippet(layout, gutter))
        return lines

    def _snippet(self, layout: SnippetLayout, gutter: int) -> list[StyledLine]:
        glyphs = self._theme.glyphs
        gutter_style = self._theme.style(self._theme.gutter_style)
        pad = " " * (gutter + 1)
        title = StyledLine(pad + " ")
        if layout.source_name is None:
            title.append(glyphs.top_left + glyphs.hbar * ANONYMOUS_RULE_WIDTH, gutter_style)
        else:
            title.append(glyphs.top_left + glyphs.hbar + "[", gutter_style)
            title.append(f"{layout.source_name}:{layout.anchor.human()}")
            title.append("]", gutter_style)
        lines = [title]
        for row in layout.rows:
            if row.kind is RowKind.SOURCE and row.line is not None:
                prefix = f" {row.line + 1:>{gutter}} {glyphs.vbar} "
            elif row.kind is RowKind.ELISION:
                prefix = f"{pad} {glyphs.elision} "
            else:
                prefix = f"{pad} {glyphs.vbar} "
            line = StyledLine().append(prefix, gutter_style) + self._row_text(row)
            if not row.text:
                line.rstrip()
            lines.append(line)
        lines.append(StyledLine().append(f"{pad} {glyphs.bottom_left}{glyphs.hbar * FOOTER_WIDTH}", gutter_style))
        return lines

    def _row_text(self, row: RenderRow) -> StyledLine:
        text = StyledLine(row.text)
        runs: list[StyledRun] = list(row.runs)
        if self._config.highlight_source:
            runs.extend(row.highlights)
        for run in sorted(runs, key=lambda item: item.severity.rank):
            text.stylize(self._theme.severity_style(run.severity), run.start, run.end)
        return text

    def _help(self, entry: Help, offset: int) -> list[StyledLine]:
        indent = " " * self._config.indent
        width = self._config.width
        available = None if width is None else width - offset - len(indent) - len(HELP_PREFIX)
        body = _wrap(entry.message, available)
        first = StyledLine(indent)
        first.append(HELP_PREFIX.rstrip(), self._theme.severity_style(Severity.HELP))
        first.append(" " + body[0])
        lines = [first]
        lines.extend(StyledLine(indent + " " * len(HELP_PREFIX) + line) for line in body[1:])
        for suggestion in entry.suggestions:
            lines.extend(_prefixed(indent, self._suggestion(suggestion)))
        return lines

    def _suggestion(self, suggestion: Suggestion) -> list[StyledLine]:
        theme = self._theme
        glyphs = theme.glyphs
        source = ensure_source(suggestion.source)
        span = suggestion.span
        validate_span(source, span)
        start_line = source.line_of(span.start)
        end_line = source.line_of(span.end)
        line_begin = source.line_starts[start_line]
        _, line_end = source.line_bounds(end_line)
        encoded = source.encoded
        before = encoded[line_begin : span.start].decode("utf-8")
        after = encoded[span.end : max(line_end, span.end)].decode("utf-8")

        style = theme.style(theme.delete_style if suggestion.kind is SuggestionKind.DELETE else theme.insert_style)
        body = StyledLine(before)
        body.append(suggestion.changed_text, style)
        body.append(after)
        patched = body.split_lines()

        column = column_of(source, start_line, span.start)
        gutter = len(str(start_line + len(patched)))
        gutter_style = theme.style(theme.gutter_style)
        pad = " " * (gutter + 1)
        title = StyledLine(pad + " ")
        title.append(glyphs.top_left + glyphs.hbar + "[", gutter_style)
        title.append(f"{source.name or '<anonymous>'}:{start_line + 1}:{column + 1}")
        title.append("]", gutter_style)
        lines = [title]
        for index, part in enumerate(patched):
            row = StyledLine().append(f" {start_line + index + 1:>{gutter}} {glyphs.vbar} ", gutter_style) + part
            if not part.text:
                row.rstrip()
            lines.append(row)
            if index == 0:
                marker = StyledLine().append(f"{pad} {glyphs.vbar} ", gutter_style)
                marker.append(" " * column)
                marker.append(glyphs.caret * suggestion.marker_width, style)
                lines.append(marker)
        lines.append(StyledLine().append(f"{pad} {glyphs.bottom_left}{glyphs.hbar * FOOTER_WIDTH}", gutter_style))
        return lines

    def _related(self, related: Diagnostic, depth: int, offset: int) -> list[StyledLine]:
        glyphs = self._theme.glyphs
        indent = " " * self._config.indent
        arrow = f"{glyphs.bottom_left}{glyphs.hbar}{glyphs.arrow} "
        nested = indent + " " * len(arrow)
        body = self._report(related, depth + 1, offset + len(nested))
        first = StyledLine(indent).append(arrow, self._theme.severity_style(related.severity))
        lines = [first + body[0]]
        lines.extend(_prefixed(nested, body[1:]))
        return lines

    def _cause(self, cause: Diagnostic, depth: int, offset: int) -> list[StyledLine]:
        indent = " " * self._config.indent
        if depth >= self._config.max_depth:
            remaining = 1 + sum(1 for _ in cause.causes(limit=ELIDED_COUNT_LIMIT))
            LOGGER.debug("eliding causes beyond depth %d", self._config.max_depth)
            count = f"{ELIDED_COUNT_LIMIT}+" if remaining > ELIDED_COUNT_LIMIT else str(remaining)
            return [self._elided(f"{count} more {_plural(remaining, 'cause')} not shown")]
        heading = StyledLine(indent).append(CAUSE_PREFIX, self._theme.severity_style(cause.severity))
        nested = indent * 2
        return [heading, *_prefixed(nested, self._report(cause, depth + 1, offset + len(nested)))]


def render(diagnostic: Diagnostic, config: RenderConfig | None = None, *, color: bool | None = None) -> str:
    """Render ``diagnostic`` with a one-off :class:`GraphicalRenderer`."""

    return GraphicalRenderer(config).render(diagnostic, color=color)


def render_to(diagnostic: Diagnostic, sink: TextIO, config: RenderConfig | None = None) -> None:
    """Write ``diagnostic`` to ``sink`` with a one-off :class:`GraphicalRenderer`."""

    GraphicalRenderer(config).render_to(diagnostic, sink)


__all__ = ["GraphicalRenderer", "emit_text", "render", "render_to"]
