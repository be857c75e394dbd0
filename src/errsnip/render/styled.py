# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Styled report lines that keep their text verbatim."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from itertools import pairwise

from rich.color import ColorSystem
from rich.style import Style
from rich.text import Span


@dataclass(slots=True)
class StyledLine:
    """One report line made of raw text and Rich style spans.

    Unlike :class:`rich.text.Text`, control characters in the text are kept
    as they are, so columns computed against the source stay valid.

    Attributes:
        text: Verbatim line text without a trailing newline.
        spans: Style spans in application order; later spans win.
    """

    text: str = ""
    spans: list[Span] = field(default_factory=list)

    @property
    def plain(self) -> str:
        return self.text

    def append(self, text: str, style: Style | None = None) -> StyledLine:
        """Append ``text``, styled with ``style`` when given."""

        start = len(self.text)
        self.text += text
        if style is not None and text:
            self.spans.append(Span(start, len(self.text), style))
        return self

    def stylize(self, style: Style, start: int = 0, end: int | None = None) -> None:
        """Apply ``style`` to the characters in ``[start, end)``."""

        stop = len(self.text) if end is None else min(end, len(self.text))
        if max(start, 0) < stop:
            self.spans.append(Span(max(start, 0), stop, style))

    def rstrip(self) -> None:
        """Drop trailing spaces, clipping spans to the new length."""

        self.text = self.text.rstrip(" ")
        length = len(self.text)
        self.spans = [
            Span(span.start, min(span.end, length), span.style) for span in self.spans if span.start < length
        ]

    def split_lines(self) -> list[StyledLine]:
        """Split on ``\\n`` keeping blank lines and the styles of each part."""

        lines: list[StyledLine] = []
        offset = 0
        for part in self.text.split("\n"):
            end = offset + len(part)
            spans = [
                Span(max(span.start, offset) - offset, min(span.end, end) - offset, span.style)
                for span in self.spans
                if span.start < end and span.end > offset
            ]
            lines.append(StyledLine(part, spans))
            offset = end + 1
        return lines

    def __add__(self, other: StyledLine | str) -> StyledLine:
        if isinstance(other, str):
            other = StyledLine(other)
        offset = len(self.text)
        shifted = [Span(span.start + offset, span.end + offset, span.style) for span in other.spans]
        return StyledLine(self.text + other.text, [*self.spans, *shifted])

    def segments(self) -> Iterator[tuple[str, Style | None]]:
        """Yield ``(text, style)`` chunks with overlapping spans combined."""

        if not self.spans:
            if self.text:
                yield self.text, None
            return
        cuts = {0, len(self.text)}
        for span in self.spans:
            cuts.update((span.start, span.end))
        for start, end in pairwise(sorted(cuts)):
            styles = [span.style for span in self.spans if span.start <= start and span.end >= end]
            yield self.text[start:end], Style.combine(styles) if styles else None


def emit_text(lines: Sequence[StyledLine], color_system: ColorSystem | None) -> str:
    """Join ``lines`` into a string, with escape sequences when coloured.

    Both variants produce the same characters apart from the escapes.

    Args:
        lines: Styled report lines.
        color_system: Colour depth for escapes, or ``None`` for plain text.

    Returns:
        str: Report text with one trailing newline per line.
    """

    if color_system is None:
        return "".join(f"{line.text}\n" for line in lines)
    chunks: list[str] = []
    for line in lines:
        for text, style in line.segments():
            chunks.append(style.render(text, color_system=color_system) if style else text)
        chunks.append("\n")
    return "".join(chunks)


__all__ = ["StyledLine", "emit_text"]
