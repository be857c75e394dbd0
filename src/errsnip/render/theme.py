# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Colour and glyph themes used by the graphical renderer."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final

from rich.color import ColorSystem
from rich.style import Style

from ..errors import ConfigError
from ..layout import Glyphs
from ..severity import Severity

ARGUMENT_TINT: Final[str] = "ansi256:208"
CODE_TINT: Final[str] = "ansi256:105"
LINE_NUMBER_TINT: Final[str] = "ansi256:244"


def _style_from_code(code: str) -> Style:
    """Return a Rich style for ``code`` accepting ``ansi256:N`` shorthands.

    Args:
        code: Rich style definition or ``ansi256:N`` colour index.

    Returns:
        Style: Parsed style, or a null style for blank input.
    """

    if not code:
        return Style.null()
    if code.startswith("ansi256:"):
        return Style(color=f"color({code.split(':', 1)[1]})")
    return Style.parse(code)


def _freeze(mapping: Mapping[Severity, str]) -> Mapping[Severity, str]:
    return MappingProxyType(dict(mapping))


_FANCY_SEVERITY: Final[Mapping[Severity, str]] = _freeze(
    {
        Severity.ERROR: "bold #ff5f5f",
        Severity.WARNING: "bold #ffd75f",
        Severity.INFO: "bold #5fafff",
        Severity.NOTE: "bold #87d787",
        Severity.HELP: "bold #5fd7d7",
    },
)

_ANSI_SEVERITY: Final[Mapping[Severity, str]] = _freeze(
    {
        Severity.ERROR: "bold red",
        Severity.WARNING: "bold yellow",
        Severity.INFO: "bold blue",
        Severity.NOTE: "bold green",
        Severity.HELP: "bold cyan",
    },
)

_UNICODE_SYMBOLS: Final[Mapping[Severity, str]] = _freeze(
    {
        Severity.ERROR: "×",
        Severity.WARNING: "⚠",
        Severity.INFO: "☞",
        Severity.NOTE: "☞",
        Severity.HELP: "☞",
    },
)

_ASCII_SYMBOLS: Final[Mapping[Severity, str]] = _freeze(
    {
        Severity.ERROR: "x",
        Severity.WARNING: "!",
        Severity.INFO: "i",
        Severity.NOTE: "*",
        Severity.HELP: "?",
    },
)


@dataclass(frozen=True, slots=True)
class Theme:
    """Glyphs, symbols and styles applied while rendering.

    Attributes:
        name: Registry name of the theme.
        glyphs: Box-drawing characters for gutters, underlines and brackets.
        symbols: Header symbol per severity.
        severity_styles: Style code per severity.
        argument_style: Style for interpolated message arguments.
        code_style: Style for the diagnostic code in the header.
        gutter_style: Style for line numbers and gutter bars.
        insert_style: Style for text added by a suggestion.
        delete_style: Style for text removed by a suggestion.
        color_system: Colour depth used when emitting escape sequences.
    """

    name: str
    glyphs: Glyphs = field(default_factory=Glyphs.unicode)
    symbols: Mapping[Severity, str] = _UNICODE_SYMBOLS
    severity_styles: Mapping[Severity, str] = _FANCY_SEVERITY
    argument_style: str = ARGUMENT_TINT
    code_style: str = CODE_TINT
    gutter_style: str = LINE_NUMBER_TINT
    insert_style: str = "bold green"
    delete_style: str = "strike red"
    color_system: ColorSystem = ColorSystem.TRUECOLOR

    @classmethod
    def fancy(cls) -> Theme:
        return cls(name="fancy")

    @classmethod
    def ansi(cls) -> Theme:
        return cls(
            name="ansi",
            severity_styles=_ANSI_SEVERITY,
            argument_style="bold magenta",
            code_style="magenta",
            gutter_style="dim",
            color_system=ColorSystem.STANDARD,
        )

    @classmethod
    def ascii(cls) -> Theme:
        return cls(
            name="ascii",
            glyphs=Glyphs.ascii(),
            symbols=_ASCII_SYMBOLS,
            severity_styles=_ANSI_SEVERITY,
            argument_style="bold magenta",
            code_style="magenta",
            gutter_style="dim",
            color_system=ColorSystem.STANDARD,
        )

    def symbol(self, severity: Severity) -> str:
        return self.symbols.get(severity, self.glyphs.arrow)

    def severity_style(self, severity: Severity) -> Style:
        return _style_from_code(self.severity_styles.get(severity, ""))

    def style(self, code: str) -> Style:
        return _style_from_code(code)


_THEMES: Final[Mapping[str, Callable[[], Theme]]] = MappingProxyType(
    {
        "fancy": Theme.fancy,
        "unicode": Theme.fancy,
        "ansi": Theme.ansi,
        "ascii": Theme.ascii,
    },
)


def theme_names() -> tuple[str, ...]:
    """Return the registered theme names in sorted order."""

    return tuple(sorted(_THEMES))


def theme_by_name(name: str) -> Theme:
    """Return the theme registered as ``name``.

    Args:
        name: Case-insensitive theme name.

    Returns:
        Theme: Freshly constructed theme.

    Raises:
        ConfigError: If no theme uses ``name``.
    """

    factory = _THEMES.get(name.strip().lower())
    if factory is None:
        raise ConfigError(f"unknown theme {name!r}; expected one of {', '.join(theme_names())}")
    return factory()


__all__ = ["Theme", "theme_by_name", "theme_names"]
