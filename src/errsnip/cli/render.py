# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command rendering one diagnostic over a file."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

from ..config import RenderConfig, load_render_config
from ..console import detect_tty
from ..errors import ConfigError, SpanError
from ..logging import enable_debug_logging, fail
from ..models import Diagnostic
from ..render import GraphicalRenderer
from ..severity import coerce_severity
from ..source import NamedSource
from .labels import LabelSyntaxError, parse_labels

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_diagnostic(
    source: NamedSource,
    *,
    message: str,
    code: str | None,
    severity: str,
    labels: list[str],
    help_text: list[str],
    chars: bool,
) -> Diagnostic:
    """Assemble the diagnostic described by the command line.

    Raises:
        LabelSyntaxError: If a label value is malformed.
        SpanError: If a character label lies outside the source.
        ValueError: If ``severity`` names no known severity.
    """

    builder = Diagnostic.build(message).code(code).severity(coerce_severity(severity)).source(source)
    for spec in parse_labels(labels):
        builder.label(spec.to_label(source, chars=chars))
    for entry in help_text:
        builder.help(entry)
    return builder.finish()


def _load_config(
    *,
    context: int | None,
    color: bool | None,
    width: int | None,
    theme: str | None,
) -> RenderConfig:
    config = load_render_config(Path.cwd())
    return config.merged(context_lines=context, color=color, width=width, theme=theme)


def render_command(
    path: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="File the labels point into."),
    ],
    label: Annotated[
        list[str] | None,
        typer.Option("--label", "-l", help="Label as START:END[:SEVERITY]=MESSAGE; repeatable."),
    ] = None,
    message: Annotated[str | None, typer.Option("--message", "-m", help="Diagnostic message.")] = None,
    code: Annotated[str | None, typer.Option("--code", help="Diagnostic code such as E0001.")] = None,
    severity: Annotated[str, typer.Option("--severity", "-s", help="Diagnostic severity.")] = "error",
    help_text: Annotated[
        list[str] | None,
        typer.Option("--help-text", help="Help line shown beneath the snippet; repeatable."),
    ] = None,
    context: Annotated[int | None, typer.Option("--context", min=0, help="Context lines around labels.")] = None,
    color: Annotated[bool | None, typer.Option("--color/--no-color", help="Force colour on or off.")] = None,
    chars: Annotated[bool, typer.Option("--chars", help="Treat label offsets as character indices.")] = False,
    width: Annotated[int | None, typer.Option("--width", min=20, help="Wrap messages to this width.")] = None,
    theme: Annotated[str | None, typer.Option("--theme", help="Theme name (fancy, ansi, ascii).")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr.")] = False,
) -> None:
    """Render a diagnostic over PATH and exit 1 when it is an error."""

    if verbose:
        enable_debug_logging()
    try:
        config = _load_config(context=context, color=color, width=width, theme=theme)
    except ConfigError as exc:
        fail(str(exc))
        raise typer.Exit(code=EXIT_USAGE) from exc

    source = NamedSource.from_path(path, name=path.as_posix())
    try:
        diagnostic = build_diagnostic(
            source,
            message=message or f"diagnostic for {path.name}",
            code=code,
            severity=severity,
            labels=label or [],
            help_text=help_text or [],
            chars=chars,
        )
    except (LabelSyntaxError, SpanError, ValueError) as exc:
        fail(str(exc))
        raise typer.Exit(code=EXIT_USAGE) from exc

    enabled = config.color if config.color is not None else detect_tty(sys.stdout)
    try:
        output = GraphicalRenderer(config).render(diagnostic, color=enabled)
    except SpanError as exc:
        fail(str(exc))
        raise typer.Exit(code=EXIT_USAGE) from exc
    typer.echo(output, nl=False, color=enabled)
    raise typer.Exit(code=EXIT_FAILED if diagnostic.is_failure else EXIT_OK)


__all__ = ["build_diagnostic", "render_command"]
