# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring the errsnip commands."""

from __future__ import annotations

import typer

from .. import __version__
from .render import render_command

app = typer.Typer(
    name="errsnip",
    help="Render compiler-style diagnostics over source files.",
    no_args_is_help=True,
    add_completion=False,
)
app.command("render")(render_command)


@app.command("version")
def version_command() -> None:
    """Print the installed errsnip version."""

    typer.echo(f"errsnip {__version__}")


def main() -> None:
    app()


__all__ = ["app", "main"]
