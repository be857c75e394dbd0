# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Renderers turning diagnostics into terminal text."""

from __future__ import annotations

from .graphical import GraphicalRenderer, render, render_to
from .styled import StyledLine, emit_text
from .theme import Theme, theme_by_name, theme_names

__all__ = [
    "GraphicalRenderer",
    "StyledLine",
    "Theme",
    "emit_text",
    "render",
    "render_to",
    "theme_by_name",
    "theme_names",
]
