# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render compiler-style diagnostics anchored to source text."""

from __future__ import annotations

from importlib import metadata

from .config import RenderConfig, load_render_config
from .errors import (
    ConfigError,
    DiagnosticsAborted,
    ErrsnipError,
    MalformedSpanError,
    RenderError,
    SourceConflictError,
    SpanError,
    SpanOutOfBoundsError,
)
from .handler import DiagnosticHandler, HandlerMode
from .models import Diagnostic, DiagnosticBuilder, Help, Label, Suggestion, SuggestionKind
from .render import GraphicalRenderer, Theme, render, render_to
from .severity import Severity
from .source import NamedSource, SourceProvider, SourceRegistry
from .span import LineSpan, Position, Span, locate, resolve_span
from .templates import MessageTemplate

__all__ = [
    "ConfigError",
    "Diagnostic",
    "DiagnosticBuilder",
    "DiagnosticHandler",
    "DiagnosticsAborted",
    "ErrsnipError",
    "GraphicalRenderer",
    "HandlerMode",
    "Help",
    "Label",
    "LineSpan",
    "MalformedSpanError",
    "MessageTemplate",
    "NamedSource",
    "Position",
    "RenderConfig",
    "RenderError",
    "Severity",
    "SourceConflictError",
    "SourceProvider",
    "SourceRegistry",
    "Span",
    "SpanError",
    "SpanOutOfBoundsError",
    "Suggestion",
    "SuggestionKind",
    "Theme",
    "__version__",
    "load_render_config",
    "locate",
    "render",
    "render_to",
    "resolve_span",
]

try:
    __version__ = metadata.version("errsnip")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
