# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Custom exceptions raised by the errsnip engine.

These report failures of the engine itself. Diagnostics are plain data and are
never raised; sink ``OSError`` instances propagate unchanged.
"""

from __future__ import annotations


class ErrsnipError(RuntimeError):
    """Base class for every failure raised by errsnip."""


class ConfigError(ErrsnipError):
    """Raised when render configuration input is invalid."""


class RenderError(ErrsnipError):
    """Raised when a diagnostic cannot be laid out or rendered."""


class SpanError(RenderError):
    """Raised when a span cannot be resolved against its source."""

    def __init__(self, message: str, *, start: int, end: int, length: int, source_name: str | None = None) -> None:
        """Initialise the error with the offending span coordinates.

        Args:
            message: Human readable description of the failure.
            start: Start byte offset of the span.
            end: End byte offset of the span.
            length: Byte length of the source the span was resolved against.
            source_name: Display name of the source, when known.
        """

        super().__init__(message)
        self.start = start
        self.end = end
        self.length = length
        self.source_name = source_name


class MalformedSpanError(SpanError):
    """Raised when a span is inverted, negative, or splits a character."""


class SpanOutOfBoundsError(SpanError):
    """Raised when a span reaches past the end of its source."""


class SourceConflictError(ErrsnipError):
    """Raised when a source name is registered twice with different text."""


class DiagnosticsAborted(ErrsnipError):
    """Raised by a handler configured to abort after draining errors."""

    def __init__(self, error_count: int) -> None:
        """Record how many error diagnostics triggered the abort.

        Args:
            error_count: Number of error-severity diagnostics drained.
        """

        plural = "" if error_count == 1 else "s"
        super().__init__(f"aborting due to {error_count} previous error{plural}")
        self.error_count = error_count


__all__ = [
    "ConfigError",
    "DiagnosticsAborted",
    "ErrsnipError",
    "MalformedSpanError",
    "RenderError",
    "SourceConflictError",
    "SpanError",
    "SpanOutOfBoundsError",
]
