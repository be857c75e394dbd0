# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Collect diagnostics and report them through a renderer.

A :class:`DiagnosticHandler` either renders every diagnostic as soon as it is
reported (:attr:`HandlerMode.IMMEDIATE`) or buffers them until
:meth:`DiagnosticHandler.drain` is called (:attr:`HandlerMode.BUFFERED`).
Either way it tracks whether an error-severity diagnostic has been seen, so a
caller can report many problems before deciding to stop.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import TextIO

from .errors import DiagnosticsAborted
from .models import Diagnostic
from .render.graphical import GraphicalRenderer

LOGGER = logging.getLogger(__name__)


class HandlerMode(str, Enum):
    """Enumerate when a handler renders reported diagnostics."""

    IMMEDIATE = "immediate"
    BUFFERED = "buffered"


class DiagnosticHandler:
    """Aggregate diagnostics and render them to a sink.

    Args:
        renderer: Renderer used to format diagnostics.
        sink: Text stream receiving reports; defaults to :data:`sys.stderr`.
        mode: Whether to render on report or on drain.
        abort_on_error: Raise :class:`DiagnosticsAborted` after a drain that
            rendered at least one error.
    """

    def __init__(
        self,
        renderer: GraphicalRenderer | None = None,
        sink: TextIO | None = None,
        mode: HandlerMode = HandlerMode.BUFFERED,
        *,
        abort_on_error: bool = False,
    ) -> None:
        self._renderer = renderer or GraphicalRenderer()
        self._sink = sink
        self._mode = HandlerMode(mode)
        self._abort_on_error = abort_on_error
        self._lock = threading.RLock()
        self._pending: list[Diagnostic] = []
        self._error_count = 0
        self._reported = 0
        # Errors rendered since the last completed drain.
        self._unflushed_errors = 0

    @property
    def mode(self) -> HandlerMode:
        return self._mode

    @property
    def sink(self) -> TextIO:
        return sys.stderr if self._sink is None else self._sink

    @property
    def renderer(self) -> GraphicalRenderer:
        return self._renderer

    @property
    def has_failed(self) -> bool:
        """Return whether any reported diagnostic was error-severity."""

        with self._lock:
            return self._error_count > 0

    @property
    def error_count(self) -> int:
        """Return the number of error-severity diagnostics reported."""

        with self._lock:
            return self._error_count

    @property
    def reported_count(self) -> int:
        """Return the number of diagnostics reported since the last reset."""

        with self._lock:
            return self._reported

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Return a snapshot of the buffered diagnostics in emission order."""

        with self._lock:
            return tuple(self._pending)

    def report(self, diagnostic: Diagnostic) -> bool:
        """Record ``diagnostic``, rendering it now in immediate mode.

        Args:
            diagnostic: Diagnostic to report.

        Returns:
            bool: ``True`` when the diagnostic is error-severity.

        Raises:
            SpanError: If an immediate-mode diagnostic cannot be rendered.
        """

        with self._lock:
            self._reported += 1
            failed = diagnostic.is_failure
            if failed:
                self._error_count += 1
            if self._mode is HandlerMode.IMMEDIATE:
                self._renderer.render_to(diagnostic, self.sink)
                if failed:
                    self._unflushed_errors += 1
            else:
                self._pending.append(diagnostic)
            LOGGER.debug(
                "reported %s diagnostic %r (%d errors so far)",
                diagnostic.severity.value,
                diagnostic.message,
                self._error_count,
            )
            return failed

    def extend(self, diagnostics: Iterable[Diagnostic]) -> bool:
        """Report every entry of ``diagnostics``.

        Returns:
            bool: ``True`` when at least one entry is error-severity.
        """

        failed = False
        for diagnostic in diagnostics:
            failed = self.report(diagnostic) or failed
        return failed

    def drain(self) -> int:
        """Render and clear buffered diagnostics in emission order.

        Returns:
            int: Number of diagnostics rendered.

        Raises:
            DiagnosticsAborted: If ``abort_on_error`` is set and errors were
                rendered since the previous drain.
            SpanError: If a buffered diagnostic cannot be rendered; it and
                every later diagnostic stay buffered.
        """

        with self._lock:
            rendered = 0
            while self._pending:
                self._renderer.render_to(self._pending[0], self.sink)
                drained = self._pending.pop(0)
                if drained.is_failure:
                    self._unflushed_errors += 1
                rendered += 1
            errors, self._unflushed_errors = self._unflushed_errors, 0
            LOGGER.debug("drained %d diagnostics, %d errors", rendered, errors)
            if self._abort_on_error and errors:
                self._abort(errors)
            return rendered

    def report_and_drain(self, diagnostic: Diagnostic) -> int:
        """Report ``diagnostic`` and then drain the buffer.

        Returns:
            int: Number of diagnostics rendered by the drain.
        """

        with self._lock:
            self.report(diagnostic)
            return self.drain()

    def reset(self) -> None:
        """Discard buffered diagnostics and clear failure tracking."""

        with self._lock:
            self._pending.clear()
            self._error_count = 0
            self._reported = 0
            self._unflushed_errors = 0
            LOGGER.debug("handler reset")

    def _abort(self, errors: int) -> None:
        error = DiagnosticsAborted(errors)
        self.sink.write(f"{error}\n")
        raise error

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def __bool__(self) -> bool:
        return True


__all__ = ["DiagnosticHandler", "HandlerMode"]
