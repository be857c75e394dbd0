# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Source buffers, the source provider protocol, and the source registry."""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Iterator
from pathlib import Path
from threading import Lock
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, PrivateAttr

from .errors import MalformedSpanError, SourceConflictError, SpanOutOfBoundsError
from .span import Span

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class SourceProvider(Protocol):
    """Expose the identity and text of something diagnostics can point into."""

    @property
    def name(self) -> str | None:
        """Return the display name of the source, or ``None`` when anonymous."""

    @property
    def content(self) -> str:
        """Return the full text of the source."""


class NamedSource(BaseModel):
    """Immutable text buffer with a display name and a cached line index.

    Offsets handed to the resolver are UTF-8 byte offsets into ``content``.
    The encoded form and the line-start index are computed on first use and
    reused by every diagnostic sharing the source.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    content: str

    _encoded: bytes | None = PrivateAttr(default=None)
    _line_starts: tuple[int, ...] | None = PrivateAttr(default=None)

    @classmethod
    def anonymous(cls, content: str) -> NamedSource:
        """Return a source without a display name.

        Args:
            content: Text of the source.

        Returns:
            NamedSource: Source whose snippet header omits a location.
        """

        return cls(name=None, content=content)

    @classmethod
    def from_path(cls, path: Path | str, *, name: str | None = None, encoding: str = "utf-8") -> NamedSource:
        """Read ``path`` into a new source.

        Args:
            path: File to read.
            name: Display name overriding the path string.
            encoding: Text encoding of the file.

        Returns:
            NamedSource: Source holding the file contents.
        """

        file_path = Path(path)
        text = file_path.read_text(encoding=encoding)
        LOGGER.debug("loaded source %s (%d characters)", file_path, len(text))
        return cls(name=name or file_path.as_posix(), content=text)

    @property
    def encoded(self) -> bytes:
        """Return the UTF-8 encoding of :attr:`content`.

        Returns:
            bytes: Encoded text that span offsets index into.
        """

        if self._encoded is None:
            self._encoded = self.content.encode("utf-8")
        return self._encoded

    @property
    def byte_length(self) -> int:
        """Return the number of bytes in the encoded source."""

        return len(self.encoded)

    @property
    def line_starts(self) -> tuple[int, ...]:
        """Return the byte offset at which every line begins.

        Returns:
            tuple[int, ...]: Ascending offsets; the first entry is always ``0``.
        """

        if self._line_starts is None:
            data = self.encoded
            starts = [0]
            position = data.find(b"\n")
            while position != -1:
                starts.append(position + 1)
                position = data.find(b"\n", position + 1)
            self._line_starts = tuple(starts)
        return self._line_starts

    @property
    def line_count(self) -> int:
        """Return the number of lines, counting a trailing empty line."""

        return len(self.line_starts)

    def line_of(self, offset: int) -> int:
        """Return the zero-based line index containing byte ``offset``.

        Args:
            offset: Byte offset within ``[0, byte_length]``.

        Returns:
            int: Line index located by binary search over :attr:`line_starts`.
        """

        return bisect_right(self.line_starts, offset) - 1

    def line_bounds(self, line: int) -> tuple[int, int]:
        """Return the byte range of ``line`` excluding its line terminator.

        Args:
            line: Zero-based line index.

        Returns:
            tuple[int, int]: ``(start, end)`` byte offsets of the line text.
        """

        starts = self.line_starts
        start = starts[line]
        if line + 1 < len(starts):
            end = starts[line + 1] - 1
            if end > start and self.encoded[end - 1 : end] == b"\r":
                end -= 1
        else:
            end = len(self.encoded)
        return start, end

    def line_text(self, line: int) -> str:
        """Return the text of ``line`` without its trailing newline.

        Args:
            line: Zero-based line index.

        Returns:
            str: Verbatim line text.
        """

        start, end = self.line_bounds(line)
        return self.encoded[start:end].decode("utf-8")

    def char_span(self, start: int, end: int) -> Span:
        """Return the byte span equivalent to the character slice ``[start:end]``.

        Args:
            start: Start index into :attr:`content` in characters.
            end: End index into :attr:`content` in characters.

        Returns:
            Span: Span expressed in UTF-8 byte offsets.

        Raises:
            MalformedSpanError: If an index is negative or ``start > end``.
            SpanOutOfBoundsError: If an index lies past the end of the content.
        """

        length = len(self.content)
        if start < 0 or end < 0 or start > end:
            raise MalformedSpanError(
                f"character span {start}..{end} is malformed",
                start=start,
                end=end,
                length=length,
                source_name=self.name,
            )
        if end > length:
            raise SpanOutOfBoundsError(
                f"character span {start}..{end} reaches past the {length} characters of the source",
                start=start,
                end=end,
                length=length,
                source_name=self.name,
            )
        byte_start = len(self.content[:start].encode("utf-8"))
        byte_end = byte_start + len(self.content[start:end].encode("utf-8"))
        return Span(byte_start, byte_end)

    def span_of(self, needle: str, occurrence: int = 0) -> Span:
        """Return the span of the ``occurrence``-th appearance of ``needle``.

        Args:
            needle: Substring to search for.
            occurrence: Zero-based index of the match to use.

        Returns:
            Span: Byte span covering the match.

        Raises:
            ValueError: If ``needle`` does not occur often enough.
        """

        index = -1
        for _ in range(occurrence + 1):
            index = self.content.find(needle, index + 1)
            if index == -1:
                raise ValueError(f"{needle!r} occurs fewer than {occurrence + 1} time(s) in source")
        return self.char_span(index, index + len(needle))

    def slice(self, span: Span) -> str:
        """Return the text denoted by ``span``.

        Args:
            span: Byte span into the source.

        Returns:
            str: Decoded substring.
        """

        return self.encoded[span.start : span.end].decode("utf-8")


def ensure_source(provider: SourceProvider) -> NamedSource:
    """Return ``provider`` as a :class:`NamedSource`.

    Args:
        provider: Any object satisfying :class:`SourceProvider`.

    Returns:
        NamedSource: ``provider`` itself when already a named source, otherwise a copy.
    """

    if isinstance(provider, NamedSource):
        return provider
    return NamedSource(name=provider.name, content=provider.content)


def source_key(provider: SourceProvider) -> tuple[str | None, int]:
    """Return the identity used to group labels sharing one source.

    Anonymous sources are kept apart by object identity.

    Args:
        provider: Source to identify.

    Returns:
        tuple[str | None, int]: Grouping key.
    """

    name = provider.name
    if name is None:
        return None, id(provider)
    return name, 0


class SourceRegistry:
    """Associate stable names with immutable sources shared across diagnostics."""

    def __init__(self) -> None:
        self._sources: dict[str, NamedSource] = {}
        self._lock = Lock()

    def register(self, name: str, content: str) -> NamedSource:
        """Register ``content`` under ``name`` and return the shared source.

        Registering identical content twice returns the existing instance.

        Args:
            name: Display name of the source.
            content: Text of the source.

        Returns:
            NamedSource: Registered source.

        Raises:
            SourceConflictError: If ``name`` is already bound to different text.
        """

        with self._lock:
            existing = self._sources.get(name)
            if existing is not None:
                if existing.content != content:
                    raise SourceConflictError(f"source {name!r} is already registered with different content")
                return existing
            source = NamedSource(name=name, content=content)
            self._sources[name] = source
            LOGGER.debug("registered source %s", name)
            return source

    def load(self, path: Path | str, *, name: str | None = None, encoding: str = "utf-8") -> NamedSource:
        """Read ``path`` and register it.

        Args:
            path: File to read.
            name: Display name overriding the path string.
            encoding: Text encoding of the file.

        Returns:
            NamedSource: Registered source.
        """

        file_path = Path(path)
        return self.register(name or file_path.as_posix(), file_path.read_text(encoding=encoding))

    def get(self, name: str) -> NamedSource | None:
        """Return the source registered under ``name``, if any."""

        with self._lock:
            return self._sources.get(name)

    def __getitem__(self, name: str) -> NamedSource:
        with self._lock:
            return self._sources[name]

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._sources

    def __iter__(self) -> Iterator[NamedSource]:
        with self._lock:
            snapshot = list(self._sources.values())
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sources)


__all__ = [
    "NamedSource",
    "SourceProvider",
    "SourceRegistry",
    "ensure_source",
    "source_key",
]
