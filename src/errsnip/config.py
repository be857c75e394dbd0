# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Render configuration and its loading from ``pyproject.toml``."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "errsnip"
NO_COLOR_ENV: Final[str] = "NO_COLOR"
FORCE_COLOR_ENV: Final[str] = "FORCE_COLOR"
DEFAULT_CONTEXT_LINES: Final[int] = 1
DEFAULT_MAX_DEPTH: Final[int] = 8
MIN_WIDTH: Final[int] = 20


class RenderConfig(BaseModel):
    """Options controlling how diagnostics are rendered.

    Attributes:
        context_lines: Unlabelled lines shown before and after labelled lines.
        max_depth: Number of causes rendered before the chain is elided.
        color: Force colour on or off; ``None`` detects it from the sink.
        width: Column budget used to wrap label and help messages.
        highlight_source: Paint labelled source text with its severity.
        theme: Name of the glyph and colour theme.
        indent: Spaces added per nesting level of causes and related reports.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    context_lines: int = Field(default=DEFAULT_CONTEXT_LINES, ge=0)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)
    color: bool | None = None
    width: int | None = Field(default=None, ge=MIN_WIDTH)
    highlight_source: bool = True
    theme: str = "fancy"
    indent: int = Field(default=2, ge=0)

    @field_validator("theme")
    @classmethod
    def _known_theme(cls, value: str) -> str:
        """Reject theme names that no theme is registered under.

        Args:
            value: Requested theme name.

        Returns:
            str: Normalised theme name.
        """

        from .render.theme import theme_names

        name = value.strip().lower()
        if name not in theme_names():
            raise ValueError(f"unknown theme {value!r}; expected one of {', '.join(theme_names())}")
        return name

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RenderConfig:
        """Build a configuration from a TOML-style mapping.

        Keys may use dashes or underscores.

        Args:
            data: Raw option mapping.

        Returns:
            RenderConfig: Validated configuration.

        Raises:
            ConfigError: If an option is unknown or has an invalid value.
        """

        payload = {str(key).replace("-", "_"): value for key, value in data.items()}
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"invalid errsnip configuration: {exc}") from exc

    def merged(self, **overrides: Any) -> RenderConfig:
        """Return a copy with every non-``None`` override applied.

        Raises:
            ConfigError: If an override is invalid.
        """

        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        return self.from_mapping({**self.model_dump(), **updates})


def _env_flag(environ: Mapping[str, str], key: str) -> bool:
    value = environ.get(key)
    return value is not None and value.strip() not in {"", "0"}


def apply_environment(config: RenderConfig, environ: Mapping[str, str] | None = None) -> RenderConfig:
    """Apply ``NO_COLOR`` and ``FORCE_COLOR`` to ``config``.

    ``NO_COLOR`` wins when both are set.

    Args:
        config: Configuration to adjust.
        environ: Environment mapping; defaults to :data:`os.environ`.

    Returns:
        RenderConfig: Adjusted configuration.
    """

    env = os.environ if environ is None else environ
    if env.get(NO_COLOR_ENV):
        return config.model_copy(update={"color": False})
    if _env_flag(env, FORCE_COLOR_ENV):
        return config.model_copy(update={"color": True})
    return config


def read_pyproject_section(path: Path) -> Mapping[str, Any]:
    """Return the ``[tool.errsnip]`` table of ``path``.

    Args:
        path: Location of a ``pyproject.toml`` file.

    Returns:
        Mapping[str, Any]: Section contents, empty when absent.

    Raises:
        ConfigError: If the file is not valid TOML or the section is not a table.
    """

    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"failed to parse {path}: {exc}") from exc
    tool_section = data.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return dict(section)


def load_render_config(
    root: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> RenderConfig:
    """Load render configuration for the project rooted at ``root``.

    Defaults are overlaid with ``[tool.errsnip]`` from ``pyproject.toml`` and
    then with the colour environment variables.

    Args:
        root: Project directory; defaults to the current working directory.
        environ: Environment mapping; defaults to :data:`os.environ`.

    Returns:
        RenderConfig: Effective configuration.

    Raises:
        ConfigError: If the configuration file or its values are invalid.
    """

    project_root = Path.cwd() if root is None else root
    pyproject = project_root / PYPROJECT_FILENAME
    section = read_pyproject_section(pyproject)
    if section:
        LOGGER.debug("loaded errsnip configuration from %s: %s", pyproject, sorted(section))
    config = RenderConfig.from_mapping(section)
    return apply_environment(config, environ)


__all__ = [
    "DEFAULT_CONTEXT_LINES",
    "DEFAULT_MAX_DEPTH",
    "RenderConfig",
    "apply_environment",
    "load_render_config",
    "read_pyproject_section",
]
