# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from errsnip.config import RenderConfig
from errsnip.render import GraphicalRenderer
from errsnip.source import NamedSource

MAIN_RS = "fn main() {\n  let x = ;\n}\n"


@pytest.fixture
def main_source() -> NamedSource:
    """Return the small Rust-like program used across rendering tests."""
    return NamedSource(name="main.rs", content=MAIN_RS)


@pytest.fixture
def renderer() -> GraphicalRenderer:
    """Return a plain-text renderer with default options."""
    return GraphicalRenderer(RenderConfig(color=False))
