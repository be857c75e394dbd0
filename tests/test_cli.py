# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the errsnip command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from errsnip import __version__
from errsnip.cli import app
from errsnip.cli.labels import LabelSyntaxError, parse_label
from errsnip.severity import Severity


@pytest.fixture
def program(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    path = tmp_path / "main.rs"
    path.write_text("fn main() {\n  let x = ;\n}\n", encoding="utf-8")
    return path


def test_parse_label() -> None:
    spec = parse_label("3:7:warn=unused value")

    assert (spec.start, spec.end, spec.severity, spec.message) == (3, 7, Severity.WARNING, "unused value")
    assert parse_label("0:1").message == ""
    assert parse_label("0:1=a=b").message == "a=b"


@pytest.mark.parametrize("raw", ["1=missing end", "a:b=x", "1:2:3:4=x", "1:2:loud=x", "-1:2=x"])
def test_parse_label_rejects_malformed_values(raw: str) -> None:
    with pytest.raises(LabelSyntaxError):
        parse_label(raw)


def test_render_command_prints_snippet(program: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "render",
            str(program),
            "--label",
            "22:22=expected expression",
            "--message",
            "expected expression",
            "--code",
            "E0001",
            "--help-text",
            "add a value",
            "--no-color",
        ],
    )

    assert result.exit_code == 1
    assert "× error[E0001]: expected expression" in result.stdout
    assert " 2 │   let x = ;" in result.stdout
    assert "   │           ^ expected expression" in result.stdout
    assert "help: add a value" in result.stdout
    assert "\x1b[" not in result.stdout


def test_render_command_exits_zero_for_warnings(program: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["render", str(program), "-l", "0:2=keyword", "--severity", "warning", "--context", "0", "--no-color"],
    )

    assert result.exit_code == 0
    assert "⚠ warning" in result.stdout
    assert " 2 │" not in result.stdout


def test_render_command_accepts_character_offsets(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "u.txt"
    path.write_text("größe = 1\n", encoding="utf-8")

    result = CliRunner().invoke(
        app,
        ["render", str(path), "--label", "6:7=here", "--chars", "--no-color", "--severity", "info"],
    )

    assert result.exit_code == 0
    assert "      ^ here" in result.stdout


def test_render_command_reads_pyproject(program: Path) -> None:
    (program.parent / "pyproject.toml").write_text('[tool.errsnip]\ntheme = "ascii"\n', encoding="utf-8")

    result = CliRunner().invoke(app, ["render", str(program), "-l", "22:22=here", "--no-color"])

    assert result.exit_code == 1
    assert result.stdout.isascii()


@pytest.mark.parametrize(
    "arguments",
    [
        ["--label", "0:999=far"],
        ["--label", "nonsense"],
        ["--severity", "loud"],
        ["--theme", "neon"],
        ["--label", "10:200=far", "--chars"],
        ["--label", "5:3=inverted", "--chars"],
    ],
)
def test_render_command_rejects_bad_input(program: Path, arguments: list[str]) -> None:
    result = CliRunner().invoke(app, ["render", str(program), *arguments, "--no-color"])

    assert result.exit_code == 2


def test_version_command() -> None:
    result = CliRunner().invoke(app, ["version"])

    assert result.exit_code == 0
    assert result.stdout.strip() == f"errsnip {__version__}"
