"""Test the memoize-rewriter CLI."""

import json
import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from memoize_rewriter import __version__
from memoize_rewriter.cli.main import cli, sanitize_for_output


@pytest.fixture
def unit_files(
    temp_workspace: Path, simple_source: str, simple_manifest_entry: dict[str, object]
) -> tuple[Path, Path]:
    """
    Write a one-function source unit and its manifest.

    Returns:
        tuple[Path, Path]: Paths of the source file and the JSON manifest.
    """
    source = temp_workspace / "unit.cpp"
    source.write_text(simple_source)
    manifest = temp_workspace / "unit.json"
    manifest.write_text(json.dumps({"functions": [simple_manifest_entry]}))
    return source, manifest


@pytest.fixture(autouse=True)
def clean_env() -> Iterator[None]:
    """Keep MR_* variables of the calling shell out of CLI runs."""
    with patch.dict(os.environ, {}, clear=True):
        yield


def test_sanitize_for_output_redacts_control_chars() -> None:
    assert sanitize_for_output("bad\x1b[31m") == "[REDACTED]"
    assert sanitize_for_output("fact") == "fact"


def test_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_plan_leaves_source_unchanged(unit_files: tuple[Path, Path], simple_source: str) -> None:
    source, manifest = unit_files

    result = CliRunner().invoke(cli, ["plan", str(source), "--descriptors", str(manifest)])

    assert result.exit_code == 0, result.output
    assert "1 accepted, 0 rejected" in result.output
    assert source.read_text() == simple_source


def test_apply_rewrites_in_place(unit_files: tuple[Path, Path], simple_rewritten: str) -> None:
    source, manifest = unit_files

    result = CliRunner().invoke(cli, ["apply", str(source), "-d", str(manifest)])

    assert result.exit_code == 0, result.output
    assert source.read_text() == simple_rewritten


def test_apply_to_output_file(
    unit_files: tuple[Path, Path], simple_source: str, simple_rewritten: str
) -> None:
    source, manifest = unit_files
    output = source.parent / "unit.memo.cpp"

    result = CliRunner().invoke(
        cli, ["apply", str(source), "-d", str(manifest), "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert output.read_text() == simple_rewritten
    assert source.read_text() == simple_source


def test_apply_dry_run(unit_files: tuple[Path, Path], simple_source: str) -> None:
    source, manifest = unit_files

    result = CliRunner().invoke(cli, ["apply", str(source), "-d", str(manifest), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "dry-run" in result.output
    assert source.read_text() == simple_source


def test_apply_custom_adapter(unit_files: tuple[Path, Path]) -> None:
    source, manifest = unit_files

    result = CliRunner().invoke(
        cli, ["apply", str(source), "-d", str(manifest), "--adapter-name", "cached"]
    )

    assert result.exit_code == 0, result.output
    assert "proxy = cached(f__original__);" in source.read_text()


def test_apply_exits_nonzero_on_failures(
    temp_workspace: Path,
    simple_manifest_entry: dict[str, object],
    simple_rewritten: str,
) -> None:
    source = temp_workspace / "unit.cpp"
    source.write_text("int f(int x) { return x; }")
    declaration_only = {
        **simple_manifest_entry,
        "name": "g",
        "body_start": None,
        "body_end": None,
    }
    manifest = temp_workspace / "unit.json"
    manifest.write_text(json.dumps([simple_manifest_entry, declaration_only]))

    result = CliRunner().invoke(cli, ["apply", str(source), "-d", str(manifest)])

    assert result.exit_code == 1
    assert "1 accepted, 1 rejected" in result.output
    assert source.read_text() == simple_rewritten


def test_apply_with_legacy_preset(unit_files: tuple[Path, Path]) -> None:
    source, manifest = unit_files

    result = CliRunner().invoke(
        cli, ["apply", str(source), "-d", str(manifest), "--config", "legacy"]
    )

    assert result.exit_code == 0, result.output
    assert "disabled" in result.output


def test_invalid_config_aborts(unit_files: tuple[Path, Path], simple_source: str) -> None:
    source, manifest = unit_files

    result = CliRunner().invoke(
        cli, ["apply", str(source), "-d", str(manifest), "--config", "missing.yaml"]
    )

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert source.read_text() == simple_source


def test_malformed_manifest_aborts(temp_workspace: Path, simple_source: str) -> None:
    source = temp_workspace / "unit.cpp"
    source.write_text(simple_source)
    manifest = temp_workspace / "unit.json"
    manifest.write_text(json.dumps({"functions": "f"}))

    result = CliRunner().invoke(cli, ["plan", str(source), "-d", str(manifest)])

    assert result.exit_code == 1
    assert "Error rewriting" in result.output


def test_descriptors_option_is_required(unit_files: tuple[Path, Path]) -> None:
    source, _ = unit_files

    result = CliRunner().invoke(cli, ["plan", str(source)])

    assert result.exit_code == 2
    assert "--descriptors" in result.output
