"""Test descriptor manifest loading."""

import json
from pathlib import Path

import pytest

from memoize_rewriter.core.exceptions import ManifestError
from memoize_rewriter.core.manifest import load_descriptors, parse_descriptors
from memoize_rewriter.core.models import FunctionDescriptor


def test_parse_mapping_with_functions(
    simple_manifest_entry: dict[str, object], simple_descriptor: FunctionDescriptor
) -> None:
    assert parse_descriptors({"functions": [simple_manifest_entry]}) == [simple_descriptor]


def test_parse_bare_list(
    simple_manifest_entry: dict[str, object], simple_descriptor: FunctionDescriptor
) -> None:
    assert parse_descriptors([simple_manifest_entry]) == [simple_descriptor]


def test_parse_rejects_missing_functions() -> None:
    with pytest.raises(ManifestError, match="list of functions"):
        parse_descriptors({"function": []})


def test_parse_rejects_non_mapping_entry() -> None:
    with pytest.raises(ManifestError, match="entry 0 must be a mapping"):
        parse_descriptors(["f"])


def test_parse_reports_missing_key(simple_manifest_entry: dict[str, object]) -> None:
    entry = dict(simple_manifest_entry)
    del entry["name_end"]

    with pytest.raises(ManifestError, match="missing key 'name_end'"):
        parse_descriptors([entry], source="unit.yaml")


def test_parse_reports_invalid_offset(simple_manifest_entry: dict[str, object]) -> None:
    entry = {**simple_manifest_entry, "body_start": "13"}

    with pytest.raises(ManifestError, match="entry 0 is invalid"):
        parse_descriptors([entry])


def test_load_yaml(temp_workspace: Path, simple_descriptor: FunctionDescriptor) -> None:
    manifest = temp_workspace / "unit.yaml"
    manifest.write_text(
        "functions:\n"
        "  - name: f\n"
        "    return_type: int\n"
        "    parameters:\n"
        "      - {name: x, type: int}\n"
        "    declaration_start: 0\n"
        "    name_end: 5\n"
        "    body_start: 13\n"
        "    body_end: 26\n"
        "  - name: g\n"
        "    return_type: void\n"
        "    parameters: []\n"
        "    declaration_start: 27\n"
        "    name_end: 33\n"
        "    body_start: null\n"
        "    body_end: null\n"
    )

    descriptors = load_descriptors(manifest)

    assert descriptors[0] == simple_descriptor
    assert descriptors[1].name == "g"
    assert not descriptors[1].has_body


def test_load_json(
    temp_workspace: Path,
    simple_manifest_entry: dict[str, object],
    simple_descriptor: FunctionDescriptor,
) -> None:
    manifest = temp_workspace / "unit.json"
    manifest.write_text(json.dumps({"functions": [simple_manifest_entry]}))

    assert load_descriptors(manifest) == [simple_descriptor]


def test_load_invalid_json(temp_workspace: Path) -> None:
    manifest = temp_workspace / "unit.json"
    manifest.write_text("{not json")

    with pytest.raises(ManifestError, match="Invalid JSON"):
        load_descriptors(manifest)


def test_load_invalid_yaml(temp_workspace: Path) -> None:
    manifest = temp_workspace / "unit.yml"
    manifest.write_text("functions: [unclosed\n")

    with pytest.raises(ManifestError, match="Invalid YAML"):
        load_descriptors(manifest)


def test_load_unsupported_suffix(temp_workspace: Path) -> None:
    manifest = temp_workspace / "unit.txt"
    manifest.write_text("[]")

    with pytest.raises(ManifestError, match="Unsupported manifest format"):
        load_descriptors(manifest)


def test_load_missing_file(temp_workspace: Path) -> None:
    with pytest.raises(ManifestError, match="Failed to read manifest"):
        load_descriptors(temp_workspace / "missing.yaml")
