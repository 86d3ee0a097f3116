"""Test configuration and fixtures."""

import re
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from memoize_rewriter.core.models import FunctionDescriptor, Parameter

SIMPLE_SOURCE = "int f(int x) { return x; }"

SIMPLE_REWRITTEN = (
    "int f(int x);\n"
    "int f__original__(int x) { return x; }\n"
    "\n"
    "int f(int x) {\n"
    "static const auto proxy = memoize(f__original__);\n"
    "return proxy(x);\n"
    "}"
)

FACT_SOURCE = "int fact(int n) {\n  return n <= 1 ? 1 : n * fact(n - 1);\n}\n"


def describe(
    source: str,
    name: str,
    return_type: str = "int",
    parameters: Sequence[tuple[str, str]] = (),
    occurrence: int = 0,
) -> FunctionDescriptor:
    """
    Build the descriptor a front end would report for a definition in ``source``.

    The definition is located as the ``occurrence``-th ``name(`` in the text; the
    declaration is assumed to start with ``return_type`` followed by one space, and
    the body is the first brace-balanced block after the name.

    Args:
        source: Source unit text.
        name: Function name.
        return_type: Return type text written before the name.
        parameters: (type, name) pairs in declared order.
        occurrence: Which match of ``name(`` to use.

    Returns:
        FunctionDescriptor: Descriptor with offsets into ``source``.
    """
    matches = list(re.finditer(rf"(?<![A-Za-z0-9_]){re.escape(name)}\s*\(", source))
    name_start = matches[occurrence].start()
    name_end = name_start + len(name)
    declaration_start = name_start - len(return_type) - 1
    assert source[declaration_start:name_start] == return_type + " "

    body_start = source.index("{", name_end)
    depth = 0
    for index in range(body_start, len(source)):
        if source[index] == "{":
            depth += 1
        elif source[index] == "}":
            depth -= 1
            if depth == 0:
                body_end = index + 1
                break
    else:
        raise AssertionError(f"unbalanced body for {name}")

    return FunctionDescriptor(
        name=name,
        return_type=return_type,
        parameters=tuple(Parameter(name=p_name, type_text=p_type) for p_type, p_name in parameters),
        declaration_start=declaration_start,
        name_end=name_end,
        body_start=body_start,
        body_end=body_end,
    )


@pytest.fixture
def make_descriptor() -> Callable[..., FunctionDescriptor]:
    """
    Provide the ``describe`` helper for building descriptors from source text.

    Returns:
        Callable[..., FunctionDescriptor]: The ``describe`` function.
    """
    return describe


@pytest.fixture
def simple_descriptor() -> FunctionDescriptor:
    """
    Provide the descriptor of ``int f(int x) { return x; }``.

    Returns:
        FunctionDescriptor: Descriptor with declaration 0, name end 5, body 13..26.
    """
    return FunctionDescriptor(
        name="f",
        return_type="int",
        parameters=(Parameter(name="x", type_text="int"),),
        declaration_start=0,
        name_end=5,
        body_start=13,
        body_end=26,
    )


@pytest.fixture
def simple_manifest_entry() -> dict[str, object]:
    """
    Provide the manifest entry matching ``simple_descriptor``.

    Returns:
        dict[str, object]: One entry of a descriptor manifest.
    """
    return {
        "name": "f",
        "return_type": "int",
        "parameters": [{"name": "x", "type": "int"}],
        "declaration_start": 0,
        "name_end": 5,
        "body_start": 13,
        "body_end": 26,
    }


@pytest.fixture
def temp_workspace(tmp_path: Path) -> Path:
    """
    Provide a temporary workspace directory for tests.

    Returns:
        Path: Path to the temporary directory provided for the test.
    """
    return tmp_path


@pytest.fixture
def simple_source() -> str:
    """Provide a one-function source unit."""
    return SIMPLE_SOURCE


@pytest.fixture
def simple_rewritten() -> str:
    """Provide the expected rewrite of ``simple_source``."""
    return SIMPLE_REWRITTEN


@pytest.fixture
def fact_source() -> str:
    """Provide a unit with a self-recursive function."""
    return FACT_SOURCE
