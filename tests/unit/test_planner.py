"""Test single-function rewrite planning."""

from collections.abc import Callable

import pytest

from memoize_rewriter.core.buffer import SourceBuffer
from memoize_rewriter.core.exceptions import NameCollisionError
from memoize_rewriter.core.models import EditKind, FunctionDescriptor, Span
from memoize_rewriter.core.sequencer import EditSequencer
from memoize_rewriter.rewrite.planner import RewritePlanner


def test_plan_simple_function(simple_source: str, simple_descriptor: FunctionDescriptor) -> None:
    plan = RewritePlanner().plan(SourceBuffer(simple_source), simple_descriptor)

    assert plan.function_name == "f"
    assert plan.mangled_name == "f__original__"
    assert plan.prototype_text == "int f(int x)"
    assert plan.definition_span == Span(0, 26)
    assert plan.rename_edit.kind is EditKind.REPLACE
    assert plan.rename_edit.text == "int f__original__"
    assert plan.wrapper_edit.offset == 26
    assert plan.declaration_edit.offset == 0
    assert plan.declaration_edit.text == "int f(int x);\n"


def test_plan_is_deterministic(simple_source: str, simple_descriptor: FunctionDescriptor) -> None:
    buffer = SourceBuffer(simple_source)

    first = RewritePlanner().plan(buffer, simple_descriptor)
    second = RewritePlanner().plan(buffer, simple_descriptor)

    assert first == second
    assert first.fingerprint == second.fingerprint
    assert len(first.fingerprint) == 16


def test_fingerprint_depends_on_adapter(
    simple_source: str, simple_descriptor: FunctionDescriptor
) -> None:
    buffer = SourceBuffer(simple_source)

    default = RewritePlanner().plan(buffer, simple_descriptor)
    custom = RewritePlanner(adapter_name="cached").plan(buffer, simple_descriptor)

    assert default.fingerprint != custom.fingerprint


def test_recursive_call_binds_to_wrapper(
    fact_source: str, make_descriptor: Callable[..., FunctionDescriptor]
) -> None:
    """The renamed body still calls ``fact``, now declared ahead of it as the wrapper."""
    descriptor = make_descriptor(fact_source, "fact", parameters=[("int", "n")])
    plan = RewritePlanner().plan(SourceBuffer(fact_source), descriptor)

    rewritten = EditSequencer().apply(fact_source, plan.edits)

    assert rewritten == (
        "int fact(int n);\n"
        "int fact__original__(int n) {\n"
        "  return n <= 1 ? 1 : n * fact(n - 1);\n"
        "}\n"
        "\n"
        "int fact(int n) {\n"
        "static const auto proxy = memoize(fact__original__);\n"
        "return proxy(n);\n"
        "}\n"
    )
    assert rewritten.index("int fact(int n);") < rewritten.index("fact(n - 1)")


def test_zero_parameter_function(make_descriptor: Callable[..., FunctionDescriptor]) -> None:
    source = "int answer() { return 42; }"
    descriptor = make_descriptor(source, "answer")

    plan = RewritePlanner().plan(SourceBuffer(source), descriptor)

    assert EditSequencer().apply(source, plan.edits) == (
        "int answer();\n"
        "int answer__original__() { return 42; }\n"
        "\n"
        "int answer() {\n"
        "static const auto proxy = memoize(answer__original__);\n"
        "return proxy();\n"
        "}"
    )


def test_collision_check_can_be_disabled(make_descriptor: Callable[..., FunctionDescriptor]) -> None:
    source = "int f__original__;\nint f(int x) { return x; }"
    descriptor = make_descriptor(source, "f", parameters=[("int", "x")])
    buffer = SourceBuffer(source)

    with pytest.raises(NameCollisionError):
        RewritePlanner().plan(buffer, descriptor)

    plan = RewritePlanner(check_name_collisions=False).plan(buffer, descriptor)
    assert plan.mangled_name == "f__original__"


def test_known_symbols_are_checked(
    simple_source: str, simple_descriptor: FunctionDescriptor
) -> None:
    planner = RewritePlanner(known_symbols=["f__original__"])

    with pytest.raises(NameCollisionError):
        planner.plan(SourceBuffer(simple_source), simple_descriptor)
