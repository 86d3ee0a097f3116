"""Data models for the memoize rewriter.

This module contains the core data classes used throughout the system to
describe matched functions, planned rewrites, text edits and batch results.

A descriptor is produced by an external front end (a parser or AST matcher)
and only carries offsets into the original source unit:

    >>> from memoize_rewriter.core.models import FunctionDescriptor, Parameter
    >>> source = "int f(int x) { return x; }"
    >>> descriptor = FunctionDescriptor(
    ...     name="f",
    ...     return_type="int",
    ...     parameters=(Parameter(name="x", type_text="int"),),
    ...     declaration_start=0,
    ...     name_end=5,
    ...     body_start=13,
    ...     body_end=26,
    ... )
    >>> descriptor.parameter_list_span
    Span(start=5, end=13)

Every span and offset refers to the original, unmodified buffer. Edits are
never expressed against a partially rewritten buffer.
"""

import hashlib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any


class EditKind(str, Enum):
    """Kinds of text edits produced by a rewrite plan."""

    REPLACE = "replace"
    INSERT_BEFORE = "insert-before"
    INSERT_AFTER = "insert-after"

    def __str__(self) -> str:
        """Return string representation of the edit kind."""
        return self.value


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open range of character offsets ``[start, end)`` in the original buffer."""

    start: int
    end: int

    def __post_init__(self) -> None:
        """Reject negative or inverted spans.

        Raises:
            ValueError: If either offset is negative or ``end < start``.
        """
        if self.start < 0 or self.end < 0:
            raise ValueError(f"Span offsets must be non-negative, got {self.start}..{self.end}")
        if self.end < self.start:
            raise ValueError(f"Span end {self.end} precedes start {self.start}")

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        """Return True if ``offset`` lies strictly inside the span."""
        return self.start < offset < self.end

    def overlaps(self, other: "Span") -> bool:
        """Return True if both spans share at least one character."""
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True, slots=True)
class Parameter:
    """A single declared parameter of a matched function."""

    name: str
    type_text: str


@dataclass(frozen=True, slots=True)
class FunctionDescriptor:
    """Structured view of one matched function definition.

    Attributes:
        name: Identifier of the function as written in the source.
        return_type: Rendered return type text (qualifiers already folded in).
        parameters: Declared parameters in call-site order.
        declaration_start: Offset of the first character of the declaration.
        name_end: Offset just past the last character of the function name.
        body_start: Offset of the opening brace of the body, or None when the
            matched declaration has no definition.
        body_end: Offset just past the closing brace of the body, or None when
            the matched declaration has no definition.
    """

    name: str
    return_type: str
    parameters: tuple[Parameter, ...]
    declaration_start: int
    name_end: int
    body_start: int | None
    body_end: int | None

    @property
    def has_body(self) -> bool:
        """Whether the descriptor carries a function body."""
        return self.body_start is not None and self.body_end is not None

    @property
    def rename_span(self) -> Span:
        """Span from the start of the declaration to the end of the name."""
        return Span(self.declaration_start, self.name_end)

    @property
    def parameter_list_span(self) -> Span:
        """Span between the end of the name and the start of the body."""
        if self.body_start is None:
            raise ValueError(f"Function '{self.name}' has no body")
        return Span(self.name_end, self.body_start)

    @property
    def definition_span(self) -> Span:
        """Span covering the whole definition, declaration through closing brace."""
        if self.body_end is None:
            raise ValueError(f"Function '{self.name}' has no body")
        return Span(self.declaration_start, self.body_end)

    @property
    def parameter_names(self) -> list[str]:
        """Parameter names in declared order."""
        return [parameter.name for parameter in self.parameters]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FunctionDescriptor":
        """Build a descriptor from a manifest entry.

        Args:
            data: Mapping with keys ``name``, ``return_type``, ``parameters``,
                ``declaration_start``, ``name_end``, ``body_start`` and
                ``body_end``. Each parameter is a mapping with ``name`` and
                ``type`` keys.

        Returns:
            FunctionDescriptor: The parsed descriptor.

        Raises:
            KeyError: If a required key is missing.
            TypeError: If a field has the wrong type.
        """
        raw_parameters: Sequence[Mapping[str, Any]] = data.get("parameters") or ()
        if isinstance(raw_parameters, (str, bytes)) or not isinstance(raw_parameters, Sequence):
            raise TypeError("parameters must be a list")

        parameters = tuple(
            Parameter(name=str(item["name"]), type_text=str(item.get("type", "")))
            for item in raw_parameters
        )

        def optional_offset(key: str) -> int | None:
            value = data.get(key)
            return None if value is None else _as_offset(key, value)

        return cls(
            name=str(data["name"]),
            return_type=str(data["return_type"]),
            parameters=parameters,
            declaration_start=_as_offset("declaration_start", data["declaration_start"]),
            name_end=_as_offset("name_end", data["name_end"]),
            body_start=optional_offset("body_start"),
            body_end=optional_offset("body_end"),
        )


def _as_offset(key: str, value: object) -> int:
    # bool is an int subclass; a manifest with `true` as an offset is malformed
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key} must be an integer offset, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class TextEdit:
    """A single edit expressed against the original buffer.

    For insertions the span is empty and ``span.start`` is the insertion point.
    """

    kind: EditKind
    span: Span
    text: str

    @classmethod
    def replace(cls, span: Span, text: str) -> "TextEdit":
        """Replace the characters of ``span`` with ``text``."""
        return cls(EditKind.REPLACE, span, text)

    @classmethod
    def insert_before(cls, offset: int, text: str) -> "TextEdit":
        """Insert ``text`` at ``offset``, ahead of anything else inserted there."""
        return cls(EditKind.INSERT_BEFORE, Span(offset, offset), text)

    @classmethod
    def insert_after(cls, offset: int, text: str) -> "TextEdit":
        """Insert ``text`` at ``offset``, behind anything else inserted there."""
        return cls(EditKind.INSERT_AFTER, Span(offset, offset), text)

    @property
    def offset(self) -> int:
        """Start position of the edit in the original buffer."""
        return self.span.start


@dataclass(frozen=True, slots=True)
class RewritePlan:
    """Single-use plan for rewriting one matched function.

    ``edits`` always holds exactly three edits in the order Replace (rename),
    InsertAfter (wrapper) and InsertBefore (forward declaration).
    """

    function_name: str
    mangled_name: str
    prototype_text: str
    wrapper_text: str
    edits: tuple[TextEdit, TextEdit, TextEdit]
    definition_span: Span

    @property
    def rename_edit(self) -> TextEdit:
        return self.edits[0]

    @property
    def wrapper_edit(self) -> TextEdit:
        return self.edits[1]

    @property
    def declaration_edit(self) -> TextEdit:
        return self.edits[2]

    @property
    def fingerprint(self) -> str:
        """Deterministic 16-character fingerprint of the plan content."""
        parts = [self.function_name, self.mangled_name, self.prototype_text, self.wrapper_text]
        parts.extend(f"{edit.kind}:{edit.span.start}:{edit.span.end}:{edit.text}" for edit in self.edits)
        return hashlib.sha256("\x00".join(parts).encode()).hexdigest()[:16]


@dataclass(frozen=True, slots=True)
class RewriteFailure:
    """A function that could not be rewritten, and why."""

    function_name: str
    error_kind: str
    message: str


@dataclass(frozen=True, slots=True)
class RewriteResult:
    """Outcome of rewriting one translation unit.

    Attributes:
        source: Patched unit text, or the unmodified text for a dry run.
        plans: Plans that were accepted (and applied unless dry run).
        edits: Edits of all accepted plans, in plan order, against the
            original buffer.
        failures: Functions that were rejected, one entry each.
        dry_run: Whether edits were only planned.
    """

    source: str
    plans: list[RewritePlan]
    edits: list[TextEdit]
    failures: list[RewriteFailure]
    dry_run: bool = False

    @property
    def applied_count(self) -> int:
        return 0 if self.dry_run else len(self.plans)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def success_rate(self) -> float:
        """Percentage of matched functions that produced an accepted plan (0-100)."""
        total = len(self.plans) + len(self.failures)
        if total == 0:
            return 100.0
        return len(self.plans) / total * 100.0
