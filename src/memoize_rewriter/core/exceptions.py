"""Exceptions raised while planning or applying a rewrite.

Every error is scoped to a single function: the batch rewriter records it as a
failure for that function and carries on with the remaining matches.
"""


class RewriteError(Exception):
    """Base exception for function-scoped rewrite failures.

    Attributes:
        function_name: Name of the function whose rewrite failed, if known.
        kind: Stable identifier for the failure category.
    """

    kind = "rewrite"

    def __init__(self, message: str, function_name: str | None = None) -> None:
        super().__init__(message)
        self.function_name = function_name


class MissingBodyError(RewriteError):
    """A selected declaration has no definition to rewrite."""

    kind = "missing-body"


class UnresolvableSpanError(RewriteError):
    """Rename or parameter-list boundaries cannot be located reliably.

    Typically caused by macro-expanded or otherwise non-literal tokens between
    the function name and its body.
    """

    kind = "unresolvable-span"


class NameCollisionError(RewriteError):
    """The mangled name already names another symbol in the unit."""

    kind = "name-collision"


class AmbiguousOverloadError(RewriteError):
    """Several matched functions share one name within a unit."""

    kind = "ambiguous-overload"


class OverlappingEditError(RewriteError):
    """Edits of independently matched functions overlap."""

    kind = "overlapping-edit"


class ManifestError(RewriteError):
    """A descriptor manifest could not be read or is malformed."""

    kind = "manifest"
