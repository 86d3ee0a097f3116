"""Renaming of the original function implementation.

The original definition keeps its body and parameter list but moves to a
mangled name, ``<name>__original__``. Only the text from the start of the
declaration to the end of the name is replaced, with ``<leading specifiers>
<return type> <mangled name>``. Specifiers written ahead of the return type
(``static``, ``inline``, attributes) are carried over verbatim so the renamed
original keeps its linkage.
"""

import logging
from collections.abc import Collection

from memoize_rewriter.core.buffer import SourceBuffer
from memoize_rewriter.core.exceptions import NameCollisionError
from memoize_rewriter.core.models import FunctionDescriptor, TextEdit

logger = logging.getLogger(__name__)

MANGLE_SUFFIX = "__original__"


class IdentifierRenamer:
    """Computes the mangled name and plans the in-place rename."""

    @staticmethod
    def mangle(name: str) -> str:
        """Return the synthetic name for the original implementation of ``name``."""
        return name + MANGLE_SUFFIX

    def plan_rename(self, descriptor: FunctionDescriptor, leading: str = "") -> TextEdit:
        """Plan the Replace edit that renames the original definition.

        Args:
            descriptor: Function being renamed.
            leading: Verbatim specifiers written ahead of the return type.

        Returns:
            TextEdit: Replacement of the declaration-start..name-end span with
                ``"<leading><return type> <mangled name>"``.
        """
        mangled = self.mangle(descriptor.name)
        return TextEdit.replace(
            descriptor.rename_span, f"{leading}{descriptor.return_type} {mangled}"
        )

    def verify_unique(
        self,
        buffer: SourceBuffer,
        mangled_name: str,
        known_symbols: Collection[str] = (),
        function_name: str | None = None,
    ) -> None:
        """Ensure the mangled name does not already name something else.

        Args:
            buffer: Original source unit.
            mangled_name: Candidate name for the renamed original.
            known_symbols: Extra symbol names visible to the unit, e.g. from
                a front end's symbol table.
            function_name: Function being rewritten, for error reporting.

        Raises:
            NameCollisionError: If the name is already in use.
        """
        if mangled_name in known_symbols:
            raise NameCollisionError(
                f"'{mangled_name}' is already declared in the symbol table",
                function_name=function_name,
            )
        if buffer.contains_identifier(mangled_name):
            raise NameCollisionError(
                f"'{mangled_name}' already occurs in the source unit",
                function_name=function_name,
            )
        logger.debug("Mangled name %s is unique", mangled_name)
