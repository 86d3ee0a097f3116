"""Ordering and application of text edits.

Each rewrite plan carries exactly three edits, all addressed against the
original buffer:

1. Replace the declaration-start..name-end span with the renamed declaration.
2. InsertAfter the end of the definition: the synthesized wrapper.
3. InsertBefore the start of the definition: the forward declaration, so that
   recursive calls in the renamed body and earlier code see the wrapper.

Applied one by one through a rewrite buffer that remaps original positions,
this order is safe because the forward declaration goes in last and sits at
or before every other position. ``apply`` does not rely on the hand-picked
order: it sorts a whole batch by position and applies it back to front over
the original text, so edits of several functions can be applied together.
"""

import logging
from collections.abc import Iterable, Sequence

from memoize_rewriter.core.exceptions import OverlappingEditError
from memoize_rewriter.core.models import EditKind, Span, TextEdit

logger = logging.getLogger(__name__)

# Back-to-front tie-break at a shared offset: a higher rank is applied first and
# therefore ends up further right in the final text.
_APPLICATION_RANK = {
    EditKind.REPLACE: 2,
    EditKind.INSERT_AFTER: 1,
    EditKind.INSERT_BEFORE: 0,
}


class EditSequencer:
    """Assembles per-function edits and applies edit batches position-safely."""

    def assemble(
        self,
        rename_edit: TextEdit,
        definition_span: Span,
        wrapper_text: str,
        prototype_text: str,
    ) -> tuple[TextEdit, TextEdit, TextEdit]:
        """Build the three edits of one plan in their fixed order.

        Args:
            rename_edit: Replace edit produced by the renamer.
            definition_span: Span of the whole original definition.
            wrapper_text: Synthesized wrapper, starting with its separator.
            prototype_text: Prototype of the function, without terminator.

        Returns:
            Tuple of (rename, wrapper insertion, forward declaration insertion).
        """
        if rename_edit.kind is not EditKind.REPLACE:
            raise ValueError(f"Rename edit must be a replacement, got {rename_edit.kind}")
        return (
            rename_edit,
            TextEdit.insert_after(definition_span.end, wrapper_text),
            TextEdit.insert_before(definition_span.start, prototype_text + ";\n"),
        )

    def application_order(self, edits: Iterable[TextEdit]) -> list[TextEdit]:
        """Sort edits for back-to-front application over the original buffer.

        Edits are ordered by descending position. At a shared offset the final
        text reads: InsertBefore text, InsertAfter text, then replaced text.
        Among insertions of one kind at one offset, a later InsertAfter lands
        further right and a later InsertBefore further left, matching
        ``apply_in_sequence``.
        """

        def key(item: tuple[int, TextEdit]) -> tuple[int, int, int]:
            index, edit = item
            tie = -index if edit.kind is EditKind.INSERT_BEFORE else index
            return (edit.span.start, _APPLICATION_RANK[edit.kind], tie)

        indexed = sorted(enumerate(edits), key=key, reverse=True)
        return [edit for _, edit in indexed]

    def check_disjoint(self, edits: Sequence[TextEdit]) -> None:
        """Verify no two replacements overlap and no insertion splits a replacement.

        Raises:
            OverlappingEditError: On the first conflicting pair found.
        """
        replacements = sorted(
            (edit for edit in edits if edit.kind is EditKind.REPLACE),
            key=lambda edit: (edit.span.start, edit.span.end),
        )
        for previous, current in zip(replacements, replacements[1:]):
            if previous.span.overlaps(current.span):
                raise OverlappingEditError(
                    f"Replacements {previous.span.start}..{previous.span.end} and "
                    f"{current.span.start}..{current.span.end} overlap"
                )

        insertions = [edit for edit in edits if edit.kind is not EditKind.REPLACE]
        for insertion in insertions:
            for replacement in replacements:
                if replacement.span.contains(insertion.offset):
                    raise OverlappingEditError(
                        f"Insertion at {insertion.offset} falls inside replacement "
                        f"{replacement.span.start}..{replacement.span.end}"
                    )

    def apply(self, text: str, edits: Sequence[TextEdit]) -> str:
        """Apply a batch of edits addressed against ``text``.

        The input order does not matter; see ``application_order``.

        Raises:
            OverlappingEditError: If the edits are not disjoint.
            IndexError: If an edit reaches past the end of ``text``.
        """
        self.check_disjoint(edits)
        result = text
        for edit in self.application_order(edits):
            if edit.span.end > len(text):
                raise IndexError(
                    f"Edit {edit.kind} at {edit.span.start}..{edit.span.end} "
                    f"exceeds source length {len(text)}"
                )
            result = result[: edit.span.start] + edit.text + result[edit.span.end :]
        logger.debug("Applied %d edits", len(edits))
        return result

    def apply_in_sequence(self, text: str, edits: Sequence[TextEdit]) -> str:
        """Apply edits one by one in the given order, remapping original positions.

        Every applied edit records its length delta; later edits translate
        their original positions through those deltas, the way a rewrite
        buffer tracks them. A replacement shifts positions at or past its end;
        an insertion shifts positions past its offset, and positions at its
        offset unless the later edit is an InsertBefore. The result equals
        ``apply`` on the same list.

        Raises:
            OverlappingEditError: If the edits are not disjoint.
        """
        self.check_disjoint(edits)
        applied: list[tuple[TextEdit, int]] = []

        def shifts(edit: TextEdit, offset: int, after_inserts: bool) -> bool:
            if edit.kind is EditKind.REPLACE and len(edit.span) > 0:
                return edit.span.end <= offset
            return edit.offset < offset or (after_inserts and edit.offset == offset)

        def mapped(offset: int, after_inserts: bool) -> int:
            return offset + sum(
                delta for done, delta in applied if shifts(done, offset, after_inserts)
            )

        result = text
        for edit in edits:
            after_inserts = edit.kind is not EditKind.INSERT_BEFORE
            start = mapped(edit.span.start, after_inserts)
            end = start + len(edit.span)
            result = result[:start] + edit.text + result[end:]
            applied.append((edit, len(edit.text) - len(edit.span)))
        return result
