"""Overlap detection between rewrite plans of one translation unit.

Every plan touches its function's whole definition: the rename at the start,
the wrapper after the closing brace and the forward declaration before the
declaration. Plans of independently matched functions must therefore cover
disjoint definitions; nested or overlapping matches are rejected.
"""

from dataclasses import dataclass

from ..core.models import RewritePlan, Span


@dataclass(frozen=True, slots=True)
class Overlap:
    """Two plans whose definitions share source text."""

    first: RewritePlan
    second: RewritePlan
    overlap_type: str


class OverlapDetector:
    """Detects and classifies overlaps between rewrite plans."""

    def detect_overlap(self, first: Span, second: Span) -> str | None:
        """Classify how two definition spans overlap.

        Returns:
            ``"exact"`` for identical spans, ``"nested"`` when one contains the
            other, ``"partial"`` for any other overlap, or None when the spans
            are disjoint. Adjacent spans do not overlap.
        """
        if first == second:
            return "exact"

        if not first.overlaps(second):
            return None

        if (first.start <= second.start and first.end >= second.end) or (
            second.start <= first.start and second.end >= first.end
        ):
            return "nested"
        return "partial"

    def find_overlaps(self, plans: list[RewritePlan]) -> list[Overlap]:
        """Return every overlapping pair of plans, ordered by position."""
        overlaps = []
        ordered = sorted(
            plans, key=lambda plan: (plan.definition_span.start, plan.definition_span.end)
        )

        for i, first in enumerate(ordered):
            for second in ordered[i + 1 :]:
                # sorted by start: nothing further right can overlap `first`
                if second.definition_span.start >= first.definition_span.end:
                    break
                overlap_type = self.detect_overlap(first.definition_span, second.definition_span)
                if overlap_type:
                    overlaps.append(Overlap(first, second, overlap_type))

        return overlaps

    def separate_plans_by_overlap(
        self, plans: list[RewritePlan]
    ) -> tuple[list[RewritePlan], list[Overlap]]:
        """Split plans into disjoint ones and the overlaps that rule the rest out.

        A plan involved in any overlap is dropped, whichever side it is on.

        Returns:
            Tuple of (disjoint plans in input order, detected overlaps).
        """
        overlaps = self.find_overlaps(plans)
        overlapping_ids = {id(overlap.first) for overlap in overlaps}
        overlapping_ids.update(id(overlap.second) for overlap in overlaps)
        disjoint = [plan for plan in plans if id(plan) not in overlapping_ids]
        return disjoint, overlaps
