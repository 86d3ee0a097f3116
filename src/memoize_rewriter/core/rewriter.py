"""Rewriting of a whole translation unit.

This module provides the UnitRewriter class, which plans a rewrite for every
matched function of one source unit, drops the functions that cannot be
rewritten safely, and applies the remaining edits in one batch.

Failures are function-scoped: a function with a missing body, unresolvable
spans, a colliding mangled name, an ambiguous overload or an overlapping
match is reported and skipped, and never blocks the other functions.
"""

import logging
from collections import Counter
from collections.abc import Collection, Sequence

from memoize_rewriter.analysis.overlap_detector import OverlapDetector
from memoize_rewriter.config.runtime_config import ApplicationMode, RuntimeConfig
from memoize_rewriter.core.buffer import SourceBuffer
from memoize_rewriter.core.exceptions import (
    AmbiguousOverloadError,
    OverlappingEditError,
    RewriteError,
)
from memoize_rewriter.core.models import (
    FunctionDescriptor,
    RewriteFailure,
    RewritePlan,
    RewriteResult,
    TextEdit,
)
from memoize_rewriter.core.sequencer import EditSequencer
from memoize_rewriter.rewrite.planner import RewritePlanner


class UnitRewriter:
    """Main rewriter class for one translation unit at a time."""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        known_symbols: Collection[str] = (),
    ) -> None:
        """Create a UnitRewriter.

        Args:
            config: Runtime configuration. Defaults to ``RuntimeConfig.from_defaults()``.
            known_symbols: Symbol names visible to the unit beyond its own text,
                consulted when verifying that mangled names are unused.
        """
        self.config = config or RuntimeConfig.from_defaults()
        self.logger = logging.getLogger(__name__)
        self.planner = RewritePlanner(
            adapter_name=self.config.adapter_name,
            check_name_collisions=self.config.check_name_collisions,
            known_symbols=known_symbols,
        )
        self.overlap_detector = OverlapDetector()
        self.sequencer = EditSequencer()

    def plan_all(
        self, buffer: SourceBuffer, descriptors: Sequence[FunctionDescriptor]
    ) -> tuple[list[RewritePlan], list[RewriteFailure]]:
        """Plan every descriptor independently and screen the plans.

        Returns:
            Tuple of (accepted plans in descriptor order, failures).
        """
        plans: list[RewritePlan] = []
        failures: list[RewriteFailure] = []

        overloaded = self._overloaded_names(descriptors)

        for descriptor in descriptors:
            try:
                if descriptor.name in overloaded:
                    raise AmbiguousOverloadError(
                        f"'{descriptor.name}' is matched {overloaded[descriptor.name]} times; "
                        "overloaded functions cannot share one mangled name",
                        function_name=descriptor.name,
                    )
                plans.append(self.planner.plan(buffer, descriptor))
            except RewriteError as e:
                failures.append(self._record_failure(descriptor.name, e))

        disjoint, overlaps = self.overlap_detector.separate_plans_by_overlap(plans)
        for overlap in overlaps:
            self.logger.warning(
                f"Definitions of {overlap.first.function_name} and "
                f"{overlap.second.function_name} overlap ({overlap.overlap_type})"
            )
        rejected = {id(plan) for plan in plans} - {id(plan) for plan in disjoint}
        for plan in plans:
            if id(plan) in rejected:
                error = OverlappingEditError(
                    f"Definition of '{plan.function_name}' overlaps another matched function",
                    function_name=plan.function_name,
                )
                failures.append(self._record_failure(plan.function_name, error))

        return disjoint, failures

    def rewrite(self, source: str, descriptors: Sequence[FunctionDescriptor]) -> RewriteResult:
        """Rewrite every matched function of ``source``.

        Args:
            source: Original text of the translation unit.
            descriptors: One descriptor per matched function.

        Returns:
            RewriteResult: Patched text (unchanged in dry-run mode), accepted
                plans, their edits against the original text, and failures.
        """
        buffer = SourceBuffer(source)
        plans, failures = self.plan_all(buffer, descriptors)
        edits: list[TextEdit] = [edit for plan in plans for edit in plan.edits]
        dry_run = self.config.mode == ApplicationMode.DRY_RUN

        if dry_run:
            self.logger.info(f"Dry run: planned {len(plans)} rewrites ({len(edits)} edits)")
            patched = source
        else:
            patched = self.sequencer.apply(source, edits)
            for plan in plans:
                self.logger.info(
                    f"Memoized {plan.function_name} as {plan.mangled_name} "
                    f"(definition {plan.definition_span.start}-{plan.definition_span.end})"
                )

        return RewriteResult(
            source=patched,
            plans=plans,
            edits=edits,
            failures=failures,
            dry_run=dry_run,
        )

    def _overloaded_names(self, descriptors: Sequence[FunctionDescriptor]) -> dict[str, int]:
        """Return names matched more than once, when overloads are rejected."""
        if not self.config.reject_overloads:
            return {}
        counts = Counter(descriptor.name for descriptor in descriptors)
        return {name: count for name, count in counts.items() if count > 1}

    def _record_failure(self, function_name: str, error: RewriteError) -> RewriteFailure:
        self.logger.warning(f"Skipping {function_name}: {error}")
        return RewriteFailure(function_name=function_name, error_kind=error.kind, message=str(error))
