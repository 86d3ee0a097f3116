"""Rewrite planning for a single matched function.

The planner ties the leaf components together:

    FunctionDescriptor -> {PrototypeBuilder, IdentifierRenamer}
                       -> WrapperSynthesizer -> EditSequencer -> RewritePlan

Planning is pure and deterministic: the same descriptor and buffer always
yield an identical plan.
"""

import logging
from collections.abc import Collection

from memoize_rewriter.core.buffer import SourceBuffer
from memoize_rewriter.core.models import FunctionDescriptor, RewritePlan
from memoize_rewriter.core.sequencer import EditSequencer
from memoize_rewriter.rewrite.extraction import SpanExtractor
from memoize_rewriter.rewrite.prototype import PrototypeBuilder
from memoize_rewriter.rewrite.renamer import IdentifierRenamer
from memoize_rewriter.rewrite.wrapper import DEFAULT_ADAPTER_NAME, WrapperSynthesizer

logger = logging.getLogger(__name__)


class RewritePlanner:
    """Computes the rewrite plan for one function descriptor."""

    def __init__(
        self,
        adapter_name: str = DEFAULT_ADAPTER_NAME,
        check_name_collisions: bool = True,
        known_symbols: Collection[str] = (),
    ) -> None:
        """Create a planner.

        Args:
            adapter_name: Name of the memoize adapter called by the wrapper.
            check_name_collisions: Verify that the mangled name is unused
                before committing to the rename.
            known_symbols: Additional symbol names visible to the unit.
        """
        self.check_name_collisions = check_name_collisions
        self.known_symbols = frozenset(known_symbols)
        self.extractor = SpanExtractor()
        self.prototypes = PrototypeBuilder()
        self.renamer = IdentifierRenamer()
        self.synthesizer = WrapperSynthesizer(adapter_name)
        self.sequencer = EditSequencer()

    def plan(self, buffer: SourceBuffer, descriptor: FunctionDescriptor) -> RewritePlan:
        """Plan the rewrite of ``descriptor`` against ``buffer``.

        Raises:
            MissingBodyError: If the function has no body.
            UnresolvableSpanError: If its spans do not line up with the buffer, or
                its return type does not match the declaration text.
            NameCollisionError: If the mangled name is already in use.
        """
        self.extractor.validate(buffer, descriptor)
        parameter_list = self.extractor.parameter_list_text(buffer, descriptor)
        leading = self.extractor.leading_specifiers(buffer, descriptor)

        mangled_name = self.renamer.mangle(descriptor.name)
        if self.check_name_collisions:
            self.renamer.verify_unique(
                buffer, mangled_name, self.known_symbols, function_name=descriptor.name
            )

        prototype = self.prototypes.build_for(descriptor, parameter_list, leading)
        wrapper = self.synthesizer.synthesize(descriptor, prototype, mangled_name)
        definition_span = descriptor.definition_span
        edits = self.sequencer.assemble(
            self.renamer.plan_rename(descriptor, leading), definition_span, wrapper, prototype
        )

        plan = RewritePlan(
            function_name=descriptor.name,
            mangled_name=mangled_name,
            prototype_text=prototype,
            wrapper_text=wrapper,
            edits=edits,
            definition_span=definition_span,
        )
        logger.debug("Planned rewrite of %s (%s)", descriptor.name, plan.fingerprint)
        return plan
