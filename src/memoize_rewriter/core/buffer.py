"""Immutable view of an original source unit.

Spans are stored as offsets and only materialized to text on demand, so all
planning logic can be exercised without a parser.
"""

import re

from memoize_rewriter.core.models import Span


class SourceBuffer:
    """Read-only source text addressed by character offsets."""

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        self._text = text

    def __len__(self) -> int:
        return len(self._text)

    def __repr__(self) -> str:
        return f"SourceBuffer(len={len(self._text)})"

    @property
    def text(self) -> str:
        return self._text

    def in_bounds(self, offset: int) -> bool:
        """Return True if ``offset`` is a valid position (end of buffer included)."""
        return 0 <= offset <= len(self._text)

    def slice(self, span: Span) -> str:
        """Return the verbatim text covered by ``span``.

        Raises:
            IndexError: If the span reaches past the end of the buffer.
        """
        if span.end > len(self._text):
            raise IndexError(f"Span {span.start}..{span.end} exceeds buffer length {len(self._text)}")
        return self._text[span.start : span.end]

    def char_at(self, offset: int) -> str:
        """Return the character at ``offset``, or an empty string past the end."""
        if 0 <= offset < len(self._text):
            return self._text[offset]
        return ""

    def contains_identifier(self, name: str) -> bool:
        """Return True if ``name`` occurs as a whole identifier anywhere in the buffer."""
        pattern = rf"(?<![A-Za-z0-9_]){re.escape(name)}(?![A-Za-z0-9_])"
        return re.search(pattern, self._text) is not None
