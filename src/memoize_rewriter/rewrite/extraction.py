"""Descriptor-facing span extraction.

The parameter list is taken as the verbatim characters between the end of the
function name and the start of its body, not rebuilt from the structured
parameter data. Default arguments, attributes and inline comments therefore
survive byte-for-byte. Anything that displaces those token boundaries (macro
expansion, for instance) is reported as an ``UnresolvableSpanError`` instead of
being silently miscompiled.
"""

import logging
import re

from memoize_rewriter.core.buffer import SourceBuffer
from memoize_rewriter.core.exceptions import MissingBodyError, UnresolvableSpanError
from memoize_rewriter.core.models import FunctionDescriptor

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_IDENTIFIER_CHAR = re.compile(r"[A-Za-z0-9_]")


def _skip_literal(text: str, i: int, quote: str) -> int:
    """Return the index just past the string or char literal opening at ``i``."""
    j = i + 1
    n = len(text)
    while j < n:
        if text[j] == "\\":
            j += 2
            continue
        if text[j] == quote:
            return j + 1
        j += 1
    return n


def _is_digit_separator(text: str, i: int) -> bool:
    """Return True if the quote at ``i`` separates digits, as in ``1'000``.

    The token ending at ``i`` must be a numeric literal; prefixed character
    literals such as ``u8'a'`` start with a letter and do not qualify.
    """
    j = i
    while j > 0 and (text[j - 1].isalnum() or text[j - 1] in "_'."):
        j -= 1
    return j < i and text[j].isdigit()


def _squeeze(text: str) -> str:
    return _WHITESPACE.sub("", text)


def _closing_paren(text: str) -> int:
    """Find the parenthesis closing the first ``(`` in ``text``.

    Comments and string/char literals are skipped so that default arguments
    such as ``char c = ')'`` do not end the list early.

    Returns:
        int: Index of the closing parenthesis, or -1 if it is never closed.
    """
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        c = text[i]

        # line comment
        if text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end + 1
            continue

        # block comment
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue

        if c == '"' or (c == "'" and not _is_digit_separator(text, i)):
            i = _skip_literal(text, i, c)
            continue

        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                return i
            if depth < 0:
                return -1
        i += 1
    return -1


class SpanExtractor:
    """Validates descriptor spans against the buffer and slices them to text."""

    def require_body(self, descriptor: FunctionDescriptor) -> tuple[int, int]:
        """Reject declarations without a definition.

        Returns:
            Tuple of (body start, body end) offsets.

        Raises:
            MissingBodyError: If the descriptor has no body span.
        """
        if descriptor.body_start is None or descriptor.body_end is None:
            raise MissingBodyError(
                f"Function '{descriptor.name}' has no body and cannot be memoized",
                function_name=descriptor.name,
            )
        return descriptor.body_start, descriptor.body_end

    def validate(self, buffer: SourceBuffer, descriptor: FunctionDescriptor) -> None:
        """Check that the descriptor's token boundaries line up with the buffer.

        Raises:
            MissingBodyError: If the descriptor has no body span.
            UnresolvableSpanError: If any boundary is out of range, out of order,
                or does not sit on the expected token.
        """
        body_start, body_end = self.require_body(descriptor)
        name = descriptor.name

        if not name or not (name[0].isalpha() or name[0] == "_"):
            raise UnresolvableSpanError(f"Invalid function name {name!r}", function_name=name)

        offsets = (descriptor.declaration_start, descriptor.name_end, body_start, body_end)
        if not all(buffer.in_bounds(offset) for offset in offsets):
            raise UnresolvableSpanError(
                f"Span offsets {offsets} of '{name}' fall outside the source "
                f"(length {len(buffer)})",
                function_name=name,
            )

        if not (descriptor.declaration_start < descriptor.name_end <= body_start < body_end):
            raise UnresolvableSpanError(
                f"Span offsets {offsets} of '{name}' are not in declaration order",
                function_name=name,
            )

        name_start = descriptor.name_end - len(name)
        if name_start < descriptor.declaration_start or (
            buffer.text[name_start : descriptor.name_end] != name
        ):
            raise UnresolvableSpanError(
                f"Name '{name}' not found at offset {name_start}; "
                "the declaration may come from a macro expansion",
                function_name=name,
            )

        if buffer.char_at(body_start) != "{" or buffer.char_at(body_end - 1) != "}":
            raise UnresolvableSpanError(
                f"Body of '{name}' does not span a brace-enclosed block "
                f"({body_start}..{body_end})",
                function_name=name,
            )

    def parameter_list_text(self, buffer: SourceBuffer, descriptor: FunctionDescriptor) -> str:
        """Return the verbatim parameter list, including parentheses and qualifiers.

        Whitespace between the parameter list and the opening brace is dropped;
        everything else, including whitespace inside the list, is kept as is.

        Raises:
            MissingBodyError: If the descriptor has no body span.
            UnresolvableSpanError: If the text does not start with a balanced
                parenthesized list.
        """
        self.require_body(descriptor)
        text = buffer.slice(descriptor.parameter_list_span).rstrip()

        if not text.lstrip().startswith("("):
            raise UnresolvableSpanError(
                f"Parameter list of '{descriptor.name}' does not start with '(': {text!r}",
                function_name=descriptor.name,
            )
        if _closing_paren(text) == -1:
            raise UnresolvableSpanError(
                f"Parameter list of '{descriptor.name}' has unbalanced parentheses: {text!r}",
                function_name=descriptor.name,
            )

        logger.debug("Extracted parameter list of %s: %r", descriptor.name, text)
        return text

    def leading_specifiers(self, buffer: SourceBuffer, descriptor: FunctionDescriptor) -> str:
        """Return the declaration text written ahead of the return type.

        For ``static inline int f(int x)`` with return type ``int`` this is
        ``"static inline "``. The text is kept verbatim so the renamed original,
        the forward declaration and the wrapper keep their linkage and
        attributes. Whitespace differences between the rendered return type
        and the source are ignored.

        Returns:
            str: Leading text, or an empty string when the declaration starts
                with the return type.

        Raises:
            UnresolvableSpanError: If the return type is not the last thing
                before the name, or the function is a template.
        """
        name = descriptor.name
        name_start = descriptor.name_end - len(name)
        prefix = buffer.text[descriptor.declaration_start : name_start]
        return_type = _squeeze(descriptor.return_type)

        # the last split leaves any whitespace on the leading side
        for split in range(len(prefix), -1, -1):
            if _squeeze(prefix[split:]) == return_type:
                break
        else:
            raise UnresolvableSpanError(
                f"Return type {descriptor.return_type!r} of '{name}' does not match "
                f"the declaration text {prefix!r}",
                function_name=name,
            )

        leading = prefix[:split]
        if (
            leading
            and split < len(prefix)
            and _IDENTIFIER_CHAR.match(leading[-1])
            and _IDENTIFIER_CHAR.match(prefix[split])
        ):
            raise UnresolvableSpanError(
                f"Return type {descriptor.return_type!r} of '{name}' splits a token "
                f"of the declaration text {prefix!r}",
                function_name=name,
            )
        if re.match(r"\s*template\b", leading):
            raise UnresolvableSpanError(
                f"'{name}' is a function template; the proxy cannot name its "
                "renamed original",
                function_name=name,
            )

        if leading:
            logger.debug("Keeping leading specifiers of %s: %r", name, leading)
        return leading
