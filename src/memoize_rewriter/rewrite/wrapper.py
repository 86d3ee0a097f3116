"""Synthesis of the cache-backed wrapper definition.

Given a function *definition* like

    int f(int x, float y, char z) { return x + y + z; }

the wrapper appended after the renamed original reads

    int f(int x, float y, char z) {
    static const auto proxy = memoize(f__original__);
    return proxy(x, y, z);
    }

The proxy lives in a function-local static: it is built lazily on the first
call, exactly once even when several threads make that first call together,
and lives for the rest of the program. ``memoize`` is supplied by the program
being rewritten; only its name is known here.
"""

from memoize_rewriter.core.exceptions import UnresolvableSpanError
from memoize_rewriter.core.models import FunctionDescriptor

DEFAULT_ADAPTER_NAME = "memoize"


class WrapperSynthesizer:
    """Builds the replacement definition under the function's original name."""

    def __init__(self, adapter_name: str = DEFAULT_ADAPTER_NAME) -> None:
        """Initialize the synthesizer.

        Args:
            adapter_name: Name of the callable that turns the renamed original
                into a cache-backed proxy.
        """
        self.adapter_name = adapter_name

    def argument_list(self, descriptor: FunctionDescriptor) -> str:
        """Return the parameter names of ``descriptor`` joined for a call.

        For ``int f(int x, float y, char z)`` this is ``"x, y, z"``; a function
        without parameters yields an empty string.

        Raises:
            UnresolvableSpanError: If a parameter is unnamed and so cannot be
                forwarded to the proxy.
        """
        names = descriptor.parameter_names
        for index, name in enumerate(names):
            if not name:
                raise UnresolvableSpanError(
                    f"Parameter {index} of '{descriptor.name}' is unnamed and cannot be forwarded",
                    function_name=descriptor.name,
                )
        return ", ".join(names)

    def synthesize(self, descriptor: FunctionDescriptor, prototype: str, mangled_name: str) -> str:
        """Render the wrapper definition, preceded by a blank-line separator."""
        arguments = self.argument_list(descriptor)
        return (
            f"\n\n{prototype} {{\n"
            f"static const auto proxy = {self.adapter_name}({mangled_name});\n"
            f"return proxy({arguments});\n"
            "}"
        )
