"""Function prototype rendering."""

from memoize_rewriter.core.models import FunctionDescriptor


class PrototypeBuilder:
    """Renders a function signature as ``<return type> <name><parameter list>``.

    Given a function like

        static int f(int x, float y, char z) { ... }

    the prototype is ``static int f(int x, float y, char z)``. Specifiers ahead
    of the return type are passed in verbatim as ``leading``. No terminator is
    appended; callers add ``;`` or a body as needed.
    """

    @staticmethod
    def build(return_type: str, name: str, parameter_list_text: str, leading: str = "") -> str:
        return f"{leading}{return_type} {name}{parameter_list_text}"

    def build_for(
        self, descriptor: FunctionDescriptor, parameter_list_text: str, leading: str = ""
    ) -> str:
        """Render the prototype of ``descriptor`` under its original name."""
        return self.build(descriptor.return_type, descriptor.name, parameter_list_text, leading)
