"""Suggestion text for steps that no glue matches."""

from collections.abc import Mapping
from typing import Any

from behave.model import Table

DEFAULT_HINT = "Write code here that turns the phrase above into concrete actions"


def type_name(arg_type: Any) -> str:
    """Readable name of an argument type; tables keep their full name."""
    if isinstance(arg_type, type):
        if arg_type is Table:
            return f"{arg_type.__module__}.{arg_type.__qualname__}"
        return arg_type.__name__
    return str(arg_type)


class Snippet:
    """Python glue suggested for an undefined step."""

    def template(self) -> str:
        """Six positional slots for :meth:`str.format`.

        0. step keyword
        1. pattern, as returned by :meth:`escape_pattern`
        2. function name
        3. parameters, as returned by :meth:`arguments`
        4. hint comment
        5. :meth:`table_hint` and :meth:`docstring_hint` for the step's
           table and doc string, each empty when the step has none
        """
        return (
            "def {2}(world{3}):\n"
            "    # {4}\n"
            "{5}"
            "    raise NotImplementedError\n"
            "\n"
            '\nGLUE.append(step("{0}", "{1}", {2}))\n'
        )

    def table_hint(self) -> str:
        return (
            "    # Decorate the function with @datatable so the runtime\n"
            "    # passes the step's table as its last argument\n"
        )

    def docstring_hint(self) -> str:
        return (
            "    # Decorate the function with @docstring so the runtime\n"
            "    # passes the step's doc string as its last argument\n"
        )

    def arguments(self, arguments: Mapping[str, Any]) -> str:
        """Render ``name -> type`` as annotated parameters after ``world``."""
        return "".join(
            f", {name}: {type_name(arg_type)}" for name, arg_type in arguments.items()
        )

    def escape_pattern(self, pattern: str) -> str:
        """Escape ``pattern`` for use inside a double-quoted Python string."""
        return pattern.replace("\\", "\\\\").replace('"', '\\"')

    def render(
        self,
        keyword: str,
        pattern: str,
        function_name: str,
        arguments: Mapping[str, Any],
        *,
        hint: str = DEFAULT_HINT,
        has_table: bool = False,
        has_doc_string: bool = False,
    ) -> str:
        """Fill in :meth:`template`."""
        return self.template().format(
            keyword,
            self.escape_pattern(pattern),
            function_name,
            self.arguments(arguments),
            hint,
            (self.table_hint() if has_table else "")
            + (self.docstring_hint() if has_doc_string else ""),
        )
