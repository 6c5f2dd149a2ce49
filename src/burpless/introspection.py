"""Capture-group introspection for compiled regular expressions.

``cucumber_expressions`` has no public query that maps the capture groups
of a :class:`~cucumber_expressions.regular_expression.RegularExpression` to
their source text. We read it from the expression's private group tree
(``tree_regexp.group_builder``). All such access lives behind
:class:`CaptureGroupIntrospector` so a library upgrade breaks exactly one
class, and breaks it loudly.
"""

from typing import Any, Protocol

from burpless.errors import IntrospectionError

_MISSING = object()


class CaptureGroupIntrospector(Protocol):
    """Lists the source of each top-level capture group, in order."""

    def capture_group_sources(self, expression: Any) -> list[str]:
        """Return one regexp source string per capture group."""
        ...


def _require(owner: Any, attribute: str) -> Any:
    value = getattr(owner, attribute, _MISSING)
    if value is _MISSING:
        raise IntrospectionError(
            f"{type(owner).__name__} has no attribute {attribute!r}; "
            "this cucumber-expressions version is not supported"
        )
    return value


class TreeRegexpIntrospector:
    """Reads ``expression.tree_regexp.group_builder`` and its children.

    Older releases expose the child builders as ``group_builders``; newer
    ones behind a ``children`` property. Anything else is an error.
    """

    children_attributes: tuple[str, ...] = ("children", "group_builders")

    def capture_group_sources(self, expression: Any) -> list[str]:
        """Return the source of each capture group of ``expression``.

        Raises:
            IntrospectionError: If the group tree is not shaped as expected
        """
        tree_regexp = _require(expression, "tree_regexp")
        root = _require(tree_regexp, "group_builder")
        return [self._source_of(child) for child in self._children_of(root)]

    def _children_of(self, group_builder: Any) -> list[Any]:
        for attribute in self.children_attributes:
            children = getattr(group_builder, attribute, _MISSING)
            if children is not _MISSING:
                return list(children)
        raise IntrospectionError(
            f"{type(group_builder).__name__} exposes none of "
            f"{', '.join(self.children_attributes)}; "
            "this cucumber-expressions version is not supported"
        )

    @staticmethod
    def _source_of(group_builder: Any) -> str:
        source = _require(group_builder, "source")
        if not isinstance(source, str):
            raise IntrospectionError(
                f"Capture group source is {type(source).__name__}, expected str"
            )
        return source


def default_introspector() -> CaptureGroupIntrospector:
    """The introspector matching the installed cucumber-expressions."""
    return TreeRegexpIntrospector()
