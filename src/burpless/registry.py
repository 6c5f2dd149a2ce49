"""Run-scoped parameter type registry.

Wraps :class:`cucumber_expressions.parameter_type_registry.ParameterTypeRegistry`
so the rest of the package talks to one small surface: register a type,
look one up by its ``{name}`` token or by a raw regexp source, and list
everything known.
"""

import logging

from cucumber_expressions.parameter_type import ParameterType
from cucumber_expressions.parameter_type_registry import ParameterTypeRegistry

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Built-in plus this run's custom parameter types."""

    def __init__(self) -> None:
        """Create a registry holding only the built-in types."""
        self._registry = ParameterTypeRegistry()

    @property
    def parameter_type_registry(self) -> ParameterTypeRegistry:
        """The wrapped registry, as handed to expression compilers."""
        return self._registry

    def register(self, parameter_type: ParameterType) -> None:
        """Define a new parameter type.

        Raises:
            cucumber_expressions.errors.CucumberExpressionError: If the name
                is already taken or is not a legal type name
        """
        self._registry.define_parameter_type(parameter_type)
        logger.debug("Registered parameter type {%s}", parameter_type.name)

    def lookup_by_type_name(self, name: str) -> ParameterType | None:
        """Find the type referenced by a ``{name}`` placeholder."""
        return self._registry.lookup_by_type_name(name)

    def lookup_by_regexp(
        self, source: str, expression_regexp: str, text: str = ""
    ) -> ParameterType | None:
        """Find the type whose regexp is exactly ``source``.

        Args:
            source: Source text of one capture group
            expression_regexp: The whole regular expression the group sits in
            text: Step text, used only to explain ambiguity errors
        """
        return self._registry.lookup_by_regexp(source, expression_regexp, text)

    @property
    def parameter_types(self) -> list[ParameterType]:
        """Every type known to this registry, built-ins included."""
        return list(self._registry.parameter_types)
