"""Tests for the run-scoped parameter type registry."""

import pytest
from cucumber_expressions.errors import CucumberExpressionError
from cucumber_expressions.parameter_type import ParameterType

from burpless.registry import TypeRegistry


def _colour() -> ParameterType:
    return ParameterType("colour", ["red|blue"], str, lambda s=None: s, True, True)


class TestTypeRegistry:
    def test_built_in_types_are_known(self, registry: TypeRegistry) -> None:
        int_type = registry.lookup_by_type_name("int")
        assert int_type is not None
        assert int_type.type is int
        assert registry.lookup_by_type_name("colour") is None

    def test_register_custom_type(self, registry: TypeRegistry) -> None:
        registry.register(_colour())
        colour = registry.lookup_by_type_name("colour")
        assert colour is not None
        assert colour.name == "colour"
        assert "colour" in {t.name for t in registry.parameter_types}

    def test_registries_are_independent(self) -> None:
        first = TypeRegistry()
        first.register(_colour())
        assert TypeRegistry().lookup_by_type_name("colour") is None

    def test_duplicate_name_is_rejected(self, registry: TypeRegistry) -> None:
        registry.register(_colour())
        with pytest.raises(CucumberExpressionError):
            registry.register(_colour())

    def test_lookup_by_raw_regexp_source(self, registry: TypeRegistry) -> None:
        registry.register(_colour())
        found = registry.lookup_by_regexp("red|blue", "^I like (red|blue)$")
        assert found is not None
        assert found.name == "colour"

    def test_lookup_by_unknown_regexp(self, registry: TypeRegistry) -> None:
        assert registry.lookup_by_regexp("[a-z]+", "^([a-z]+)$") is None
