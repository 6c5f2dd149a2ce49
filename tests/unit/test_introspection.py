"""Tests for reading capture groups out of compiled regular expressions."""

from types import SimpleNamespace

import pytest
from cucumber_expressions.regular_expression import RegularExpression

from burpless.errors import IntrospectionError
from burpless.introspection import TreeRegexpIntrospector, default_introspector
from burpless.registry import TypeRegistry


def _sources(regexp: str, registry: TypeRegistry) -> list[str]:
    expression = RegularExpression(regexp, registry.parameter_type_registry)
    return default_introspector().capture_group_sources(expression)


class TestTreeRegexpIntrospector:
    """Scenario: capture groups are listed in declaration order."""

    def test_lists_group_sources_in_order(self, registry: TypeRegistry) -> None:
        assert _sources(r"^I have (\d+) cukes in my ([a-z]+)$", registry) == [
            r"\d+",
            "[a-z]+",
        ]

    def test_no_groups(self, registry: TypeRegistry) -> None:
        assert _sources("^nothing to capture$", registry) == []

    def test_skips_non_capturing_groups(self, registry: TypeRegistry) -> None:
        assert _sources(r"^(?:a|an) (\d+)$", registry) == [r"\d+"]

    def test_only_top_level_groups(self, registry: TypeRegistry) -> None:
        assert _sources(r"^((\d+) items)$", registry) == [r"(\d+) items"]

    def test_older_group_builders_attribute(self) -> None:
        child = SimpleNamespace(source="x+")
        expression = SimpleNamespace(
            tree_regexp=SimpleNamespace(
                group_builder=SimpleNamespace(group_builders=[child])
            )
        )
        assert TreeRegexpIntrospector().capture_group_sources(expression) == ["x+"]


class TestIntrospectionFailures:
    """Scenario: an unexpected internal shape fails loudly."""

    def test_missing_tree_regexp(self) -> None:
        with pytest.raises(IntrospectionError, match="tree_regexp"):
            TreeRegexpIntrospector().capture_group_sources(SimpleNamespace())

    def test_missing_group_builder(self) -> None:
        expression = SimpleNamespace(tree_regexp=SimpleNamespace())
        with pytest.raises(IntrospectionError, match="group_builder"):
            TreeRegexpIntrospector().capture_group_sources(expression)

    def test_missing_children(self) -> None:
        expression = SimpleNamespace(
            tree_regexp=SimpleNamespace(group_builder=SimpleNamespace())
        )
        with pytest.raises(IntrospectionError, match="children"):
            TreeRegexpIntrospector().capture_group_sources(expression)

    def test_source_must_be_text(self) -> None:
        expression = SimpleNamespace(
            tree_regexp=SimpleNamespace(
                group_builder=SimpleNamespace(children=[SimpleNamespace(source=None)])
            )
        )
        with pytest.raises(IntrospectionError, match="source"):
            TreeRegexpIntrospector().capture_group_sources(expression)
