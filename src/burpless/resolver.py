"""Resolve the typed parameters a step pattern hands to its function.

Step patterns come in two dialects. Cucumber Expressions name their
parameters inline (``I have {int} cukes``), so resolution is a scan of the
pattern text. Regular expressions only have anonymous capture groups, so
each group's source is matched against the registry's known regexps,
falling back to plain text.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from behave.model import Table
from cucumber_expressions.expression import CucumberExpression
from cucumber_expressions.regular_expression import RegularExpression

from burpless.errors import UnresolvedParameterTypeError
from burpless.introspection import CaptureGroupIntrospector
from burpless.registry import TypeRegistry

PLACEHOLDER = re.compile(r"(?<!\\)\{(.*?)\}")


class Dialect(Enum):
    """Pattern dialects a step can be written in."""

    CUCUMBER_EXPRESSION = "cucumber_expression"
    REGULAR_EXPRESSION = "regular_expression"


class ArgumentSource(Enum):
    """Where the value for a parameter comes from at match time."""

    PATTERN = "pattern"
    TABLE = "table"
    DOC_STRING = "doc_string"


@dataclass(frozen=True)
class ParameterDescriptor:
    """Type information for one argument passed to a step function."""

    target_type: Any
    transposed: bool = False
    source: ArgumentSource = ArgumentSource.PATTERN

    def convert(self, raw: Any) -> Any:
        """Turn a raw value extracted by the host into the typed argument.

        Pattern arguments are matched ``cucumber_expressions`` arguments,
        converted by their parameter type's transform. Tables and doc
        strings are already in their final form.
        """
        if self.source is ArgumentSource.PATTERN:
            return raw.value
        return raw


@dataclass(frozen=True)
class CompiledPattern:
    """A step pattern compiled in its dialect."""

    dialect: Dialect
    text: str
    regexp: str
    expression: CucumberExpression | RegularExpression

    def match(self, text: str) -> list[Any] | None:
        """Arguments extracted from ``text``, or ``None`` if it does not match."""
        result: list[Any] | None = self.expression.match(text)
        return result


def select_dialect(pattern: str | re.Pattern[str]) -> tuple[Dialect, str]:
    """Pick the dialect of ``pattern`` from its own syntax.

    Compiled regexes, text anchored with ``^`` or ``$``, and text wrapped in
    ``/.../`` are regular expressions; anything else is a Cucumber
    Expression.

    Returns:
        The dialect and the source to compile in it
    """
    if isinstance(pattern, re.Pattern):
        return Dialect.REGULAR_EXPRESSION, pattern.pattern
    if pattern.startswith("^") or pattern.endswith("$"):
        return Dialect.REGULAR_EXPRESSION, pattern
    if len(pattern) >= 2 and pattern.startswith("/") and pattern.endswith("/"):
        return Dialect.REGULAR_EXPRESSION, pattern[1:-1]
    return Dialect.CUCUMBER_EXPRESSION, pattern


def compile_pattern(
    pattern: str | re.Pattern[str], registry: TypeRegistry
) -> CompiledPattern:
    """Compile ``pattern`` against ``registry``.

    Raises:
        cucumber_expressions.errors.UndefinedParameterTypeError: If a
            Cucumber Expression names an unknown parameter type
        re.error: If a regular expression does not compile
    """
    text = pattern.pattern if isinstance(pattern, re.Pattern) else pattern
    dialect, source = select_dialect(pattern)
    expression: CucumberExpression | RegularExpression
    if dialect is Dialect.REGULAR_EXPRESSION:
        expression = RegularExpression(
            pattern if isinstance(pattern, re.Pattern) else source,
            registry.parameter_type_registry,
        )
    else:
        expression = CucumberExpression(source, registry.parameter_type_registry)
    return CompiledPattern(
        dialect=dialect, text=text, regexp=source, expression=expression
    )


def _resolve_cucumber_expression(
    compiled: CompiledPattern,
    registry: TypeRegistry,
    introspector: CaptureGroupIntrospector,
) -> list[ParameterDescriptor]:
    descriptors = []
    for name in PLACEHOLDER.findall(compiled.regexp):
        parameter_type = registry.lookup_by_type_name(name)
        if parameter_type is None:
            raise UnresolvedParameterTypeError(name, compiled.text)
        descriptors.append(ParameterDescriptor(target_type=parameter_type.type))
    return descriptors


def _resolve_regular_expression(
    compiled: CompiledPattern,
    registry: TypeRegistry,
    introspector: CaptureGroupIntrospector,
) -> list[ParameterDescriptor]:
    descriptors = []
    for source in introspector.capture_group_sources(compiled.expression):
        parameter_type = registry.lookup_by_regexp(source, compiled.regexp, "")
        target_type = parameter_type.type if parameter_type is not None else str
        descriptors.append(ParameterDescriptor(target_type=target_type))
    return descriptors


_STRATEGIES: dict[
    Dialect,
    Callable[
        [CompiledPattern, TypeRegistry, CaptureGroupIntrospector],
        list[ParameterDescriptor],
    ],
] = {
    Dialect.CUCUMBER_EXPRESSION: _resolve_cucumber_expression,
    Dialect.REGULAR_EXPRESSION: _resolve_regular_expression,
}


def resolve_parameters(
    compiled: CompiledPattern,
    registry: TypeRegistry,
    introspector: CaptureGroupIntrospector,
    *,
    consumes_table: bool = False,
    consumes_docstring: bool = False,
) -> tuple[ParameterDescriptor, ...]:
    """Ordered descriptors for every argument the step function receives.

    Pattern parameters come first, in order of appearance, followed by the
    data table and then the doc string when the function consumes them.

    Raises:
        UnresolvedParameterTypeError: If a placeholder names no known type
        IntrospectionError: If a regular expression's groups cannot be read
    """
    descriptors = _STRATEGIES[compiled.dialect](compiled, registry, introspector)
    if consumes_table:
        descriptors.append(
            ParameterDescriptor(target_type=Table, source=ArgumentSource.TABLE)
        )
    if consumes_docstring:
        descriptors.append(
            ParameterDescriptor(target_type=str, source=ArgumentSource.DOC_STRING)
        )
    return tuple(descriptors)
