"""Executable units built from glue definitions.

These are what the host engine calls into: step definitions it matches
against step text, hooks it runs around scenarios and steps, and the
parameter types it uses to extract arguments. Every unit receives the
run's :class:`~burpless.world.World` explicitly on ``execute``.
"""

import re
from collections.abc import Sequence
from typing import Any, Protocol

from cucumber_expressions.parameter_type import ParameterType

from burpless.errors import GlueDefinitionError, StepArityError
from burpless.glue import HookGlue, Keyword, ParameterTypeGlue, SourceLocation, StepGlue
from burpless.introspection import CaptureGroupIntrospector
from burpless.registry import TypeRegistry
from burpless.resolver import (
    CompiledPattern,
    ParameterDescriptor,
    compile_pattern,
    resolve_parameters,
)
from burpless.world import World

KEYWORD_REGEXP = r":(\S+)"


class Frame(Protocol):
    """A stack frame as reported by :mod:`traceback`."""

    filename: str
    lineno: int | None


class LocatedDefinition:
    """Maps runtime frames back to the glue a unit was built from."""

    def __init__(self, source_location: SourceLocation) -> None:
        self._source_location = source_location

    @property
    def source_location(self) -> SourceLocation:
        return self._source_location

    @property
    def location(self) -> str:
        """``file:line`` of the originating glue."""
        return str(self._source_location)

    def is_defined_at(self, frame: Frame) -> bool:
        """True when ``frame`` points at exactly this glue's file and line."""
        return (
            frame.lineno == self._source_location.line
            and frame.filename == self._source_location.file
        )


class StepDefinition(LocatedDefinition):
    """A compiled step pattern bound to its glue function."""

    def __init__(
        self,
        glue: StepGlue,
        compiled: CompiledPattern,
        parameter_infos: Sequence[ParameterDescriptor],
    ) -> None:
        super().__init__(glue.location)
        self._glue = glue
        self._compiled = compiled
        self._parameter_infos = tuple(parameter_infos)

    @property
    def keyword(self) -> str:
        return self._glue.keyword

    @property
    def pattern(self) -> str:
        """The pattern exactly as written in the glue."""
        return self._compiled.text

    @property
    def compiled(self) -> CompiledPattern:
        return self._compiled

    def parameter_infos(self) -> tuple[ParameterDescriptor, ...]:
        """Descriptors for every argument, fixed at compile time."""
        return self._parameter_infos

    def match(self, text: str) -> list[Any] | None:
        """Arguments extracted from step ``text``, or ``None``."""
        return self._compiled.match(text)

    def execute(self, world: World, args: Sequence[Any]) -> None:
        """Convert ``args`` and apply the glue function to the world.

        Args:
            world: The run's world, replaced by the function's result
            args: One raw value per parameter descriptor

        Raises:
            StepArityError: If ``args`` does not line up with the descriptors
        """
        if len(args) != len(self._parameter_infos):
            raise StepArityError(self.pattern, len(self._parameter_infos), len(args))
        typed_args = [
            descriptor.convert(arg)
            for descriptor, arg in zip(self._parameter_infos, args, strict=True)
        ]
        world.apply(self._glue.function, *typed_args)

    def __repr__(self) -> str:
        return f"StepDefinition({self.pattern!r} at {self.location})"


def to_step_definition(
    registry: TypeRegistry, glue: StepGlue, introspector: CaptureGroupIntrospector
) -> StepDefinition:
    """Compile ``glue``'s pattern and resolve its parameters."""
    compiled = compile_pattern(glue.pattern, registry)
    parameter_infos = resolve_parameters(
        compiled,
        registry,
        introspector,
        consumes_table=glue.consumes_table,
        consumes_docstring=glue.consumes_docstring,
    )
    return StepDefinition(glue, compiled, parameter_infos)


class StaticHookDefinition(LocatedDefinition):
    """A ``before_all``/``after_all`` hook; its function takes the world only."""

    def __init__(self, glue: HookGlue) -> None:
        super().__init__(glue.location)
        self._glue = glue

    @property
    def phase(self) -> str:
        return self._glue.phase

    @property
    def order(self) -> int:
        return self._glue.order

    def execute(self, world: World) -> None:
        world.apply(self._glue.function)


class HookDefinition(StaticHookDefinition):
    """A scenario- or step-scoped hook, called with the current scenario."""

    @property
    def tag_expression(self) -> str:
        """Tag filter for this hook; empty, so it runs for every scenario."""
        # TODO: accept a tag expression on hook() and filter scenarios by it
        return ""

    def execute(self, world: World, scenario: Any = None) -> None:  # type: ignore[override]
        world.apply(self._glue.function, scenario)


def to_hook_definition(glue: HookGlue) -> StaticHookDefinition:
    """Build the hook unit matching ``glue``'s phase."""
    if glue.is_static:
        return StaticHookDefinition(glue)
    return HookDefinition(glue)


class ParameterTypeDefinition:
    """A parameter type as handed to both the registry and the host."""

    def __init__(self, parameter_type: ParameterType) -> None:
        self._parameter_type = parameter_type

    @property
    def parameter_type(self) -> ParameterType:
        return self._parameter_type

    @property
    def name(self) -> str:
        return str(self._parameter_type.name)

    @classmethod
    def from_glue(cls, glue: ParameterTypeGlue) -> "ParameterTypeDefinition":
        """Wrap ``glue``'s single-argument transform as a cucumber transformer.

        The transform receives one value, so the regexps may hold at most
        one capture group between them. ``strong_type_hint`` has no
        counterpart in cucumber-expressions for Python and is kept on the
        glue only.

        Raises:
            GlueDefinitionError: If a regexp is invalid or the regexps
                capture more than one group
        """
        groups = 0
        for regexp in glue.regexps:
            try:
                groups += re.compile(regexp).groups
            except re.error as e:
                raise GlueDefinitionError(
                    f"Parameter type {{{glue.name}}} has an invalid regexp "
                    f"{regexp!r}: {e}"
                ) from e
        if groups > 1:
            raise GlueDefinitionError(
                f"Parameter type {{{glue.name}}} captures {groups} groups; "
                "its transform takes one value"
            )
        transform = glue.transform

        def transformer(*group_values: str | None) -> Any:
            return transform(group_values[0] if group_values else None)  # type: ignore[arg-type]

        return cls(
            ParameterType(
                glue.name,
                list(glue.regexps),
                glue.to_type,
                transformer,
                glue.use_for_snippets,
                glue.prefer_for_regexp,
            )
        )


def keyword_parameter_type() -> ParameterTypeDefinition:
    """The built-in ``{keyword}`` type: ``:admin`` becomes ``Keyword("admin")``."""
    return ParameterTypeDefinition(
        ParameterType(
            "keyword",
            [KEYWORD_REGEXP],
            Keyword,
            lambda value=None: Keyword(value) if value is not None else None,
            True,
            True,
        )
    )
