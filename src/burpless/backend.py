"""The glue backend: turns glue definitions into registered executable units."""

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from burpless.definitions import (
    ParameterTypeDefinition,
    StaticHookDefinition,
    StepDefinition,
    keyword_parameter_type,
    to_hook_definition,
    to_step_definition,
)
from burpless.glue import HookGlue, ParameterTypeGlue, StepGlue
from burpless.introspection import CaptureGroupIntrospector, default_introspector
from burpless.registry import TypeRegistry
from burpless.snippet import Snippet

logger = logging.getLogger(__name__)

_HOOK_REGISTRARS = {
    "before_all": "add_before_all_hook",
    "after_all": "add_after_all_hook",
    "before": "add_before_hook",
    "after": "add_after_hook",
    "before_step": "add_before_step_hook",
    "after_step": "add_after_step_hook",
}


class GlueRegistrar(Protocol):
    """What the host engine accepts glue through."""

    def add_parameter_type(self, definition: ParameterTypeDefinition) -> None: ...

    def add_step_definition(self, definition: StepDefinition) -> None: ...

    def add_before_all_hook(self, definition: StaticHookDefinition) -> None: ...

    def add_after_all_hook(self, definition: StaticHookDefinition) -> None: ...

    def add_before_hook(self, definition: StaticHookDefinition) -> None: ...

    def add_after_hook(self, definition: StaticHookDefinition) -> None: ...

    def add_before_step_hook(self, definition: StaticHookDefinition) -> None: ...

    def add_after_step_hook(self, definition: StaticHookDefinition) -> None: ...


class Backend:
    """Loads glue into the host: parameter types, then hooks, then steps."""

    def __init__(
        self,
        glues: Iterable[StepGlue | HookGlue | ParameterTypeGlue],
        introspector: CaptureGroupIntrospector | None = None,
    ) -> None:
        """Group ``glues`` by kind, keeping their order within each kind.

        Args:
            glues: Glue definitions built with the :mod:`burpless.glue` builders
            introspector: Capture-group reader for regular expression steps
        """
        self._steps: list[StepGlue] = []
        self._hooks: list[HookGlue] = []
        self._parameter_types: list[ParameterTypeGlue] = []
        for glue in glues:
            if isinstance(glue, StepGlue):
                self._steps.append(glue)
            elif isinstance(glue, HookGlue):
                self._hooks.append(glue)
            elif isinstance(glue, ParameterTypeGlue):
                self._parameter_types.append(glue)
            else:
                raise TypeError(f"Not a glue definition: {glue!r}")
        self._introspector = introspector or default_introspector()

    def load_glue(self, glue: GlueRegistrar, glue_paths: Sequence[str]) -> None:
        """Register every definition with ``glue``.

        Parameter types must exist before any step referencing them is
        compiled, so the order below matters. ``glue_paths`` is accepted for
        the host's benefit; glue here is data, not modules on a path.

        Raises:
            cucumber_expressions.errors.CucumberExpressionError: If a type
                is redefined or a step names an undefined type
            IntrospectionError: If a regular expression step cannot be read
        """
        registry = TypeRegistry()

        self._register_parameter_type(glue, registry, keyword_parameter_type())
        for parameter_type in self._parameter_types:
            self._register_parameter_type(
                glue, registry, ParameterTypeDefinition.from_glue(parameter_type)
            )

        for hook in self._hooks:
            registrar = getattr(glue, _HOOK_REGISTRARS[hook.phase])
            registrar(to_hook_definition(hook))
            logger.debug("Registered %s hook at %s", hook.phase, hook.location)

        for step in self._steps:
            definition = to_step_definition(registry, step, self._introspector)
            glue.add_step_definition(definition)
            logger.debug(
                "Registered step %r with %d parameter(s) at %s",
                definition.pattern,
                len(definition.parameter_infos()),
                definition.location,
            )

    @staticmethod
    def _register_parameter_type(
        glue: GlueRegistrar,
        registry: TypeRegistry,
        definition: ParameterTypeDefinition,
    ) -> None:
        # steps compile against the registry, the host extracts arguments
        # through the registrar; both need every type
        glue.add_parameter_type(definition)
        registry.register(definition.parameter_type)

    def build_world(self) -> None:
        """Called before each scenario; the world outlives scenarios."""

    def dispose_world(self) -> None:
        """Called after each scenario; the world outlives scenarios."""

    def get_snippet(self) -> Snippet:
        return Snippet()
