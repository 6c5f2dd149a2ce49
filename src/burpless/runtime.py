"""Run gherkin features through behave using data-defined glue.

behave normally discovers glue by importing a ``steps`` directory and an
``environment.py`` file. :class:`GlueRunner` replaces that discovery: it
asks the :class:`~burpless.backend.Backend` to load glue into a
:class:`BehaveGlue` registrar, installs one :class:`StepMatcher` per step
definition in a fresh step registry, and turns the registered hooks into
behave's hook functions.
"""

import logging
import os
import re
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

import click
from behave.configuration import Configuration
from behave.exception import ConfigError
from behave.matchers import Argument, Matcher
from behave.model import Table
from behave.model_core import FileLocation
from behave.parser import ParserError
from behave.runner import Runner
from behave.step_registry import StepRegistry
from cucumber_expressions.errors import CucumberExpressionError
from cucumber_expressions.expression_generator import CucumberExpressionGenerator

from burpless.backend import Backend
from burpless.definitions import (
    ParameterTypeDefinition,
    StaticHookDefinition,
    StepDefinition,
)
from burpless.errors import (
    BurplessError,
    DuplicateStepDefinitionError,
    GlueDefinitionError,
)
from burpless.glue import HookGlue, ParameterTypeGlue, StepGlue
from burpless.registry import TypeRegistry
from burpless.resolver import ArgumentSource
from burpless.world import World

logger = logging.getLogger(__name__)

DEFAULT_ARGS: tuple[str, ...] = ("--format", "pretty", "--no-color")

# glue phase -> behave hook name
BEHAVE_HOOKS = {
    "before_all": "before_all",
    "after_all": "after_all",
    "before": "before_scenario",
    "after": "after_scenario",
    "before_step": "before_step",
    "after_step": "after_step",
}
_AFTER_PHASES = frozenset({"after_all", "after", "after_step"})


class BehaveGlue:
    """Collects the executable units a backend registers for one run."""

    def __init__(self) -> None:
        self.parameter_type_definitions: list[ParameterTypeDefinition] = []
        self.step_definitions: list[StepDefinition] = []
        self.hook_definitions: dict[str, list[StaticHookDefinition]] = {
            phase: [] for phase in BEHAVE_HOOKS
        }

    def add_parameter_type(self, definition: ParameterTypeDefinition) -> None:
        self.parameter_type_definitions.append(definition)

    def add_step_definition(self, definition: StepDefinition) -> None:
        self.step_definitions.append(definition)

    def add_before_all_hook(self, definition: StaticHookDefinition) -> None:
        self.hook_definitions["before_all"].append(definition)

    def add_after_all_hook(self, definition: StaticHookDefinition) -> None:
        self.hook_definitions["after_all"].append(definition)

    def add_before_hook(self, definition: StaticHookDefinition) -> None:
        self.hook_definitions["before"].append(definition)

    def add_after_hook(self, definition: StaticHookDefinition) -> None:
        self.hook_definitions["after"].append(definition)

    def add_before_step_hook(self, definition: StaticHookDefinition) -> None:
        self.hook_definitions["before_step"].append(definition)

    def add_after_step_hook(self, definition: StaticHookDefinition) -> None:
        self.hook_definitions["after_step"].append(definition)

    def hooks_in_run_order(self, phase: str) -> list[StaticHookDefinition]:
        """Hooks of ``phase`` by ascending order; ``after`` phases descending."""
        return sorted(
            self.hook_definitions[phase],
            key=lambda definition: definition.order,
            reverse=phase in _AFTER_PHASES,
        )

    def type_registry(self) -> TypeRegistry:
        """A registry holding the built-ins plus every registered type."""
        registry = TypeRegistry()
        for definition in self.parameter_type_definitions:
            registry.register(definition.parameter_type)
        return registry


class StepMatcher(Matcher):  # type: ignore[misc]
    """behave matcher delegating to a compiled step definition."""

    def __init__(self, definition: StepDefinition, runner: "GlueRunner") -> None:
        super().__init__(self.invoke, definition.pattern, step_type=definition.keyword)
        self.definition = definition
        self.runner = runner

    @property
    def location(self) -> FileLocation:
        source = self.definition.source_location
        return FileLocation(source.file, source.line)

    def check_match(self, step_text: str) -> list[Argument] | None:
        arguments = self.definition.match(step_text)
        if arguments is None:
            return None
        return [self._to_behave_argument(argument) for argument in arguments]

    def match(self, step_text: str) -> Any:
        match = super().match(step_text)
        if match is not None:
            match.location = self.location
        return match

    @staticmethod
    def _to_behave_argument(argument: Any) -> Argument:
        group = argument.group
        start = group.start if group.start is not None else 0
        end = group.end if group.end is not None else start
        return Argument(start, end, group.value, argument)

    def invoke(self, context: Any, *arguments: Any) -> None:
        """Called by behave with the matched arguments."""
        args = list(arguments)
        for descriptor in self.definition.parameter_infos()[len(args) :]:
            if descriptor.source is ArgumentSource.TABLE:
                args.append(getattr(context, "table", None))
            elif descriptor.source is ArgumentSource.DOC_STRING:
                args.append(getattr(context, "text", None))
        self.definition.execute(self.runner.world, args)


class GlueRunner(Runner):  # type: ignore[misc]
    """behave runner whose glue comes from a backend instead of modules."""

    def __init__(self, config: Configuration, backend: Backend, world: World) -> None:
        super().__init__(config)
        self.backend = backend
        self.world = world
        self.glue = BehaveGlue()
        self.step_registry = StepRegistry()

    def setup_paths(self) -> None:
        """Use the features path as base directory; no steps dir is needed."""
        if self.config.paths:
            first_path = self.config.paths[0]
            base_dir = os.path.abspath(getattr(first_path, "filename", first_path))
        else:
            base_dir = os.path.abspath("features")
        if os.path.isfile(base_dir):
            base_dir = os.path.dirname(base_dir)
        if not os.path.isdir(base_dir):
            raise ConfigError(f"No features directory at {base_dir!r}")
        self.base_dir = base_dir
        self.config.base_dir = base_dir
        if not self.config.paths:
            self.config.paths = [base_dir]

    def load_hooks(self, filename: str | None = None) -> None:
        """Load glue from the backend and install its hooks."""
        try:
            self.backend.load_glue(self.glue, [str(path) for path in self.config.paths])
        except (BurplessError, CucumberExpressionError) as e:
            raise ConfigError(str(e)) from e
        self.hooks = {
            "before_all": self._static_hook("before_all"),
            "after_all": self._static_hook("after_all"),
            "before_scenario": self._scenario_hook("before", self.backend.build_world),
            "after_scenario": self._scenario_hook("after", self.backend.dispose_world),
            "before_step": self._step_hook("before_step"),
            "after_step": self._step_hook("after_step"),
        }

    def load_step_definitions(self, extra_step_paths: Sequence[str] | None = None) -> None:
        """Install one matcher per step definition, in definition order.

        Raises:
            ConfigError: If a definition clashes with one already installed
        """
        for definition in self.glue.step_definitions:
            try:
                self._check_unique(definition)
            except GlueDefinitionError as e:
                raise ConfigError(str(e)) from e
            self.step_registry.steps[definition.keyword].append(
                StepMatcher(definition, self)
            )

    def _check_unique(self, definition: StepDefinition) -> None:
        # a "step" definition competes with every keyword, the others with
        # their own keyword and "step"
        if definition.keyword == "step":
            buckets = list(self.step_registry.steps)
        else:
            buckets = [definition.keyword, "step"]
        for bucket in buckets:
            for existing in self.step_registry.steps[bucket]:
                if existing.matches(definition.pattern):
                    raise DuplicateStepDefinitionError(
                        definition.pattern,
                        definition.location,
                        existing.definition.location,
                    )

    def _static_hook(self, phase: str) -> Callable[[Any], None]:
        def run_hooks(context: Any) -> None:
            for definition in self.glue.hooks_in_run_order(phase):
                definition.execute(self.world)

        return run_hooks

    def _scenario_hook(
        self, phase: str, world_callback: Callable[[], None]
    ) -> Callable[[Any, Any], None]:
        def run_hooks(context: Any, scenario: Any) -> None:
            if phase == "before":
                world_callback()
            for definition in self.glue.hooks_in_run_order(phase):
                definition.execute(self.world, scenario)  # type: ignore[call-arg]
            if phase == "after":
                world_callback()

        return run_hooks

    def _step_hook(self, phase: str) -> Callable[[Any, Any], None]:
        def run_hooks(context: Any, step: Any) -> None:
            for definition in self.glue.hooks_in_run_order(phase):
                definition.execute(self.world, context.scenario)  # type: ignore[call-arg]

        return run_hooks


def _function_name(source: str) -> str:
    words = re.findall(r"[a-z0-9]+", re.sub(r"\{[^}]*\}", " ", source.lower()))
    name = "_".join(words) or "step"
    return name if not name[0].isdigit() else f"step_{name}"


def undefined_step_snippets(runner: GlueRunner) -> list[str]:
    """One suggested glue snippet per distinct undefined step."""
    snippet = runner.backend.get_snippet()
    generator = CucumberExpressionGenerator(
        runner.glue.type_registry().parameter_type_registry
    )
    snippets: list[str] = []
    for step in runner.undefined_steps:
        generated = generator.generate_expressions(step.name)[0]
        arguments: dict[str, Any] = {
            name: parameter_type.type
            for name, parameter_type in zip(
                generated.parameter_names, generated.parameter_types, strict=False
            )
        }
        if step.table:
            arguments["table"] = Table
        if step.text:
            arguments["doc_string"] = str
        text = snippet.render(
            step.step_type,
            generated.source,
            _function_name(generated.source),
            arguments,
            has_table=bool(step.table),
            has_doc_string=bool(step.text),
        )
        if text not in snippets:
            snippets.append(text)
    return snippets


def _exit_status(error: SystemExit) -> int:
    if error.code is None:
        return 0
    if isinstance(error.code, int):
        return error.code
    click.echo(str(error.code), err=True)
    return 1


def create_runtime(
    args: Sequence[str],
    glues: Iterable[StepGlue | HookGlue | ParameterTypeGlue],
    world: World,
) -> GlueRunner:
    """Parse ``args`` with behave and build a runner over ``glues``.

    Raises:
        SystemExit: If behave rejects the options or only prints help
        ConfigError: If behave's configuration is invalid
    """
    config = Configuration(list(args))
    return GlueRunner(config, Backend(glues), world)


def run_features(
    features_path: str | Path,
    glues: Iterable[StepGlue | HookGlue | ParameterTypeGlue],
    args: Sequence[str] | None = None,
) -> int:
    """Run the features at ``features_path`` against ``glues``.

    Scenarios run sequentially and share one :class:`~burpless.world.World`,
    created here and discarded on return.

    Args:
        features_path: A feature file or a directory of them
        glues: Steps, hooks and parameter types
        args: behave command-line options; defaults to the pretty formatter
            with colour disabled

    Returns:
        0 if every scenario passed, non-zero on any failure, undefined step
        or configuration error
    """
    options = list(DEFAULT_ARGS if args is None else args)
    world = World()
    try:
        runner = create_runtime([*options, str(features_path)], glues, world)
    except SystemExit as e:
        return _exit_status(e)
    except ConfigError as e:
        click.echo(f"ConfigError: {e}")
        return 1

    try:
        failed = runner.run()
    except ParserError as e:
        click.echo(f"ParserError: {e}")
        return 1
    except ConfigError as e:
        click.echo(f"ConfigError: {e}")
        return 1

    if runner.undefined_steps and getattr(runner.config, "show_snippets", True):
        click.echo(
            "\nYou can implement glue for undefined steps with these snippets:\n"
        )
        for text in undefined_step_snippets(runner):
            click.echo(text)

    return 1 if failed else 0
