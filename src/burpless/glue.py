"""Glue definitions: steps, hooks and parameter types described as plain data.

Glue is built with the :func:`step`, :func:`hook` and :func:`parameter_type`
builders, which record where in the caller's source each definition was
written. That location is frozen on the model and is the only key used to
map a runtime frame back to the glue that produced it.
"""

import inspect
import re
from collections.abc import Callable, Sequence
from typing import Annotated, Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

F = TypeVar("F", bound=Callable[..., Any])

DATATABLE_MARKER = "burpless_datatable"
DOCSTRING_MARKER = "burpless_docstring"

HookPhase = Literal[
    "before_all", "after_all", "before", "after", "before_step", "after_step"
]
StepKeyword = Literal["given", "when", "then", "step"]

STATIC_HOOK_PHASES: frozenset[str] = frozenset({"before_all", "after_all"})


class Keyword(str):
    """A symbolic token such as ``:admin`` written in step text."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Keyword({str.__str__(self)!r})"


class SourceLocation(BaseModel):
    """File and line at which a glue definition was written."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


class BaseGlue(BaseModel):
    """Fields shared by every kind of glue."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    location: SourceLocation


class StepGlue(BaseGlue):
    """A pattern bound to a function of ``(world, *args) -> world``."""

    glue_type: Literal["step"] = "step"
    keyword: StepKeyword
    pattern: Any
    function: Callable[..., Any]
    consumes_table: bool = False
    consumes_docstring: bool = False

    @field_validator("keyword", mode="before")
    @classmethod
    def normalize_keyword(cls, value: Any) -> Any:
        """Accept ``Given``, ``:Given`` and friends."""
        if isinstance(value, str):
            return value.strip().lstrip(":").lower()
        return value

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, value: Any) -> Any:
        """Patterns are either expression text or a compiled regex."""
        if not isinstance(value, (str, re.Pattern)):
            msg = f"step pattern must be a str or re.Pattern, got {type(value).__name__}"
            raise ValueError(msg)
        return value

    @property
    def pattern_text(self) -> str:
        """The pattern exactly as written."""
        if isinstance(self.pattern, re.Pattern):
            return str(self.pattern.pattern)
        return str(self.pattern)


class HookGlue(BaseGlue):
    """A function run at one lifecycle phase.

    ``before_all``/``after_all`` functions take ``world`` only; every other
    phase also receives the current scenario.
    """

    glue_type: Literal["hook"] = "hook"
    phase: HookPhase
    order: int = 0
    function: Callable[..., Any]

    @property
    def is_static(self) -> bool:
        return self.phase in STATIC_HOOK_PHASES


class ParameterTypeGlue(BaseGlue):
    """A named set of regexps plus a transform, usable as ``{name}``."""

    glue_type: Literal["parameter_type"] = "parameter_type"
    name: str
    regexps: list[str]
    to_type: Any
    transform: Callable[[str], Any]
    use_for_snippets: bool = True
    prefer_for_regexp: bool = True
    strong_type_hint: bool = True

    @field_validator("regexps", mode="before")
    @classmethod
    def wrap_single_regexp(cls, value: Any) -> Any:
        if isinstance(value, re.Pattern):
            return [value.pattern]
        if isinstance(value, str):
            return [value]
        return [v.pattern if isinstance(v, re.Pattern) else v for v in value]


Glue = Annotated[StepGlue | HookGlue | ParameterTypeGlue, Field(discriminator="glue_type")]

_glue_adapter: TypeAdapter[Any] = TypeAdapter(Glue)


def parse_glue(data: dict[str, Any]) -> StepGlue | HookGlue | ParameterTypeGlue:
    """Validate a raw mapping into the glue model named by its ``glue_type``.

    Raises:
        pydantic.ValidationError: If ``glue_type``, ``phase`` or ``keyword``
            is not a recognised tag, or a required field is missing.
    """
    result: StepGlue | HookGlue | ParameterTypeGlue = _glue_adapter.validate_python(
        data
    )
    return result


def _caller_location(depth: int = 2) -> SourceLocation:
    """Location of the frame ``depth`` levels above this one."""
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return SourceLocation(file="<unknown>", line=0)
        return SourceLocation(file=frame.f_code.co_filename, line=frame.f_lineno)
    finally:
        del frame


def datatable(function: F) -> F:
    """Mark a step function as taking the step's data table as its last argument."""
    setattr(function, DATATABLE_MARKER, True)
    return function


def docstring(function: F) -> F:
    """Mark a step function as taking the step's doc string as its last argument."""
    setattr(function, DOCSTRING_MARKER, True)
    return function


def step(
    keyword: str,
    pattern: str | re.Pattern[str],
    function: Callable[..., Any],
    *,
    consumes_table: bool | None = None,
    consumes_docstring: bool | None = None,
) -> StepGlue:
    """Create a step definition.

    Args:
        keyword: ``given``, ``when``, ``then`` or ``step`` (any keyword)
        pattern: A Cucumber Expression, or a regular expression (anchored
            with ``^``/``$``, wrapped in slashes, or pre-compiled)
        function: Called as ``function(world, *args)``; its return value
            replaces the world. Parameters matched by the pattern come
            first, then the data table and doc string if consumed.
        consumes_table: Override the :func:`datatable` marker
        consumes_docstring: Override the :func:`docstring` marker

    Returns:
        The step glue, located at the caller's line
    """
    if consumes_table is None:
        consumes_table = bool(getattr(function, DATATABLE_MARKER, False))
    if consumes_docstring is None:
        consumes_docstring = bool(getattr(function, DOCSTRING_MARKER, False))
    return StepGlue(
        keyword=keyword,  # type: ignore[arg-type]
        pattern=pattern,
        function=function,
        consumes_table=consumes_table,
        consumes_docstring=consumes_docstring,
        location=_caller_location(),
    )


def hook(phase: str, function: Callable[..., Any], order: int = 0) -> HookGlue:
    """Create a hook definition for ``phase``.

    Hooks of the same phase run by ascending ``order``; ``after`` phases
    run in descending order.
    """
    return HookGlue(
        phase=phase,  # type: ignore[arg-type]
        order=order,
        function=function,
        location=_caller_location(),
    )


def parameter_type(
    name: str,
    regexps: str | Sequence[str],
    to_type: Any,
    transform: Callable[[str], Any],
    *,
    use_for_snippets: bool = True,
    prefer_for_regexp: bool = True,
    strong_type_hint: bool = True,
) -> ParameterTypeGlue:
    """Create a custom parameter type usable as ``{name}`` in step patterns."""
    return ParameterTypeGlue(
        name=name,
        regexps=regexps,  # type: ignore[arg-type]
        to_type=to_type,
        transform=transform,
        use_for_snippets=use_for_snippets,
        prefer_for_regexp=prefer_for_regexp,
        strong_type_hint=strong_type_hint,
        location=_caller_location(),
    )
