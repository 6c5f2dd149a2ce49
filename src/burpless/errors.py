"""Exception hierarchy for burpless."""


class BurplessError(Exception):
    """Base class for every error raised by burpless itself."""


class GlueDefinitionError(BurplessError):
    """A glue definition cannot be turned into an executable unit."""


class UnresolvedParameterTypeError(GlueDefinitionError):
    """A ``{name}`` placeholder refers to no registered parameter type."""

    def __init__(self, name: str, pattern: str) -> None:
        self.name = name
        self.pattern = pattern
        super().__init__(
            f"Undefined parameter type {{{name}}} in step pattern {pattern!r}"
        )


class IntrospectionError(BurplessError):
    """The compiled pattern does not have the internal shape we read from."""


class StepArityError(BurplessError):
    """A step was invoked with a different number of arguments than it declares."""

    def __init__(self, pattern: str, expected: int, actual: int) -> None:
        self.pattern = pattern
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Step {pattern!r} declares {expected} parameter(s) "
            f"but was invoked with {actual}"
        )


class ConfigurationError(BurplessError):
    """The run configuration or a glue reference is invalid."""


class DuplicateStepDefinitionError(GlueDefinitionError):
    """Two step definitions match the same step text."""

    def __init__(self, pattern: str, location: str, existing_location: str) -> None:
        self.pattern = pattern
        self.location = location
        self.existing_location = existing_location
        super().__init__(
            f"Step {pattern!r} at {location} is already defined at {existing_location}"
        )
