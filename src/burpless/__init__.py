"""Burpless - gherkin features run by behave against glue defined as data."""

from importlib.metadata import PackageNotFoundError, version

from burpless.glue import (
    Keyword,
    datatable,
    docstring,
    hook,
    parameter_type,
    step,
)
from burpless.runtime import run_features

try:
    __version__ = version("burpless")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"

__all__ = [
    "Keyword",
    "datatable",
    "docstring",
    "hook",
    "parameter_type",
    "run_features",
    "step",
]
