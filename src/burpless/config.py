"""Run configuration: features path, glue references and behave options.

A ``burpless.yaml`` file in the working directory (or one passed with
``--config``) provides defaults; values given on the command line win::

    features: features/
    glue:
      - myproject.glue:GLUE
    args: ["--format", "progress"]
"""

import importlib
import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from burpless.errors import ConfigurationError
from burpless.glue import HookGlue, ParameterTypeGlue, StepGlue

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "burpless.yaml"

GlueDefinition = StepGlue | HookGlue | ParameterTypeGlue


class RunConfig(BaseModel):
    """Settings for one ``burpless run``."""

    model_config = ConfigDict(extra="forbid")

    features: str = "features"
    glue: list[str] = Field(default_factory=list)
    args: list[str] | None = None

    def merged(
        self,
        features: str | None = None,
        glue: list[str] | None = None,
        args: list[str] | None = None,
    ) -> "RunConfig":
        """Return a copy with every non-empty override applied."""
        updates: dict[str, Any] = {}
        if features:
            updates["features"] = features
        if glue:
            updates["glue"] = glue
        if args:
            updates["args"] = args
        return self.model_copy(update=updates)


def load_run_config(path: Path | None = None) -> RunConfig:
    """Load a run configuration file.

    Args:
        path: Explicit config file; when ``None``, ``burpless.yaml`` in the
            working directory is used if present

    Returns:
        The validated configuration, or defaults when no file applies

    Raises:
        ConfigurationError: If an explicit file is missing, or any file is
            not valid YAML or has unknown keys
    """
    if path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not path.exists():
            return RunConfig()
    elif not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    logger.debug("Loading run configuration from %s", path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping")
    try:
        return RunConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e


def _flatten(value: Any, reference: str) -> list[GlueDefinition]:
    if isinstance(value, (StepGlue, HookGlue, ParameterTypeGlue)):
        return [value]
    if isinstance(value, (list, tuple)):
        glues: list[GlueDefinition] = []
        for item in value:
            glues.extend(_flatten(item, reference))
        return glues
    raise ConfigurationError(
        f"{reference} holds {type(value).__name__}, not glue definitions"
    )


def load_glue_references(references: list[str]) -> list[GlueDefinition]:
    """Import ``module:attribute`` references and collect their glue.

    Each attribute may be a single definition or a (nested) list of them.
    Modules in the working directory are importable, as with ``python -m``.

    Raises:
        ConfigurationError: If a reference is malformed or cannot be imported
    """
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    glues: list[GlueDefinition] = []
    for reference in references:
        module_name, _, attribute = reference.partition(":")
        if not module_name or not attribute:
            raise ConfigurationError(
                f"Glue reference {reference!r} must look like 'module:attribute'"
            )
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ConfigurationError(f"Cannot import {module_name!r}: {e}") from e
        if not hasattr(module, attribute):
            raise ConfigurationError(f"Module {module_name!r} has no {attribute!r}")
        found = _flatten(getattr(module, attribute), reference)
        logger.debug("Loaded %d glue definition(s) from %s", len(found), reference)
        glues.extend(found)
    return glues
