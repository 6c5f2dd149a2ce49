"""Shared test fixtures and configuration."""

from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest

from burpless.registry import TypeRegistry


@pytest.fixture
def registry() -> TypeRegistry:
    """A fresh registry with only the built-in parameter types."""
    return TypeRegistry()


@pytest.fixture
def write_feature(tmp_path: Path) -> Callable[..., Path]:
    """Write a feature file under tmp_path/features and return its path."""

    def _write(text: str, name: str = "example.feature") -> Path:
        features_dir = tmp_path / "features"
        features_dir.mkdir(exist_ok=True)
        feature_file = features_dir / name
        feature_file.write_text(dedent(text).lstrip(), encoding="utf-8")
        return feature_file

    return _write
