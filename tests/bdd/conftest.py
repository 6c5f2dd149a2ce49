"""BDD test configuration for burpless."""

from typing import Any

import pytest


@pytest.fixture
def bdd_context() -> dict[str, Any]:
    """Shared state for the steps of one scenario."""
    return {}
