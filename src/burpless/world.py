"""The World: one mutable state cell shared by a whole run."""

from collections.abc import Callable
from typing import Any


class World:
    """Holds the caller's application state between step and hook calls.

    The value is only ever replaced whole, by applying a glue function to
    the current value. One World lives for exactly one run and is shared by
    every scenario in it; nothing resets it between scenarios, so scenarios
    must run sequentially.
    """

    def __init__(self, value: Any = None) -> None:
        self._value = value

    @property
    def value(self) -> Any:
        """The current state."""
        return self._value

    def apply(self, function: Callable[..., Any], *args: Any) -> Any:
        """Replace the state with ``function(state, *args)`` and return it.

        Exceptions raised by ``function`` propagate and leave the state as
        it was.
        """
        self._value = function(self._value, *args)
        return self._value

    def __repr__(self) -> str:
        return f"World({self._value!r})"
