"""Glue importable by reference from CLI and config tests."""

from burpless import hook, parameter_type, step


def _check_total(world: dict[str, int], expected: int) -> dict[str, int]:
    assert world["cukes"] == expected, world
    return world


GLUE = [
    parameter_type("colour", "red|green|blue", str, str.upper),
    hook("before", lambda world, scenario: {"cukes": 0}),
    step("given", "I have {int} cukes", lambda world, n: {**world, "cukes": n}),
    step("when", "I eat {int}", lambda world, n: {**world, "cukes": world["cukes"] - n}),
    step("then", "I have {int} left", _check_total),
]

MORE_GLUE = [[step("given", "a {colour} basket", lambda world, colour: world)]]

NOT_GLUE = 42
