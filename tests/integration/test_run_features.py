"""End-to-end runs of feature files through behave."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from burpless import datatable, docstring, hook, parameter_type, run_features, step

CUKES_FEATURE = """
Feature: Cukes
  Scenario: Eating cukes
    Given I have 5 cukes
    When I eat 3
    Then I have 2 left
"""


def _check_left(world: dict[str, int], expected: int) -> dict[str, int]:
    assert world["cukes"] == expected, f"expected {expected}, have {world['cukes']}"
    return world


def cukes_glue(calls: list[tuple[str, Any]]) -> list[Any]:
    """Glue that records (name, incoming world) for every invocation."""

    def recorded(name: str, function: Callable[..., Any]) -> Callable[..., Any]:
        def call(world: Any, *args: Any) -> Any:
            calls.append((name, world))
            return function(world, *args)

        return call

    return [
        hook("before", recorded("before", lambda world, scenario: {"cukes": 0})),
        step("given", "I have {int} cukes", recorded("s1", lambda w, n: {**w, "cukes": n})),
        step(
            "when",
            "I eat {int}",
            recorded("s2", lambda w, n: {**w, "cukes": w["cukes"] - n}),
        ),
        step("then", "I have {int} left", recorded("s3", _check_left)),
    ]


class TestRunFeatures:
    """Scenario: a run returns behave's outcome as an exit status."""

    def test_passing_run(self, write_feature: Callable[..., Path]) -> None:
        calls: list[tuple[str, Any]] = []
        feature = write_feature(CUKES_FEATURE)

        assert run_features(feature.parent, cukes_glue(calls)) == 0
        assert calls == [
            ("before", None),
            ("s1", {"cukes": 0}),
            ("s2", {"cukes": 5}),
            ("s3", {"cukes": 2}),
        ]

    def test_failing_step(self, write_feature: Callable[..., Path]) -> None:
        feature = write_feature(CUKES_FEATURE.replace("I eat 3", "I eat 1"))
        assert run_features(feature, cukes_glue([])) != 0

    def test_empty_glue_reports_undefined_steps(
        self, write_feature: Callable[..., Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        feature = write_feature(
            """
            Feature: Nothing defined
              Scenario: One step
                Given I have 42 cukes
            """
        )
        assert run_features(feature, []) != 0

        output = capsys.readouterr().out
        assert 'step("given", "I have {int} cukes"' in output
        assert "NotImplementedError" in output

    def test_world_is_shared_across_scenarios(
        self, write_feature: Callable[..., Path]
    ) -> None:
        seen: list[Any] = []
        feature = write_feature(
            """
            Feature: Counting
              Scenario: First
                Given I count
              Scenario: Second
                Given I count
            """
        )
        glue = [
            step("given", "I count", lambda world: (world or 0) + 1),
            hook("after_all", lambda world: seen.append(world) or world),
        ]
        assert run_features(feature, glue) == 0
        assert seen == [2]

    def test_hooks_run_by_order(self, write_feature: Callable[..., Path]) -> None:
        seen: list[Any] = []
        feature = write_feature(CUKES_FEATURE)

        def mark(label: str) -> Callable[..., Any]:
            def apply(world: Any, scenario: Any = None) -> Any:
                return (world or []) + [label]

            return apply

        glue = [
            hook("before_all", mark("all")),
            hook("before", mark("late"), order=10),
            hook("before", mark("early"), order=1),
            hook("after", mark("after-low"), order=1),
            hook("after", mark("after-high"), order=10),
            hook("before_step", lambda world, scenario: world + [scenario.name]),
            step("step", "I have {int} cukes", lambda world, n: world),
            step("step", "I eat {int}", lambda world, n: world),
            step("step", "I have {int} left", lambda world, n: world),
            hook("after_all", lambda world: seen.append(world) or world),
        ]
        assert run_features(feature, glue) == 0
        assert seen == [
            ["all", "early", "late"]
            + ["Eating cukes"] * 3
            + ["after-high", "after-low"]
        ]

    def test_regex_custom_types_table_and_doc_string(
        self, write_feature: Callable[..., Path]
    ) -> None:
        seen: list[Any] = []
        feature = write_feature(
            '''
            Feature: Arguments
              Scenario: Every kind of argument
                Given a red basket
                And a role of :admin
                When 3 apples fall
                Then these users exist:
                  | name  |
                  | alice |
                  | bob   |
                And the note says:
                  """
                  hello
                  """
            '''
        )

        @datatable
        def users(world: Any, table: Any) -> Any:
            return {**world, "users": [row["name"] for row in table]}

        @docstring
        def note(world: Any, text: str) -> Any:
            seen.append({**world, "note": text})
            return world

        glue = [
            parameter_type("colour", "red|green", str, str.upper),
            step("given", "a {colour} basket", lambda world, c: {"colour": c}),
            step("given", "a role of {keyword}", lambda world, k: {**world, "role": k}),
            step("when", r"^(\d+) apples fall$", lambda world, n: {**world, "apples": n}),
            step("then", "these users exist:", users),
            step("then", "the note says:", note),
        ]
        assert run_features(feature, glue) == 0
        assert seen == [
            {
                "colour": "RED",
                "role": "admin",
                "apples": 3,
                "users": ["alice", "bob"],
                "note": "hello",
            }
        ]

    def test_undefined_parameter_type_is_a_configuration_error(
        self, write_feature: Callable[..., Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        calls: list[Any] = []
        feature = write_feature(CUKES_FEATURE)
        glue = [step("given", "I have {cucumber} cukes", lambda w, c: calls.append(c))]

        assert run_features(feature, glue) == 1
        assert calls == []
        assert "ConfigError" in capsys.readouterr().out

    def test_unknown_option(self, write_feature: Callable[..., Path]) -> None:
        feature = write_feature(CUKES_FEATURE)
        assert run_features(feature, [], ["--no-such-option"]) != 0

    def test_missing_features_path(self, tmp_path: Path) -> None:
        assert run_features(tmp_path / "nowhere", []) != 0

    def test_duplicate_step_definitions_are_rejected(
        self, write_feature: Callable[..., Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        calls: list[str] = []
        feature = write_feature(
            """
            Feature: Going
              Scenario: Go
                Given I go
            """
        )
        glue = [
            step("given", "I go", lambda world: calls.append("first")),
            step("given", "I go", lambda world: calls.append("second")),
        ]

        assert run_features(feature, glue) == 1
        assert calls == []
        assert "already defined" in capsys.readouterr().out

    @pytest.mark.parametrize(
        ("first", "second"),
        [
            (("step", "I go {int} steps"), ("when", "I go 3 steps")),
            (("then", "^I go (\\d+) steps$"), ("step", "I go 3 steps")),
        ],
        ids=["any keyword then specific", "specific then any keyword"],
    )
    def test_step_keyword_competes_with_every_keyword(
        self,
        write_feature: Callable[..., Path],
        first: tuple[str, str],
        second: tuple[str, str],
    ) -> None:
        feature = write_feature(CUKES_FEATURE)
        glue = [
            step(first[0], first[1], lambda world, *args: world),
            step(second[0], second[1], lambda world, *args: world),
        ]
        assert run_features(feature, glue) == 1

    def test_same_pattern_under_different_keywords_is_allowed(
        self, write_feature: Callable[..., Path]
    ) -> None:
        feature = write_feature(
            """
            Feature: Counting
              Scenario: Count twice
                Given I count
                When I count
            """
        )
        glue = [
            step("given", "I count", lambda world: (world or 0) + 1),
            step("when", "I count", lambda world: world + 10),
        ]
        assert run_features(feature, glue) == 0

    def test_undefined_doc_string_step_snippet(
        self, write_feature: Callable[..., Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        feature = write_feature(
            '''
            Feature: Notes
              Scenario: A note
                Given the note says:
                  """
                  hello
                  """
            '''
        )
        assert run_features(feature, []) != 0

        output = capsys.readouterr().out
        assert "doc_string: str" in output
        assert "@docstring" in output
