# tests/test_aggregator.py
from __future__ import annotations

import asyncio
import time

import pytest

from space_data_agent.aggregator import Aggregator, validate_tasks
from space_data_agent.errors import ConfigError, NetworkError, ParseError
from space_data_agent.types import Failure, FailureKind, FetchTask, Success


def _run(tasks, fetcher):
    return asyncio.run(Aggregator().run(tasks, fetcher))


def test_one_outcome_per_task(make_fetcher) -> None:
    fetcher = make_fetcher({"a": {"v": 1}, "b": [1, 2], "c": None})
    tasks = [FetchTask(name, name, 1000) for name in ("a", "b", "c")]

    result = _run(tasks, fetcher)

    assert sorted(result.outcomes) == ["a", "b", "c"]
    assert result["a"] == Success({"v": 1})
    assert result["b"] == Success([1, 2])
    assert result["c"] == Success(None)
    assert not result.has_fatal_failure
    assert result.failures == {}


def test_partial_failure_is_isolated(make_fetcher) -> None:
    fetcher = make_fetcher(
        {
            "/a": {"v": 1},
            "/b": NetworkError("API error: 503"),
            "/c": {"v": 2},
        }
    )
    tasks = [
        FetchTask("A", "/a", 1000),
        FetchTask("B", "/b", 1000, required=True),
        FetchTask("C", "/c", 1000, required=False),
    ]

    result = _run(tasks, fetcher)

    assert result["A"] == Success({"v": 1})
    assert result["B"] == Failure(FailureKind.NETWORK, "API error: 503")
    assert result["C"] == Success({"v": 2})
    assert result.has_fatal_failure is True
    assert list(result.failures) == ["B"]
    assert list(result.fatal_failures) == ["B"]


def test_optional_failures_are_not_fatal(make_fetcher) -> None:
    fetcher = make_fetcher({"/a": {"v": 1}, "/b": ParseError("bad body")})
    tasks = [FetchTask("a", "/a", 1000), FetchTask("b", "/b", 1000, required=False)]

    result = _run(tasks, fetcher)

    assert result["b"] == Failure(FailureKind.PARSE, "bad body")
    assert result.has_fatal_failure is False
    assert result.fatal_failures == {}
    assert result.value("b", "unavailable") == "unavailable"


def test_hanging_task_times_out_without_blocking_others(make_fetcher) -> None:
    fetcher = make_fetcher({"/slow": "hang", "/fast": {"ok": True}})
    tasks = [
        FetchTask("slow", "/slow", 50, required=False),
        FetchTask("fast", "/fast", 5000),
    ]

    start = time.monotonic()
    result = _run(tasks, fetcher)
    elapsed = time.monotonic() - start

    assert elapsed < 2
    assert result["slow"] == Failure(FailureKind.TIMEOUT, "timed out after 50ms")
    assert result["fast"] == Success({"ok": True})
    assert fetcher.cancelled == ["/slow"]
    assert not result.has_fatal_failure


def test_tasks_run_concurrently(make_fetcher) -> None:
    fetcher = make_fetcher(
        {"/1": 1, "/2": 2, "/3": 3},
        delays={"/1": 0.2, "/2": 0.2, "/3": 0.2},
    )
    tasks = [FetchTask(str(i), f"/{i}", 5000) for i in (1, 2, 3)]

    start = time.monotonic()
    result = _run(tasks, fetcher)

    assert time.monotonic() - start < 0.5
    assert {name: outcome.value for name, outcome in result.outcomes.items()} == {
        "1": 1,
        "2": 2,
        "3": 3,
    }


def test_required_failure_does_not_cancel_other_tasks(make_fetcher) -> None:
    fetcher = make_fetcher(
        {"/fail": NetworkError("down"), "/late": {"v": 3}},
        delays={"/late": 0.1},
    )
    tasks = [FetchTask("fail", "/fail", 1000), FetchTask("late", "/late", 1000, required=False)]

    result = _run(tasks, fetcher)

    assert result["late"] == Success({"v": 3})
    assert fetcher.cancelled == []


def test_outcomes_attributed_regardless_of_completion_order(make_fetcher) -> None:
    fetcher = make_fetcher(
        {"/first": "first", "/second": "second"},
        delays={"/first": 0.1, "/second": 0.0},
    )
    tasks = [FetchTask("first", "/first", 1000), FetchTask("second", "/second", 1000)]

    result = _run(tasks, fetcher)

    assert fetcher.completed == ["/second", "/first"]
    assert result["first"] == Success("first")
    assert result["second"] == Success("second")


def test_unexpected_exception_is_captured(make_fetcher) -> None:
    fetcher = make_fetcher({"/x": KeyError("boom")})

    result = _run([FetchTask("x", "/x", 1000)], fetcher)

    assert result["x"].kind is FailureKind.UNEXPECTED
    assert "KeyError" in result["x"].message
    assert result.has_fatal_failure


def test_duplicate_names_fail_before_any_fetch(make_fetcher) -> None:
    fetcher = make_fetcher({"/a": 1, "/b": 2})
    tasks = [FetchTask("same", "/a", 1000), FetchTask("same", "/b", 1000)]

    with pytest.raises(ConfigError, match="Duplicate task name: same"):
        _run(tasks, fetcher)

    assert fetcher.calls == []


@pytest.mark.parametrize("timeout", [0, -5, 1.5, True, "100"])
def test_invalid_timeouts_fail_before_any_fetch(make_fetcher, timeout) -> None:
    fetcher = make_fetcher({"/a": 1, "/b": 2})
    tasks = [FetchTask("a", "/a", 1000), FetchTask("b", "/b", timeout)]

    with pytest.raises(ConfigError, match="timeout_ms must be a positive integer"):
        _run(tasks, fetcher)

    assert fetcher.calls == []


def test_empty_name_rejected() -> None:
    with pytest.raises(ConfigError):
        validate_tasks([FetchTask("  ", "/a", 1000)])


def test_empty_task_set() -> None:
    result = _run([], None)

    assert dict(result.outcomes) == {}
    assert result.has_fatal_failure is False


def test_rerun_is_deterministic(make_fetcher) -> None:
    fetcher = make_fetcher({"/a": {"v": 1}, "/b": NetworkError("down"), "/c": [3]})
    tasks = [
        FetchTask("a", "/a", 1000),
        FetchTask("b", "/b", 1000, required=False),
        FetchTask("c", "/c", 1000),
    ]
    aggregator = Aggregator()

    first = asyncio.run(aggregator.run(tasks, fetcher))
    second = asyncio.run(aggregator.run(tasks, fetcher))

    assert dict(first.outcomes) == dict(second.outcomes)
    assert first.has_fatal_failure == second.has_fatal_failure
    assert len(fetcher.calls) == 6


def test_fetcher_receives_task_timeout(make_fetcher) -> None:
    fetcher = make_fetcher({"/a": 1})

    _run([FetchTask("a", "/a", 1234)], fetcher)

    assert fetcher.calls == [("/a", 1234)]
