"""
Concurrent fan-out of named fetch tasks with per-task timeouts.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import asyncio
import logging
import time
from typing import Any, Iterable, Protocol, Sequence, Tuple

from space_data_agent.errors import ConfigError, FailureKind, FetchError
from space_data_agent.types import (
    AggregationResult,
    Failure,
    FetchTask,
    Success,
    TaskOutcome,
)

_LOG = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Capability that loads one JSON resource."""

    async def fetch(self, resource: str, timeout_ms: int) -> Any:
        ...


def validate_tasks(tasks: Iterable[FetchTask]) -> Tuple[FetchTask, ...]:
    """Check names are unique and timeouts positive. Raises ConfigError."""
    checked = tuple(tasks)
    seen = set()

    for task in checked:
        if not isinstance(task.name, str) or not task.name.strip():
            raise ConfigError(f"Task name must be a non-empty string, got {task.name!r}")

        if task.name in seen:
            raise ConfigError(f"Duplicate task name: {task.name}")
        seen.add(task.name)

        timeout = task.timeout_ms
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            raise ConfigError(
                f"{task.name}: timeout_ms must be a positive integer, got {timeout!r}"
            )

    return checked


class Aggregator:
    """Runs a set of fetch tasks concurrently and collects every outcome.

    A failing or slow task never affects another task's in-flight call, and
    per-task errors are recorded as :class:`Failure` outcomes rather than
    raised. The instance holds no state between runs.
    """

    async def run(self, tasks: Sequence[FetchTask], fetcher: Fetcher) -> AggregationResult:
        """
        Execute ``tasks`` against ``fetcher``.

        :param tasks: ordered task set, names unique
        :param fetcher: object with ``async fetch(resource, timeout_ms)``
        :return: outcome of every task
        :raises ConfigError: if the task set is invalid; nothing is fetched
        """
        checked = validate_tasks(tasks)

        start = time.monotonic()
        outcomes = await asyncio.gather(*(self._run_task(task, fetcher) for task in checked))
        result = AggregationResult(
            tasks=checked,
            outcomes={task.name: outcome for task, outcome in zip(checked, outcomes)},
        )

        _LOG.debug(
            "Aggregated %d tasks in %.0fms (%d failed, fatal=%s)",
            len(checked),
            (time.monotonic() - start) * 1000,
            len(result.failures),
            result.has_fatal_failure,
        )
        return result

    async def _run_task(self, task: FetchTask, fetcher: Fetcher) -> TaskOutcome:
        try:
            value = await asyncio.wait_for(
                fetcher.fetch(task.resource, task.timeout_ms),
                timeout=task.timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            outcome = Failure(FailureKind.TIMEOUT, f"timed out after {task.timeout_ms}ms")
        except FetchError as ex:
            outcome = Failure(ex.kind, str(ex) or type(ex).__name__)
        except Exception as ex:
            _LOG.error("Unexpected error fetching %s", task.name, exc_info=True)
            outcome = Failure(FailureKind.UNEXPECTED, f"{type(ex).__name__}: {ex}")
        else:
            return Success(value)

        _LOG.warning(
            "Task %s failed (%s): %s%s",
            task.name,
            outcome.kind.value,
            outcome.message,
            "" if task.required else " [optional]",
        )
        return outcome
