"""
Data model for fetch tasks and their aggregated outcomes.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple, Union

from space_data_agent.errors import FailureKind, UpstreamError

_MISSING = object()


@dataclass(frozen=True)
class FetchTask:
    """One upstream call within an aggregation."""

    name: str
    resource: str
    timeout_ms: int
    required: bool = True


@dataclass(frozen=True)
class Success:
    """Parsed JSON value returned by a task."""

    value: Any

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "success", "value": self.value}


@dataclass(frozen=True)
class Failure:
    """Reason a task did not produce a value."""

    kind: FailureKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, str]:
        return {"status": "failure", "kind": self.kind.value, "message": self.message}


TaskOutcome = Union[Success, Failure]


@dataclass(frozen=True)
class AggregationResult:
    """Outcome of every task in a set, keyed by task name.

    ``has_fatal_failure`` and ``failures`` are derived from the outcomes and
    the tasks' ``required`` flags; neither is stored.
    """

    tasks: Tuple[FetchTask, ...]
    outcomes: Mapping[str, TaskOutcome] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tasks", tuple(self.tasks))
        object.__setattr__(self, "outcomes", MappingProxyType(dict(self.outcomes)))

    def __getitem__(self, name: str) -> TaskOutcome:
        return self.outcomes[name]

    def __contains__(self, name: object) -> bool:
        return name in self.outcomes

    @property
    def has_fatal_failure(self) -> bool:
        return any(
            task.required and not self.outcomes[task.name].ok for task in self.tasks
        )

    @property
    def failures(self) -> Dict[str, Failure]:
        """Manifest of failed tasks and why they failed."""
        return {
            name: outcome
            for name, outcome in self.outcomes.items()
            if isinstance(outcome, Failure)
        }

    @property
    def fatal_failures(self) -> Dict[str, Failure]:
        required = {task.name for task in self.tasks if task.required}
        return {name: failure for name, failure in self.failures.items() if name in required}

    def value(self, name: str, default: Any = _MISSING) -> Any:
        """
        Return the value fetched by ``name``.

        A failed task yields ``default`` when one is given, otherwise raises
        :class:`UpstreamError` carrying that task's failure.
        """
        outcome = self.outcomes[name]
        if isinstance(outcome, Success):
            return outcome.value
        if default is _MISSING:
            raise UpstreamError({name: outcome})
        return default

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcomes": {name: outcome.to_dict() for name, outcome in self.outcomes.items()},
            "hasFatalFailure": self.has_fatal_failure,
        }
