"""
Space Data Agent.

Aggregated space data from NASA and Open-Notify: astronomy pictures,
astronaut tracking, asteroid monitoring, ISS location and combined briefings,
built on a concurrent partial-failure tolerant fetch aggregator.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from space_data_agent.aggregator import Aggregator, validate_tasks
from space_data_agent.errors import (
    ConfigError,
    FetchError,
    FetchTimeoutError,
    InvalidInputError,
    NetworkError,
    ParseError,
    SpaceDataError,
    UpstreamError,
)
from space_data_agent.types import (
    AggregationResult,
    Failure,
    FailureKind,
    FetchTask,
    Success,
    TaskOutcome,
)

__version__ = "1.0.0"
__author__ = "Meir Miyara"
__email__ = "meir.miyara@gmail.com"

__all__ = [
    "Aggregator",
    "AggregationResult",
    "ConfigError",
    "Failure",
    "FailureKind",
    "FetchError",
    "FetchTask",
    "FetchTimeoutError",
    "InvalidInputError",
    "NetworkError",
    "ParseError",
    "SpaceDataError",
    "Success",
    "TaskOutcome",
    "UpstreamError",
    "validate_tasks",
]
