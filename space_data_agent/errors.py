"""
Exception taxonomy for the space data aggregator.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from enum import Enum
from typing import TYPE_CHECKING, Dict

if TYPE_CHECKING:
    from space_data_agent.types import Failure


class FailureKind(str, Enum):
    """Kind of a per-task failure."""

    NETWORK = "NetworkError"
    TIMEOUT = "TimeoutError"
    PARSE = "ParseError"
    UNEXPECTED = "UnexpectedError"


class SpaceDataError(Exception):
    """Base class for all space data agent errors."""


class ConfigError(SpaceDataError):
    """Invalid task set: duplicate names or non-positive timeouts."""


class InvalidInputError(SpaceDataError):
    """Invalid arguments passed to an entrypoint."""


class FetchError(SpaceDataError):
    """A single upstream fetch failed."""

    kind = FailureKind.NETWORK


class NetworkError(FetchError):
    """Connection, DNS or HTTP status failure."""

    kind = FailureKind.NETWORK


class FetchTimeoutError(FetchError):
    """Upstream deadline exceeded."""

    kind = FailureKind.TIMEOUT


class ParseError(FetchError):
    """Response body is not valid JSON."""

    kind = FailureKind.PARSE


class UpstreamError(SpaceDataError):
    """One or more required upstream tasks failed."""

    def __init__(self, failures: Dict[str, "Failure"]):
        self.failures = dict(failures)
        summary = ", ".join(
            f"{name}: {failure.kind.value}: {failure.message}"
            for name, failure in self.failures.items()
        )
        super().__init__(f"Upstream failure ({summary})")

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        """Render the failure manifest as JSON-ready data."""
        return {name: failure.to_dict() for name, failure in self.failures.items()}
