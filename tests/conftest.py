from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest


class ScriptedFetcher:
    """
    Fetcher double.

    ``script`` maps resource -> value, exception instance, or ``"hang"`` to
    never resolve. Optional per-resource delays are in seconds.
    """

    def __init__(self, script: dict[str, Any], delays: dict[str, float] | None = None):
        self.script = script
        self.delays = delays or {}
        self.calls: list[tuple[str, int]] = []
        self.cancelled: list[str] = []
        self.completed: list[str] = []

    async def fetch(self, resource: str, timeout_ms: int) -> Any:
        self.calls.append((resource, timeout_ms))
        step = self.script[resource]

        try:
            if step == "hang":
                await asyncio.Event().wait()
            if resource in self.delays:
                await asyncio.sleep(self.delays[resource])
        except asyncio.CancelledError:
            self.cancelled.append(resource)
            raise

        self.completed.append(resource)
        if isinstance(step, BaseException):
            raise step
        return step

    def resources(self) -> list[str]:
        return [resource for resource, _ in self.calls]


@pytest.fixture
def make_fetcher() -> Callable[..., ScriptedFetcher]:
    return ScriptedFetcher
