"""
Space data entrypoints built on the aggregator.

Each entrypoint builds a fresh task set, runs it, and reshapes the result.
A failed required task raises :class:`UpstreamError`; optional tasks degrade
to placeholders.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Sequence

from space_data_agent import shaping, sources
from space_data_agent.aggregator import Aggregator, Fetcher
from space_data_agent.config import Config
from space_data_agent.errors import FailureKind, InvalidInputError, UpstreamError
from space_data_agent.types import AggregationResult, Failure, FetchTask

_LOG = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 3
MAX_RANGE_DAYS = 7
UNAVAILABLE = "unavailable"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_date(value: str, field: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as ex:
        raise InvalidInputError(f"{field} must be in YYYY-MM-DD format, got {value!r}") from ex


def _object(result: AggregationResult, name: str) -> Dict[str, Any]:
    """Fetched value of a required task, which must be a JSON object."""
    value = result.value(name)
    if not isinstance(value, dict):
        raise UpstreamError({
            name: Failure(FailureKind.PARSE, f"expected a JSON object, got {type(value).__name__}")
        })
    return value


class SpaceDataAgent:
    """Overview, APOD, astronauts, asteroids, ISS and combined report."""

    def __init__(
        self,
        config: Config,
        fetcher: Fetcher,
        aggregator: Optional[Aggregator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._config = config
        self._fetcher = fetcher
        self._aggregator = aggregator or Aggregator()
        self._clock = clock or _utcnow

    def _fetched_at(self) -> str:
        return self._clock().isoformat()

    def _today(self) -> date:
        return self._clock().date()

    async def _run(self, tasks: Sequence[FetchTask]) -> AggregationResult:
        result = await self._aggregator.run(tasks, self._fetcher)
        if result.has_fatal_failure:
            raise UpstreamError(result.fatal_failures)
        return result

    def _date_range(self, start_date: Optional[str], end_date: Optional[str]) -> tuple:
        start = _parse_date(start_date, "startDate") if start_date else self._today()
        end = _parse_date(end_date, "endDate") if end_date else start + timedelta(days=DEFAULT_RANGE_DAYS)

        if end < start:
            raise InvalidInputError(f"endDate {end} is before startDate {start}")
        if (end - start).days > MAX_RANGE_DAYS:
            raise InvalidInputError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")

        return start.isoformat(), end.isoformat()

    async def overview(self) -> Dict[str, Any]:
        """Humans in space and today's astronomy picture title."""
        result = await self._run([
            sources.astros_task(self._config),
            sources.apod_task(self._config),
        ])
        astros = _object(result, "astros")
        apod = _object(result, "apod")

        return {
            "humansInSpace": astros.get("number"),
            "crafts": shaping.distinct_crafts(astros.get("people")),
            "todaysApod": apod.get("title"),
            "apodDate": apod.get("date"),
            "fetchedAt": self._fetched_at(),
            "dataSources": [
                self._config.get_source_name("apod"),
                self._config.get_source_name("astros"),
            ],
        }

    async def apod(self, apod_date: Optional[str] = None) -> Dict[str, Any]:
        """Astronomy Picture of the Day with full details."""
        if apod_date:
            _parse_date(apod_date, "date")

        result = await self._run([sources.apod_task(self._config, apod_date)])
        data = _object(result, "apod")
        _LOG.info("APOD data fetched: %s", str(data.get("title", ""))[:30])

        return {
            "title": data.get("title"),
            "date": data.get("date"),
            "explanation": data.get("explanation"),
            "mediaType": data.get("media_type"),
            "url": data.get("url"),
            "hdUrl": data.get("hdurl") or None,
            "copyright": data.get("copyright") or "Public Domain",
            "fetchedAt": self._fetched_at(),
        }

    async def astronauts(self) -> Dict[str, Any]:
        """Humans in space grouped by spacecraft."""
        result = await self._run([sources.astros_task(self._config)])
        data = _object(result, "astros")
        by_craft = shaping.group_by_craft(data.get("people"))

        return {
            "totalInSpace": data.get("number"),
            "byCraft": by_craft,
            "crafts": list(by_craft),
            "fetchedAt": self._fetched_at(),
        }

    async def asteroids(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        """Near-Earth objects in a date range, closest approach first."""
        start, end = self._date_range(start_date, end_date)

        result = await self._run([sources.neo_task(self._config, start, end)])
        data = _object(result, "neo")
        asteroids = shaping.flatten_asteroids(data.get("near_earth_objects"))
        _LOG.info("NEO data fetched: %d objects", len(asteroids))

        return {
            "totalCount": data.get("element_count"),
            "dateRange": {"start": start, "end": end},
            "hazardousCount": sum(1 for a in asteroids if a["isPotentiallyHazardous"]),
            "closestApproach": asteroids[0] if asteroids else None,
            "asteroids": asteroids[:shaping.MAX_ASTEROIDS],
            "fetchedAt": self._fetched_at(),
        }

    async def iss(self) -> Dict[str, Any]:
        """Current ISS latitude and longitude."""
        result = await self._run([sources.iss_task(self._config)])
        data = _object(result, "iss")

        return {
            **shaping.iss_position(data),
            "timestamp": data.get("timestamp"),
            "fetchedAt": self._fetched_at(),
        }

    async def report(self, include_asteroids: bool = True) -> Dict[str, Any]:
        """
        Combined briefing: APOD, astronauts, ISS location and asteroids.

        The ISS lookup is optional and reported as ``"unavailable"`` when it
        fails; every other source is required.
        """
        today = self._today()
        tasks = [
            sources.apod_task(self._config),
            sources.astros_task(self._config),
            sources.iss_task(self._config, required=False),
        ]
        if include_asteroids:
            end = today + timedelta(days=DEFAULT_RANGE_DAYS)
            tasks.append(sources.neo_task(self._config, today.isoformat(), end.isoformat()))

        result = await self._run(tasks)
        apod = _object(result, "apod")
        astros = _object(result, "astros")
        iss = result.value("iss", None)
        if iss is not None and not isinstance(iss, dict):
            _LOG.warning("ISS payload is not an object, reporting unavailable")
            iss = None

        asteroid_summary = None
        if include_asteroids:
            asteroid_summary = shaping.hazardous_summary(_object(result, "neo"))

        return {
            "report": {
                "date": today.isoformat(),
                "astronomyPictureOfTheDay": {
                    "title": apod.get("title"),
                    "explanation": shaping.truncate(apod.get("explanation")),
                    "url": apod.get("url"),
                    "mediaType": apod.get("media_type"),
                },
                "humansInSpace": {
                    "total": astros.get("number"),
                    "byCraft": shaping.group_by_craft(astros.get("people")),
                },
                "issLocation": shaping.iss_position(iss) if iss is not None else UNAVAILABLE,
                "nearEarthObjects": asteroid_summary,
            },
            "fetchedAt": self._fetched_at(),
            "dataSources": [self._config.get_source_name(task.name) for task in tasks],
        }

    async def call(self, key: str, **kwargs: Any) -> Dict[str, Any]:
        """Dispatch an entrypoint by its key."""
        if key not in ENTRYPOINTS:
            raise InvalidInputError(f"Unknown entrypoint: {key}")
        return await getattr(self, key)(**kwargs)


ENTRYPOINTS = ("overview", "apod", "astronauts", "asteroids", "iss", "report")
