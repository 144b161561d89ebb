"""
Upstream locators for the NASA and Open-Notify feeds.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from typing import Optional
from urllib.parse import urlencode

from space_data_agent.config import Config
from space_data_agent.types import FetchTask


def apod_url(config: Config, date: Optional[str] = None) -> str:
    params = {"api_key": config.api_key}
    if date:
        params["date"] = date
    return f"{config.nasa_base_url}/planetary/apod?{urlencode(params)}"


def astros_url(config: Config) -> str:
    return f"{config.open_notify_base_url}/astros.json"


def iss_url(config: Config) -> str:
    return f"{config.open_notify_base_url}/iss-now.json"


def neo_feed_url(config: Config, start_date: str, end_date: str) -> str:
    params = {"start_date": start_date, "end_date": end_date, "api_key": config.api_key}
    return f"{config.nasa_base_url}/neo/rest/v1/feed?{urlencode(params)}"


def apod_task(config: Config, date: Optional[str] = None, required: bool = True) -> FetchTask:
    return FetchTask("apod", apod_url(config, date), config.timeout_ms, required)


def astros_task(config: Config, required: bool = True) -> FetchTask:
    return FetchTask("astros", astros_url(config), config.timeout_ms, required)


def iss_task(config: Config, required: bool = True) -> FetchTask:
    # ISS position goes stale quickly, so it gets the shorter deadline
    return FetchTask("iss", iss_url(config), config.iss_timeout_ms, required)


def neo_task(config: Config, start_date: str, end_date: str, required: bool = True) -> FetchTask:
    return FetchTask("neo", neo_feed_url(config, start_date, end_date), config.timeout_ms, required)
