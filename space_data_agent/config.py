"""
Configuration management for the space data agent.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

_LOG = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "api_key": "",
    "timeout_ms": 30000,
    "iss_timeout_ms": 15000,
    "retries": 1,
    "retry_delay": 1.0,
    "log_level": "INFO",
    "nasa_base_url": "https://api.nasa.gov",
    "open_notify_base_url": "http://api.open-notify.org",
}

ENV_OVERRIDES = {
    "NASA_API_KEY": "api_key",
    "SPACE_AGENT_TIMEOUT_MS": "timeout_ms",
    "SPACE_AGENT_ISS_TIMEOUT_MS": "iss_timeout_ms",
    "SPACE_AGENT_RETRIES": "retries",
    "SPACE_AGENT_LOG_LEVEL": "log_level",
}

DATA_SOURCES = {
    "apod": "NASA APOD",
    "astros": "Open-Notify Astros",
    "iss": "Open-Notify ISS",
    "neo": "NASA NEO",
}


class Config:
    """Configuration for the space data agent.

    Values come from ``DEFAULT_CONFIG``, then the optional JSON file, then
    the environment.
    """

    def __init__(
        self,
        config_file_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize configuration."""
        self._config_file_path = config_file_path
        self._environ = os.environ if environ is None else environ
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file and environment."""
        self._config = DEFAULT_CONFIG.copy()

        if self._config_file_path:
            try:
                if os.path.exists(self._config_file_path):
                    with open(self._config_file_path, "r", encoding="utf-8") as file:
                        data = json.load(file)
                    if isinstance(data, dict):
                        self._config.update(data)
                        _LOG.info("Configuration loaded from %s", self._config_file_path)
                    else:
                        _LOG.error(
                            "Configuration in %s is not an object, using defaults",
                            self._config_file_path,
                        )
                else:
                    _LOG.info("Configuration file not found, using defaults")
            except (OSError, ValueError) as ex:
                _LOG.error("Failed to load configuration: %s", ex)

        for env_name, key in ENV_OVERRIDES.items():
            value = self._environ.get(env_name)
            if value:
                self._config[key] = value

    def _get_int(self, key: str) -> int:
        value = self._config.get(key, DEFAULT_CONFIG[key])
        try:
            return int(value)
        except (TypeError, ValueError):
            _LOG.warning("Invalid value for %s: %r, using %s", key, value, DEFAULT_CONFIG[key])
            return DEFAULT_CONFIG[key]

    def _get_positive_int(self, key: str) -> int:
        value = self._get_int(key)
        if value <= 0:
            _LOG.warning("%s must be positive, got %s, using %s", key, value, DEFAULT_CONFIG[key])
            return DEFAULT_CONFIG[key]
        return value

    @property
    def api_key(self) -> str:
        """Get NASA API key, falling back to the public demo key."""
        api_key = self._config.get("api_key", "")
        return api_key if api_key and api_key != "" else "DEMO_KEY"

    @property
    def timeout_ms(self) -> int:
        """Default per-request timeout in milliseconds."""
        return self._get_positive_int("timeout_ms")

    @property
    def iss_timeout_ms(self) -> int:
        """Timeout for the ISS position lookup."""
        return self._get_positive_int("iss_timeout_ms")

    @property
    def retries(self) -> int:
        """Extra attempts for rate-limited or unreachable upstreams."""
        return max(0, self._get_int("retries"))

    @property
    def retry_delay(self) -> float:
        try:
            return float(self._config.get("retry_delay", DEFAULT_CONFIG["retry_delay"]))
        except (TypeError, ValueError):
            return DEFAULT_CONFIG["retry_delay"]

    @property
    def log_level(self) -> str:
        return str(self._config.get("log_level", "INFO")).upper()

    @property
    def nasa_base_url(self) -> str:
        return str(self._config.get("nasa_base_url")).rstrip("/")

    @property
    def open_notify_base_url(self) -> str:
        return str(self._config.get("open_notify_base_url")).rstrip("/")

    def get_source_name(self, source_id: str) -> str:
        """Get display name of a data source."""
        return DATA_SOURCES[source_id]
