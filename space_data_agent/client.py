"""
HTTP fetcher for NASA and Open-Notify JSON feeds.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import asyncio
import json
import logging
import ssl
from typing import Any, Optional

import aiohttp
import certifi

from space_data_agent.config import Config
from space_data_agent.errors import FetchTimeoutError, NetworkError, ParseError

_LOG = logging.getLogger(__name__)

RETRY_STATUSES = {429, 500, 502, 503, 504}


class HttpFetcher:
    """aiohttp-backed fetcher with certificate verification and retries.

    Safe to call concurrently; all calls share one pooled session.
    """

    HEADERS = {
        'User-Agent': 'space-data-agent/1.0 (+https://api.nasa.gov)',
        'Accept': 'application/json, text/plain, */*',
        'Accept-Encoding': 'gzip, deflate',
    }

    def __init__(self, retries: int = 1, retry_delay: float = 1.0,
                 session: Optional[aiohttp.ClientSession] = None):
        """Initialize fetcher."""
        self._retries = retries
        self._retry_delay = retry_delay
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: Config) -> "HttpFetcher":
        return cls(retries=config.retries, retry_delay=config.retry_delay)

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists with SSL verification."""
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            ssl_context.check_hostname = True
            ssl_context.verify_mode = ssl.CERT_REQUIRED

            connector = aiohttp.TCPConnector(
                ssl=ssl_context,
                limit=10,
                limit_per_host=5,
                ttl_dns_cache=300,
                use_dns_cache=True,
                keepalive_timeout=30,
            )

            self._session = aiohttp.ClientSession(connector=connector, headers=self.HEADERS)
            self._owns_session = True
            _LOG.info("🌐 HTTP session created with SSL verification")

        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def fetch(self, resource: str, timeout_ms: int) -> Any:
        """
        Fetch ``resource`` and decode its body as JSON.

        :raises NetworkError: connection failure or non-200 status
        :raises FetchTimeoutError: ``timeout_ms`` elapsed
        :raises ParseError: body is not valid JSON
        """
        session = await self._ensure_session()
        timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)

        for attempt in range(self._retries + 1):
            last_attempt = attempt == self._retries
            _LOG.debug(f"Making request to {resource} (attempt {attempt + 1})")

            try:
                async with session.get(resource, timeout=timeout) as response:
                    _LOG.debug(f"Response: HTTP {response.status} from {resource}")

                    if response.status == 200:
                        return self._decode(resource, await response.text())

                    if response.status in RETRY_STATUSES and not last_attempt:
                        _LOG.warning(f"HTTP {response.status} from {resource}, retrying")
                        await asyncio.sleep(self._retry_delay)
                        continue

                    raise NetworkError(f"API error: {response.status}")

            except asyncio.TimeoutError as ex:
                raise FetchTimeoutError(f"timed out after {timeout_ms}ms") from ex
            except aiohttp.ClientConnectorError as ex:
                if not last_attempt:
                    _LOG.debug(f"Connection error for {resource}: {ex}")
                    await asyncio.sleep(self._retry_delay)
                    continue
                raise NetworkError(f"Fetch failed: {ex}") from ex
            except aiohttp.ClientError as ex:
                raise NetworkError(f"Fetch failed: {ex}") from ex

        raise NetworkError(f"Fetch failed: no response from {resource}")

    @staticmethod
    def _decode(resource: str, text: str) -> Any:
        # Some upstreams return JSON without a proper content-type
        try:
            return json.loads(text)
        except json.JSONDecodeError as ex:
            _LOG.debug(f"Invalid JSON from {resource}: {text[:100]}")
            raise ParseError(f"Invalid JSON from {resource}: {ex.msg}") from ex

