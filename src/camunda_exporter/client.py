"""
REST transport for the Camunda exporter.

Issues authenticated JSON GET requests against the Camunda REST API and
decodes the bodies into the typed records of ``camunda_exporter.models``.
Failed requests are not retried; the next scheduled tick fetches again.
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, Mapping, Optional

import aiohttp
from aiohttp import ClientTimeout
from pydantic import TypeAdapter, ValidationError

from .config import ServerSettings
from .exceptions import FetchError
from .metrics import REQUESTS, MetricsSink
from .utils import build_url

logger = logging.getLogger(__name__)

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "camunda-exporter/1.0",
}


@lru_cache(maxsize=None)
def _adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


class CamundaClient:
    """Async client for one collection cycle.

    Use as an async context manager; the underlying ``aiohttp`` session is
    closed on exit unless it was supplied by the caller. Basic auth is set on
    the owned session; a caller-supplied session must carry its own.

    Example:
        >>> async with CamundaClient(settings.server, sink) as client:
        ...     count = await client.fetch_json("/history/incident/count", MetricCount)
    """

    def __init__(
        self,
        settings: ServerSettings,
        sink: MetricsSink,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        if not settings.url:
            raise ValueError("A Camunda server URL is required")
        self.settings = settings
        self.sink = sink
        self.timeout = ClientTimeout(total=settings.timeout)
        self.auth = (
            aiohttp.BasicAuth(settings.user, settings.password or "")
            if settings.user
            else None
        )
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "CamundaClient":
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout, auth=self.auth)
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def url_for(self, path: str) -> str:
        """Resolve ``path`` against the server URL and REST prefix."""
        return build_url(self.settings.url, self.settings.rest_prefix, path)

    async def fetch_json(
        self,
        path: str,
        shape: Any,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        GET ``path`` and decode the JSON body into ``shape``.

        Args:
            path: Resource path below the REST prefix, or an absolute URL
            shape: Pydantic model (or ``List[Model]``) describing the body
            params: Query string parameters

        Returns:
            The validated response

        Raises:
            FetchError: on connection errors, timeouts, any status other than
                200, malformed JSON or an unexpected body shape
        """
        if self._session is None:
            raise RuntimeError("CamundaClient must be used as an async context manager")

        url = self.url_for(path)
        query = {k: str(v) for k, v in (params or {}).items()}

        try:
            async with self._session.get(
                url,
                params=query,
                headers=HEADERS,
                timeout=self.timeout,
            ) as response:
                self.sink.increment_counter(REQUESTS, {"code": str(response.status)})
                logger.debug("%s -> %d", response.url, response.status)

                if response.status != 200:
                    raise FetchError(f"{response.url} => {response.status}")

                data = await response.json(content_type=None)

        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout after {self.settings.timeout} seconds on {url}") from e

        except aiohttp.ClientError as e:
            raise FetchError(f"HTTP error on {url}: {e}") from e

        except ValueError as e:
            raise FetchError(f"Malformed JSON from {url}: {e}") from e

        try:
            return _adapter(shape).validate_python(data)
        except ValidationError as e:
            raise FetchError(
                f"Unexpected response from {url}: {e.error_count()} validation error(s)"
            ) from e
