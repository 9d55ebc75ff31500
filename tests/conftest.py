"""Test configuration and helper fixtures."""

from __future__ import annotations

import asyncio
import inspect
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from camunda_exporter.config import Settings

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@pytest.hookimpl
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test-suite."""

    config.addinivalue_line("markers", "asyncio: run the test inside an event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute ``async def`` tests marked with ``@pytest.mark.asyncio``."""

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    fixture_names = pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
    call_kwargs = {name: pyfuncitem.funcargs[name] for name in fixture_names}
    asyncio.run(test_func(**call_kwargs))
    return True


LabelKey = Tuple[str, Tuple[Tuple[str, str], ...]]


def _key(name: str, labels: Mapping[str, str]) -> LabelKey:
    return name, tuple(sorted(labels.items()))


class RecordingSink:
    """In-memory ``MetricsSink`` that remembers every write."""

    def __init__(self) -> None:
        self.gauges: Dict[LabelKey, float] = {}
        self.counters: Dict[LabelKey, float] = {}

    def set_gauge(self, name: str, labels: Mapping[str, str], value: float) -> None:
        self.gauges[_key(name, labels)] = value

    def increment_counter(self, name: str, labels: Mapping[str, str], amount: float = 1) -> None:
        key = _key(name, labels)
        self.counters[key] = self.counters.get(key, 0) + amount

    def gauge(self, name: str, /, **labels: str) -> Optional[float]:
        return self.gauges.get(_key(name, labels))

    def counter(self, name: str, /, **labels: str) -> float:
        return self.counters.get(_key(name, labels), 0)

    def series(self, name: str) -> List[Dict[str, str]]:
        """Label sets written for ``name``."""
        return [dict(labels) for metric, labels in self.gauges if metric == name]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


def json_handler(payload: Any, status: int = 200) -> Handler:
    """Handler answering every request with ``payload``."""

    async def handler(request: web.Request) -> web.Response:
        return web.json_response(payload, status=status)

    return handler


@asynccontextmanager
async def run_camunda(routes: Mapping[str, Handler], prefix: str = "rest") -> AsyncIterator[str]:
    """Serve ``routes`` below ``/<prefix>`` and yield the server base URL."""

    app = web.Application()
    for path, handler in routes.items():
        app.router.add_get(f"/{prefix}{path}" if prefix else path, handler)
    server = TestServer(app)
    await server.start_server()
    try:
        yield f"http://{server.host}:{server.port}"
    finally:
        await server.close()


@pytest.fixture
def camunda() -> Callable[..., Any]:
    """Factory for a mock Camunda REST API, used as ``async with camunda(routes) as url``."""

    return run_camunda


def make_settings(url: str | None = "http://camunda.test", **collection: Any) -> Settings:
    """Settings pointing at ``url`` with the given collection toggles."""

    return Settings(server={"url": url}, collection=collection)
