"""Duration measurement around collection steps."""
from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, TypeVar

from .metrics import SCRAPE_DURATION, MetricsSink

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def measure_time(sink: MetricsSink, name: str, action: Callable[[], Awaitable[T]]) -> T:
    """Run ``action`` and record its wall-clock duration under ``name``.

    The result (or exception) of ``action`` is passed through unchanged.
    """
    logger.debug("------> Measuring %s", name)
    start = time.perf_counter()
    try:
        return await action()
    finally:
        elapsed = time.perf_counter() - start
        sink.set_gauge(SCRAPE_DURATION, {"name": name}, elapsed)
        logger.debug("======> Elapsed time for %s scrape: %.3fs", name, elapsed)
