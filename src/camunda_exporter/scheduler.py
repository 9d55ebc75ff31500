# Camunda Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Periodic collection on a short and a long cadence."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .client import CamundaClient
from .collectors import (
    Collector,
    EngineMetricsCollector,
    HistoryIncidentCollector,
    NamedActivityCollector,
    ProcessDefinitionStatisticsCollector,
)
from .config import Settings
from .metrics import MetricsSink
from .timing import measure_time
from .utils import format_duration

logger = logging.getLogger(__name__)

SHORT_CYCLE = "short_cycle"
LONG_CYCLE = "long_cycle"


class ExporterScheduler:
    """Runs the collectors on two independent interval jobs.

    The short cycle covers incidents and process statistics, the long cycle
    the engine metrics. Both only share the sink.
    """

    def __init__(self, settings: Settings, sink: MetricsSink):
        self.settings = settings
        self.sink = sink
        self.scheduler = BackgroundScheduler(daemon=True)

    def short_collectors(self, client: CamundaClient) -> List[Collector]:
        collection = self.settings.collection
        collectors: List[Collector] = []
        if collection.fetch_history:
            collectors.append(HistoryIncidentCollector(client, self.sink, collection))
        if collection.fetch_runtime:
            collectors.append(ProcessDefinitionStatisticsCollector(client, self.sink, collection))
        if collection.fetch_history and collection.activities:
            collectors.append(NamedActivityCollector(client, self.sink, collection))
        return collectors

    def long_collectors(self, client: CamundaClient) -> List[Collector]:
        collection = self.settings.collection
        if collection.fetch_metrics:
            return [EngineMetricsCollector(client, self.sink, collection)]
        return []

    async def _run_cycle(
        self, cycle_name: str, build: Callable[[CamundaClient], List[Collector]]
    ) -> bool:
        async def run() -> bool:
            success = True
            async with CamundaClient(self.settings.server, self.sink) as client:
                for collector in build(client):
                    if not await measure_time(self.sink, collector.name, collector.collect):
                        success = False
            return success

        return await measure_time(self.sink, cycle_name, run)

    async def run_short_cycle(self) -> bool:
        """Collect incidents, process definition and named activity statistics."""
        return await self._run_cycle(SHORT_CYCLE, self.short_collectors)

    async def run_long_cycle(self) -> bool:
        """Collect engine metrics."""
        return await self._run_cycle(LONG_CYCLE, self.long_collectors)

    def run_initial(self) -> bool:
        """Run both cycles once, synchronously.

        Returns:
            False if any collection failed; the caller must not start serving.
        """
        logger.info("Fetching initial metrics")
        return asyncio.run(self.run_short_cycle()) and asyncio.run(self.run_long_cycle())

    def _run_cycle_sync(self, cycle: Callable[[], Awaitable[bool]], cycle_name: str) -> None:
        """Synchronous wrapper running one cycle in a fresh event loop."""
        try:
            if not asyncio.run(cycle()):
                logger.warning(f"{cycle_name} finished with errors")
        except Exception as e:
            logger.error(f"Exception in scheduled {cycle_name}: {e}", exc_info=True)

    def run_short_cycle_sync(self) -> None:
        self._run_cycle_sync(self.run_short_cycle, SHORT_CYCLE)

    def run_long_cycle_sync(self) -> None:
        self._run_cycle_sync(self.run_long_cycle, LONG_CYCLE)

    def start(self) -> None:
        """Start both interval jobs. The first ticks fire one interval from now."""
        short_interval = self.settings.scheduler.short_interval
        long_interval = self.settings.scheduler.long_interval
        logger.info(
            f"Scheduling short cycle every {format_duration(short_interval)} "
            f"and long cycle every {format_duration(long_interval)}"
        )
        self.scheduler.add_job(
            self.run_short_cycle_sync,
            trigger=IntervalTrigger(seconds=short_interval),
            id=SHORT_CYCLE,
            name="Incidents and process statistics",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.add_job(
            self.run_long_cycle_sync,
            trigger=IntervalTrigger(seconds=long_interval),
            id=LONG_CYCLE,
            name="Engine metrics",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info("Scheduler started.")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self.scheduler.running:
            logger.info("Shutting down scheduler.")
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped.")
        else:
            logger.info("Scheduler was not running.")
