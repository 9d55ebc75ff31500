"""Process definition statistics, fanned out to per-activity statistics."""
from __future__ import annotations

from typing import List

from ..exceptions import FetchError
from ..metrics import PROCESS_FAILED_JOBS, PROCESS_INSTANCES
from ..models import ProcessDefinitionStatistics
from .activities import ActivityStatisticsCollector
from .base import Collector

# https://docs.camunda.org/manual/latest/reference/rest/process-definition/get-statistics/
STATISTICS_PATH = "/process-definition/statistics"


class ProcessDefinitionStatisticsCollector(Collector):
    """Publishes instance and failed job gauges per process definition.

    Suspended definitions are skipped entirely. Each remaining definition is
    followed by an ``ActivityStatisticsCollector`` run; a definition whose
    activities cannot be fetched does not prevent the next one from being
    collected.
    """

    name = "process_definitions"
    error_name = "fetchProcessDefinitionStatistics"

    async def fetch_statistics(self) -> List[ProcessDefinitionStatistics]:
        return await self.client.fetch_json(
            STATISTICS_PATH, List[ProcessDefinitionStatistics], params={"failedJobs": "true"}
        )

    async def collect(self) -> bool:
        try:
            stats = await self.fetch_statistics()
        except FetchError as e:
            self.logger.warning(f"Could not fetch process definition statistics: {e}")
            self.record_error()
            return False

        self.logger.debug("Found %d process definition stats", len(stats))
        failed = []
        for stat in stats:
            definition = stat.definition
            if definition.suspended:
                self.logger.debug("Skipping suspended process definition %s", definition)
                continue

            labels = stat.labels()
            self.sink.set_gauge(PROCESS_INSTANCES, labels, stat.instances)
            self.sink.set_gauge(PROCESS_FAILED_JOBS, labels, stat.failed_jobs)
            self.logger.debug("%s: %d instances / %d failedJobs", definition, stat.instances, stat.failed_jobs)

            activities = ActivityStatisticsCollector(self.client, self.sink, self.settings, definition)
            if not await activities.collect():
                failed.append(str(definition))

        if failed:
            self.logger.error(f"Could not collect activities of {', '.join(failed)}")
        return not failed
