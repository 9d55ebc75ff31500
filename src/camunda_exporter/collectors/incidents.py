"""History incident counts by status."""
from __future__ import annotations

from ..exceptions import FetchError
from ..metrics import HISTORY_INCIDENTS
from ..models import MetricCount
from .base import Collector

# https://docs.camunda.org/manual/latest/reference/rest/history/incident/get-incident-query-count/
INCIDENT_COUNT_PATH = "/history/incident/count"


class HistoryIncidentCollector(Collector):
    """Publishes ``camunda_history_incidents_total{status}``.

    A failing status does not stop the remaining ones.
    """

    name = "incidents"
    error_name = "incidents"

    async def fetch_count(self, status: str) -> int:
        result = await self.client.fetch_json(
            INCIDENT_COUNT_PATH, MetricCount, params={status: "true"}
        )
        return result.count

    async def collect(self) -> bool:
        has_errors = False
        for status in self.settings.incident_statuses:
            try:
                count = await self.fetch_count(status)
            except FetchError as e:
                self.logger.warning(f"Could not fetch count of {status} incidents: {e}")
                self.record_error()
                has_errors = True
                continue
            self.logger.debug("%d %s incidents", count, status)
            self.sink.set_gauge(HISTORY_INCIDENTS, {"status": status}, count)

        if has_errors:
            self.logger.error("Could not process all incident statuses")
        return not has_errors
