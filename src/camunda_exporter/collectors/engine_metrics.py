"""Engine metrics from the most recent reporting interval."""
from __future__ import annotations

from typing import List

from ..constants import METRICS_BATCH_SIZE
from ..exceptions import FetchError
from ..metrics import ENGINE_METRICS
from ..models import EngineMetric
from .base import Collector

# https://docs.camunda.org/manual/latest/reference/rest/metrics/get-metrics-interval/
METRICS_PATH = "/metrics"


class EngineMetricsCollector(Collector):
    """Publishes ``camunda_metrics_total{name}``.

    The engine aggregates metrics in timestamped buckets. A first request for
    a single record finds the most recent bucket; a second one fetches every
    metric of that bucket.
    """

    name = "metrics"
    error_name = "metrics"

    async def fetch_metrics(self, max_results: int, start_date: str | None = None) -> List[EngineMetric]:
        params = {"maxResults": max_results}
        if start_date:
            params["startDate"] = start_date
        return await self.client.fetch_json(METRICS_PATH, List[EngineMetric], params=params)

    async def collect(self) -> bool:
        try:
            probe = await self.fetch_metrics(1)
            if not probe:
                self.logger.debug("No engine metrics reported yet")
                return True
            latest = max(metric.timestamp for metric in probe)
            metrics = await self.fetch_metrics(METRICS_BATCH_SIZE, latest)
        except FetchError as e:
            self.logger.warning(f"Could not fetch engine metrics: {e}")
            self.record_error()
            return False

        self.logger.debug("%d metrics", len(metrics))
        for metric in metrics:
            self.sink.set_gauge(ENGINE_METRICS, {"name": metric.name}, metric.value)
            self.logger.debug("metric %s %s = %d", metric.timestamp, metric.name, metric.value)
        return True
