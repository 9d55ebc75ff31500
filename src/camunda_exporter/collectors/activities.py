"""Activity level statistics.

``ActivityStatisticsCollector`` reports the runtime (and optionally history)
statistics of every activity of one process definition.
``NamedActivityCollector`` counts history instances for the operator
supplied table of activities.
"""
from __future__ import annotations

from typing import List

from ..client import CamundaClient
from ..config import CollectionSettings
from ..exceptions import FetchError
from ..metrics import (
    HISTORY_ACTIVITY_CANCELED,
    HISTORY_ACTIVITY_COMPLETE_SCOPE,
    HISTORY_ACTIVITY_FINISHED,
    HISTORY_ACTIVITY_INSTANCES,
    PROCESS_ACTIVITIES,
    PROCESS_ACTIVITY_FAILED_JOBS,
    PROCESS_ACTIVITY_INSTANCES,
    MetricsSink,
)
from ..models import (
    ActivityCounter,
    ActivityStatistics,
    HistoryActivityStatistics,
    MetricCount,
    ProcessDefinition,
    activity_labels,
)
from .base import Collector

# https://docs.camunda.org/manual/latest/reference/rest/process-definition/get-activity-statistics/
ACTIVITY_STATISTICS_PATH = "/process-definition/{id}/statistics"
# https://docs.camunda.org/manual/latest/reference/rest/history/process-definition/get-historic-activity-statistics/
HISTORY_ACTIVITY_STATISTICS_PATH = "/history/process-definition/{id}/statistics"
# https://docs.camunda.org/manual/latest/reference/rest/history/activity-instance/get-activity-instance-query-count/
ACTIVITY_INSTANCE_COUNT_PATH = "/history/activity-instance/count"


class ActivityStatisticsCollector(Collector):
    """Per-activity statistics of a single process definition."""

    name = "activities"
    error_name = "fetchProcessDefinitionActivities"
    history_error_name = "fetchHistoryProcessDefinitionActivities"

    def __init__(
        self,
        client: CamundaClient,
        sink: MetricsSink,
        settings: CollectionSettings,
        definition: ProcessDefinition,
    ):
        super().__init__(client, sink, settings)
        self.definition = definition

    async def fetch_runtime(self) -> List[ActivityStatistics]:
        return await self.client.fetch_json(
            ACTIVITY_STATISTICS_PATH.format(id=self.definition.id),
            List[ActivityStatistics],
            params={"failedJobs": "true"},
        )

    async def fetch_history(self) -> List[HistoryActivityStatistics]:
        return await self.client.fetch_json(
            HISTORY_ACTIVITY_STATISTICS_PATH.format(id=self.definition.id),
            List[HistoryActivityStatistics],
            params={"canceled": "true", "finished": "true", "completeScope": "true"},
        )

    async def collect(self) -> bool:
        try:
            stats = await self.fetch_runtime()
        except FetchError as e:
            self.logger.warning(f"Could not fetch activities of {self.definition}: {e}")
            self.record_error()
            return False

        self.logger.debug("Found %d activities for process definition %s", len(stats), self.definition.id)
        for stat in stats:
            labels = activity_labels(stat.activity_id, self.definition)
            self.sink.set_gauge(PROCESS_ACTIVITY_INSTANCES, labels, stat.instances)
            self.sink.set_gauge(PROCESS_ACTIVITY_FAILED_JOBS, labels, stat.failed_jobs)

        if not self.settings.fetch_history:
            return True

        # Same as previously but in the history
        try:
            history_stats = await self.fetch_history()
        except FetchError as e:
            self.logger.warning(f"Could not fetch history activities of {self.definition}: {e}")
            self.record_error(self.history_error_name)
            return False

        self.logger.debug(
            "History: Found %d activities for process definition %s",
            len(history_stats),
            self.definition.id,
        )
        for stat in history_stats:
            labels = activity_labels(stat.activity_id, self.definition)
            self.sink.set_gauge(HISTORY_ACTIVITY_INSTANCES, labels, stat.instances)
            self.sink.set_gauge(HISTORY_ACTIVITY_CANCELED, labels, stat.canceled)
            self.sink.set_gauge(HISTORY_ACTIVITY_FINISHED, labels, stat.finished)
            self.sink.set_gauge(HISTORY_ACTIVITY_COMPLETE_SCOPE, labels, stat.complete_scope)
        return True


class NamedActivityCollector(Collector):
    """Publishes ``camunda_process_activities_total`` for configured activities."""

    name = "named_activities"
    error_name = "activities"

    async def fetch_count(self, activity: ActivityCounter) -> int:
        result = await self.client.fetch_json(
            ACTIVITY_INSTANCE_COUNT_PATH, MetricCount, params={"activityId": activity.id}
        )
        return result.count

    async def collect(self) -> bool:
        has_errors = False
        for activity in self.settings.activities:
            try:
                count = await self.fetch_count(activity)
            except FetchError as e:
                self.logger.warning(f"Could not fetch count of {activity.id} activities: {e}")
                self.record_error()
                has_errors = True
                continue
            self.logger.debug("%s (%s) = %d", activity.label, activity.id, count)
            self.sink.set_gauge(
                PROCESS_ACTIVITIES,
                {
                    "activityId": activity.id,
                    "activityName": activity.label,
                    "definitionKey": activity.group_key,
                },
                count,
            )
        return not has_errors
