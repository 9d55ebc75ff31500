"""Prometheus measurement sink for the Camunda exporter.

Collectors never touch prometheus_client directly: they write through the
``MetricsSink`` protocol, and ``PrometheusSink`` implements it on top of a
dedicated ``CollectorRegistry``. Every series the exporter publishes is
declared once in ``METRIC_DEFINITIONS``.

Example:
    >>> sink = PrometheusSink()
    >>> sink.set_gauge(HISTORY_INCIDENTS, {"status": "open"}, 7)
    >>> start_exporter(sink, port=8080)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol, Tuple, Union

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)


# Metric names
HISTORY_INCIDENTS = "camunda_history_incidents_total"
ENGINE_METRICS = "camunda_metrics_total"
PROCESS_INSTANCES = "camunda_process_instances_total"
PROCESS_FAILED_JOBS = "camunda_process_failed_jobs_total"
PROCESS_ACTIVITY_INSTANCES = "camunda_process_activity_instances_total"
PROCESS_ACTIVITY_FAILED_JOBS = "camunda_process_activity_failed_jobs_total"
HISTORY_ACTIVITY_INSTANCES = "camunda_history_process_activity_instances_total"
HISTORY_ACTIVITY_CANCELED = "camunda_history_process_activity_canceled_total"
HISTORY_ACTIVITY_FINISHED = "camunda_history_process_activity_finished_total"
HISTORY_ACTIVITY_COMPLETE_SCOPE = "camunda_history_process_activity_complete_scope_total"
PROCESS_ACTIVITIES = "camunda_process_activities_total"
SCRAPE_ERRORS = "camunda_scrape_errors_total"
SCRAPE_DURATION = "camunda_scrape_duration_seconds"
REQUESTS = "camunda_requests_total"

_DEFINITION_LABELS = ("id", "definitionId", "definitionKey", "definitionVersion", "deploymentId", "tenantId")
_ACTIVITY_LABELS = ("activityId", "definitionKey", "definitionId", "definitionVersion")


@dataclass(frozen=True)
class MetricDefinition:
    name: str
    documentation: str
    labelnames: Tuple[str, ...]
    kind: str = "gauge"


METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    MetricDefinition(HISTORY_INCIDENTS, "Number of history incidents within a Camunda server", ("status",)),
    MetricDefinition(ENGINE_METRICS, "Camunda metrics", ("name",)),
    MetricDefinition(PROCESS_INSTANCES, "Number of instances of a specific Process", _DEFINITION_LABELS),
    MetricDefinition(PROCESS_FAILED_JOBS, "Number of failed jobs for a specific Process", _DEFINITION_LABELS),
    MetricDefinition(PROCESS_ACTIVITY_INSTANCES, "Number of instances for a specific activity", _ACTIVITY_LABELS),
    MetricDefinition(PROCESS_ACTIVITY_FAILED_JOBS, "Number of failed jobs for a specific activity", _ACTIVITY_LABELS),
    MetricDefinition(
        HISTORY_ACTIVITY_INSTANCES,
        "Number of instances of a specific activity in the history",
        _ACTIVITY_LABELS,
    ),
    MetricDefinition(
        HISTORY_ACTIVITY_CANCELED,
        "Number of canceled activities for a specific activity in the history",
        _ACTIVITY_LABELS,
    ),
    MetricDefinition(
        HISTORY_ACTIVITY_FINISHED,
        "Number of finished activities for a specific activity in the history",
        _ACTIVITY_LABELS,
    ),
    MetricDefinition(
        HISTORY_ACTIVITY_COMPLETE_SCOPE,
        "Number of CompleteScope activities for a specific activity in the history",
        _ACTIVITY_LABELS,
    ),
    MetricDefinition(
        PROCESS_ACTIVITIES,
        "Number of instances of a specific activity",
        ("activityId", "activityName", "definitionKey"),
    ),
    MetricDefinition(SCRAPE_ERRORS, "Number of errors while accessing the Camunda APIs.", ("name",), "counter"),
    MetricDefinition(SCRAPE_DURATION, "Duration of a scrape in seconds", ("name",)),
    MetricDefinition(REQUESTS, "Number of requests sent to the Camunda APIs, by HTTP status code.", ("code",), "counter"),
)


class MetricsSink(Protocol):
    """Write side of the measurement registry used by collectors."""

    def set_gauge(self, name: str, labels: Mapping[str, str], value: float) -> None:
        ...

    def increment_counter(self, name: str, labels: Mapping[str, str], amount: float = 1) -> None:
        ...


class PrometheusSink:
    """``MetricsSink`` backed by prometheus_client metrics.

    prometheus_client guards every child metric with its own lock, so the
    sink can be written from both scheduler jobs and read by the scrape
    handler without further synchronisation.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize the sink.

        Args:
            registry: Registry to register the metrics on. A private one is
                created when omitted, so several sinks can coexist in tests.
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Union[Gauge, Counter]] = {}
        for definition in METRIC_DEFINITIONS:
            metric_cls = Counter if definition.kind == "counter" else Gauge
            self._metrics[definition.name] = metric_cls(
                definition.name,
                definition.documentation,
                definition.labelnames,
                registry=self.registry,
            )

    def _metric(self, name: str, expected: type) -> Union[Gauge, Counter]:
        try:
            metric = self._metrics[name]
        except KeyError:
            raise KeyError(f"Unknown metric: {name}") from None
        if not isinstance(metric, expected):
            raise TypeError(f"{name} is not a {expected.__name__.lower()}")
        return metric

    def set_gauge(self, name: str, labels: Mapping[str, str], value: float) -> None:
        self._metric(name, Gauge).labels(**labels).set(value)

    def increment_counter(self, name: str, labels: Mapping[str, str], amount: float = 1) -> None:
        self._metric(name, Counter).labels(**labels).inc(amount)

    def get_value(self, name: str, labels: Mapping[str, str]) -> Optional[float]:
        """Read back one sample, as a scrape would see it."""
        return self.registry.get_sample_value(name, dict(labels))


def start_exporter(sink: PrometheusSink, port: int = 8080, host: str = "0.0.0.0"):
    """Start the Prometheus HTTP server exposing ``sink`` on ``/metrics``.

    Args:
        sink: Sink whose registry is exposed
        port: Port to listen on
        host: Address to bind
    """
    server, thread = start_http_server(port, addr=host, registry=sink.registry)
    logger.info(f"Prometheus exporter listening on {host}:{port}")
    return server, thread
