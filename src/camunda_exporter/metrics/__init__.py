"""Prometheus metrics definitions and sink for the Camunda exporter."""

from .prometheus_exporter import (
    ENGINE_METRICS,
    HISTORY_ACTIVITY_CANCELED,
    HISTORY_ACTIVITY_COMPLETE_SCOPE,
    HISTORY_ACTIVITY_FINISHED,
    HISTORY_ACTIVITY_INSTANCES,
    HISTORY_INCIDENTS,
    METRIC_DEFINITIONS,
    PROCESS_ACTIVITIES,
    PROCESS_ACTIVITY_FAILED_JOBS,
    PROCESS_ACTIVITY_INSTANCES,
    PROCESS_FAILED_JOBS,
    PROCESS_INSTANCES,
    REQUESTS,
    SCRAPE_DURATION,
    SCRAPE_ERRORS,
    MetricDefinition,
    MetricsSink,
    PrometheusSink,
    start_exporter,
)

__all__ = [
    "ENGINE_METRICS",
    "HISTORY_ACTIVITY_CANCELED",
    "HISTORY_ACTIVITY_COMPLETE_SCOPE",
    "HISTORY_ACTIVITY_FINISHED",
    "HISTORY_ACTIVITY_INSTANCES",
    "HISTORY_INCIDENTS",
    "METRIC_DEFINITIONS",
    "PROCESS_ACTIVITIES",
    "PROCESS_ACTIVITY_FAILED_JOBS",
    "PROCESS_ACTIVITY_INSTANCES",
    "PROCESS_FAILED_JOBS",
    "PROCESS_INSTANCES",
    "REQUESTS",
    "SCRAPE_DURATION",
    "SCRAPE_ERRORS",
    "MetricDefinition",
    "MetricsSink",
    "PrometheusSink",
    "start_exporter",
]
