"""Collectors mapping Camunda REST resources to measurements."""

from .activities import ActivityStatisticsCollector, NamedActivityCollector
from .base import Collector
from .engine_metrics import EngineMetricsCollector
from .incidents import HistoryIncidentCollector
from .process_definitions import ProcessDefinitionStatisticsCollector

__all__ = [
    "Collector",
    "ActivityStatisticsCollector",
    "EngineMetricsCollector",
    "HistoryIncidentCollector",
    "NamedActivityCollector",
    "ProcessDefinitionStatisticsCollector",
]
