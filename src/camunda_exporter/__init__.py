"""
Camunda Exporter - Prometheus metrics for the Camunda workflow engine

This package polls the Camunda REST API for incidents, process and activity
statistics and engine metrics, and republishes them for Prometheus.
"""

__version__ = "1.0.0"
__author__ = "Amirreza 'Farnam' Taheri"

# Import key components to be available at the package level
from .config import Settings, load_config
from .metrics import MetricsSink, PrometheusSink
from .scheduler import ExporterScheduler

# Define the public API of the package
__all__ = [
    "ExporterScheduler",
    "MetricsSink",
    "PrometheusSink",
    "Settings",
    "load_config",
    "__version__",
    "__author__",
]
