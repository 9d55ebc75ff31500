"""Base class for the Camunda collectors.

A collector fetches one logical resource from the REST API and maps it into
measurements on a ``MetricsSink``. Transport failures never escape
``collect()``: they are logged, counted on ``camunda_scrape_errors_total``
and reported to the scheduler as a ``False`` return value.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..client import CamundaClient
from ..config import CollectionSettings
from ..metrics import SCRAPE_ERRORS, MetricsSink


class Collector(ABC):
    """Base class for collectors.

    Attributes:
        name: Step name used for the duration gauge
        error_name: Value of the ``name`` label on the error counter
    """

    name: str = "collector"
    error_name: str = "collector"

    def __init__(
        self,
        client: CamundaClient,
        sink: MetricsSink,
        settings: CollectionSettings,
    ):
        self.client = client
        self.sink = sink
        self.settings = settings
        self.logger = logging.getLogger(type(self).__module__)

    @abstractmethod
    async def collect(self) -> bool:
        """Fetch and publish the resource.

        Returns:
            True if every fetch succeeded
        """
        pass

    def record_error(self, error_name: str | None = None) -> None:
        """Increment the scrape error counter."""
        self.sink.increment_counter(SCRAPE_ERRORS, {"name": error_name or self.error_name})
