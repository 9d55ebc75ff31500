# Camunda Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Main daemon: initial collection, scheduled collection and the /metrics endpoint."""
from __future__ import annotations

import logging
import signal
import threading
from typing import Optional

from .config import Settings
from .exceptions import InitialCollectionError
from .metrics import PrometheusSink, start_exporter
from .scheduler import ExporterScheduler

logger = logging.getLogger(__name__)


class CamundaExporterDaemon:
    """Main daemon managing the scheduler and the exposition server."""

    def __init__(self, settings: Settings, sink: Optional[PrometheusSink] = None):
        self.settings = settings
        self.sink = sink if sink is not None else PrometheusSink()
        self.scheduler = ExporterScheduler(settings, self.sink)
        self.server = None
        self.running = False
        self._stopped = threading.Event()

    def start(self) -> None:
        """Run the initial collection, then serve until ``stop()`` is called."""
        logger.info("Starting Camunda exporter for %s", self.settings.server.url)

        collection = self.settings.collection
        if not (collection.fetch_runtime or collection.fetch_history or collection.fetch_metrics):
            logger.warning("All collections are disabled; only exporter metrics will be served")

        if not self.scheduler.run_initial():
            raise InitialCollectionError("Could not fetch all the stats")

        # Setup signal handlers
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        logger.info("Starting the tickers")
        self.scheduler.start()

        self.server, _ = start_exporter(
            self.sink, port=self.settings.exporter.port, host=self.settings.exporter.host
        )
        self.running = True

        # Returns once stop() runs, usually from the signal handler
        self._stopped.wait()
        logger.info("Camunda exporter stopped")

    def stop(self) -> None:
        """Stops the scheduler and the exposition server."""
        logger.info("Shutting down Camunda exporter...")
        self.scheduler.stop()
        if self.server is not None:
            self.server.shutdown()
            self.server = None
        self.running = False
        self._stopped.set()

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop()
