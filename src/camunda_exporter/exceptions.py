# Camunda Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Custom exception types for the Camunda exporter."""


class CamundaExporterError(Exception):
    """Base exception class for all application-specific errors."""

    pass


class FetchError(CamundaExporterError):
    """Raised when a REST call fails: connection, timeout, status or body decoding."""

    pass


class ConfigError(CamundaExporterError):
    """Raised for configuration-related errors."""

    pass


class InitialCollectionError(CamundaExporterError):
    """Raised when the mandatory collection before serving does not fully succeed."""

    pass
