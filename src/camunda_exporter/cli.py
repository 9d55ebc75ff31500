"""Command-line interface for the Camunda exporter.

Flags override the YAML file and ``CAMUNDA_EXPORTER_*`` environment
variables. Exit codes: 1 when no server URL is configured (or the
configuration is invalid), 2 when the initial collection fails.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

from . import __version__
from .config import load_config
from .constants import EXIT_INITIAL_COLLECTION_FAILED, EXIT_MISSING_SERVER
from .exceptions import ConfigError, InitialCollectionError
from .logging_config import setup_logging
from .main_daemon import CamundaExporterDaemon
from .utils import parse_duration

logger = logging.getLogger(__name__)


class DurationParamType(click.ParamType):
    """Go-style durations (``30s``, ``15m``, ``1h30m``) or plain seconds."""

    name = "duration"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> float:
        if isinstance(value, float):
            return value
        try:
            return parse_duration(value)
        except ConfigError as e:
            self.fail(str(e), param, ctx)


DURATION = DurationParamType()


def _build_overrides(**groups: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Keep only the flags that were given, grouped by settings section."""
    overrides: Dict[str, Dict[str, Any]] = {}
    for group, values in groups.items():
        given = {k: v for k, v in values.items() if v is not None}
        if given:
            overrides[group] = given
    return overrides


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("--server", "server", help="The Camunda server URI.", type=str)
@click.option(
    "--restPrefix",
    "rest_prefix",
    help="REST API path prefix [default: rest].",
    type=str,
)
@click.option("--port", "port", help="The http port the server will listen on [default: 8080].", type=int)
@click.option("--host", "host", help="The address the server will bind to [default: 0.0.0.0].", type=str)
@click.option(
    "--shortInterval",
    "short_interval",
    help="The interval between 2 incidents scrapes [default: 30s].",
    type=DURATION,
)
@click.option(
    "--longInterval",
    "long_interval",
    help="The interval between 2 metrics scrapes [default: 15m].",
    type=DURATION,
)
@click.option("--verbose", "verbose", is_flag=True, default=False, help="Log every collected value.")
@click.option(
    "--fetch-runtime/--no-fetch-runtime",
    "fetch_runtime",
    default=None,
    help="Collect process definition and activity runtime statistics.",
)
@click.option(
    "--fetch-history/--no-fetch-history",
    "fetch_history",
    default=None,
    help="Collect history incidents and history activity statistics.",
)
@click.option(
    "--fetch-metrics/--no-fetch-metrics",
    "fetch_metrics",
    default=None,
    help="Collect engine metrics.",
)
@click.option("--user", "user", help="Basic-auth user.", type=str)
@click.option("--password", "password", help="Basic-auth password.", type=str)
@click.option(
    "--config",
    "config_file",
    help="Path to a YAML configuration file.",
    type=click.Path(exists=True, dir_okay=False),
)
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Root log level [default: INFO].",
)
@click.option("--log-file", "log_file", type=click.Path(dir_okay=False), help="Also log to this file.")
@click.pass_context
def cli(
    ctx: click.Context,
    server: str | None,
    rest_prefix: str | None,
    port: int | None,
    host: str | None,
    short_interval: float | None,
    long_interval: float | None,
    verbose: bool,
    fetch_runtime: bool | None,
    fetch_history: bool | None,
    fetch_metrics: bool | None,
    user: str | None,
    password: str | None,
    config_file: str | None,
    log_level: str | None,
    log_file: str | None,
):
    """
    Camunda exporter: publish Camunda REST API statistics for Prometheus.
    """
    overrides = _build_overrides(
        server={"url": server, "rest_prefix": rest_prefix, "user": user, "password": password},
        exporter={"port": port, "host": host},
        scheduler={"short_interval": short_interval, "long_interval": long_interval},
        collection={
            "fetch_runtime": fetch_runtime,
            "fetch_history": fetch_history,
            "fetch_metrics": fetch_metrics,
        },
        logging={"verbose": verbose or None, "level": log_level, "file": log_file},
    )

    try:
        settings = load_config(Path(config_file) if config_file else None, **overrides)
    except (ConfigError, ValidationError) as e:
        click.echo(f"✗ Invalid configuration: {e}", err=True)
        sys.exit(EXIT_MISSING_SERVER)

    if not settings.server.url:
        click.echo("You must specify the Camunda server URI!", err=True)
        click.echo()
        click.echo(ctx.get_help())
        sys.exit(EXIT_MISSING_SERVER)

    setup_logging(
        "DEBUG" if settings.logging.verbose else settings.logging.level,
        settings.logging.mask_sensitive,
        settings.logging.file,
    )

    daemon = CamundaExporterDaemon(settings)
    try:
        daemon.start()
    except InitialCollectionError as e:
        logger.error(f"{e}. Exiting now!")
        sys.exit(EXIT_INITIAL_COLLECTION_FAILED)


def main():
    """Console script entry point."""
    cli()
