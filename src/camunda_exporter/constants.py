from pathlib import Path

CONFIG_FILE_NAME = "config.yaml"
DEFAULT_CONFIG_FILE = Path(CONFIG_FILE_NAME)

ENV_PREFIX = "CAMUNDA_EXPORTER_"

# REST API defaults
DEFAULT_REST_PREFIX = "rest"
REQUEST_TIMEOUT_SECONDS = 5.0

# Scheduling defaults (seconds)
DEFAULT_SHORT_INTERVAL = 30
DEFAULT_LONG_INTERVAL = 15 * 60

# Exposition defaults
DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"

DEFAULT_INCIDENT_STATUSES = ("open", "deleted", "resolved")

# The metrics endpoint returns at most this many records per timestamp bucket
METRICS_BATCH_SIZE = 100

# Exit codes
EXIT_MISSING_SERVER = 1
EXIT_INITIAL_COLLECTION_FAILED = 2
