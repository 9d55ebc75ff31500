import logging
import re
from pathlib import Path
from typing import Optional


class SensitiveDataFilter(logging.Filter):
    """Filter to mask sensitive information in logs"""

    PATTERNS = {
        "url_credentials": r"(https?://)[^/\s:@]+:[^/\s@]+@",
        "password": r"(password|passwd|pwd)\s*[=:]\s*\S+",
        "authorization": r"(authorization\s*[=:]\s*basic)\s+[A-Za-z0-9+/=]+",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()

        # Mask user:password@ in URLs
        message = re.sub(self.PATTERNS["url_credentials"], r"\1[MASKED_CREDENTIAL]@", message)

        # Mask password=... pairs
        message = re.sub(
            self.PATTERNS["password"], r"\1=[MASKED_CREDENTIAL]", message, flags=re.IGNORECASE
        )

        # Mask basic-auth headers
        message = re.sub(
            self.PATTERNS["authorization"], r"\1 [MASKED_CREDENTIAL]", message, flags=re.IGNORECASE
        )

        record.msg = message
        record.args = None
        return True


def setup_logging(
    log_level: str = "INFO",
    mask_sensitive: bool = True,
    log_file: Optional[Path] = None,
):
    """Setup logging with optional sensitive data filtering"""

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        # Handler level filters also catch records propagated from child loggers
        if mask_sensitive:
            handler.addFilter(SensitiveDataFilter())
        root_logger.addHandler(handler)

    # APScheduler is chatty at INFO on every tick
    logging.getLogger("apscheduler").setLevel(
        max(root_logger.level, logging.WARNING)
    )
