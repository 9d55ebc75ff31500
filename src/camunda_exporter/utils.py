"""Small helpers shared across the exporter."""
from __future__ import annotations

import re
from typing import Union

from .exceptions import ConfigError

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """Parse a duration into seconds.

    Accepts plain numbers (seconds) and Go-style strings such as ``30s``,
    ``15m`` or ``1h30m``.

    Raises:
        ConfigError: if the value cannot be parsed or is not positive.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip().lower()
        try:
            seconds = float(text)
        except ValueError:
            parts = _DURATION_PART_RE.findall(text)
            if not parts or "".join(n + u for n, u in parts) != text:
                raise ConfigError(f"Invalid duration: {value!r}") from None
            seconds = sum(float(n) * _UNIT_SECONDS[u] for n, u in parts)
    if seconds <= 0:
        raise ConfigError(f"Duration must be positive: {value!r}")
    return seconds


def format_duration(seconds: float) -> str:
    """Render seconds back into a compact ``1h2m3s`` form for log lines."""
    remaining = int(seconds)
    hours, remaining = divmod(remaining, 3600)
    minutes, secs = divmod(remaining, 60)
    out = ""
    if hours:
        out += f"{hours}h"
    if minutes:
        out += f"{minutes}m"
    if secs or not out:
        out += f"{secs}s"
    return out


def build_url(base_url: str, prefix: str, path: str) -> str:
    """Join the server URL, REST prefix and resource path.

    Absolute ``path`` values are returned unchanged.
    """
    if path.startswith(("http://", "https://")):
        return path
    segments = [base_url.rstrip("/")]
    if prefix.strip("/"):
        segments.append(prefix.strip("/"))
    segments.append(path.lstrip("/"))
    return "/".join(segments)
