from __future__ import annotations

import re
from datetime import datetime, timezone

from .errors import ConfigError

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"
TIMESTAMP_HINT = "YYYY-MM-DD HH:MM:SS"

_TIMESTAMP_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")


def parse_cutoff(text: str) -> int:
    """
    Parse a cutoff timestamp (UTC) into unix seconds.

    Only the literal "YYYY-MM-DD HH:MM:SS" shape is accepted; strptime alone
    would also take single-digit fields.
    """
    if not isinstance(text, str) or not _TIMESTAMP_RE.fullmatch(text):
        raise ConfigError(
            code="config.timestamp_invalid",
            message=f"Bad datetime format: expected {TIMESTAMP_HINT}, got {text!r}",
            data={"value": text, "expected": TIMESTAMP_HINT},
        )
    try:
        dt = datetime.strptime(text, TIMESTAMP_FMT)
    except ValueError as e:
        raise ConfigError(
            code="config.timestamp_invalid",
            message=f"Bad datetime format: expected {TIMESTAMP_HINT}, got {text!r}",
            data={"value": text, "expected": TIMESTAMP_HINT},
        ) from e
    return int(dt.replace(tzinfo=timezone.utc).timestamp())


def format_cutoff(seconds: int) -> str:
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime(TIMESTAMP_FMT)
