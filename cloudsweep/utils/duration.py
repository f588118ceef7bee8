"""Duration parsing for the --timeout option."""

from __future__ import annotations

import re
from typing import Optional

from ..errors import ConfigError

_UNITS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")


def parse_duration(value: Optional[str]) -> Optional[float]:
    """Parse a duration such as "30s", "5m", "1.5h" or "1h30m".

    Args:
        value: Duration string; empty, None or a negative number means no limit

    Returns:
        Duration in seconds, or None for no limit

    Raises:
        ConfigError: If the value cannot be parsed
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if re.fullmatch(r"-\d+(\.\d+)?[a-z]*", value):
        return None

    position = 0
    seconds = 0.0
    for match in _PART.finditer(value):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(value):
        raise ConfigError(f"Invalid duration: {value} (examples: 30s, 5m, 1.5h)")
    return seconds
