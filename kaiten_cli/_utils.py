"""
Shared pure-utility functions for kaiten-cli.

These helpers have no business logic and no side effects.
They are used across cards.py, models.py, download.py and the formatters.
"""

from datetime import datetime

from kaiten_cli.exceptions import CliError


def _first_present(d, keys, default=None):
    """Return the first truthy value among *keys* in dict *d*, else *default*."""
    if not isinstance(d, dict):
        return default
    for key in keys:
        value = d.get(key)
        if value:
            return value
    return default


def _as_list(value):
    """Treat a missing or non-list collection as empty."""
    return value if isinstance(value, list) else []


def _require(value, name):
    """Fail fast on a missing required argument."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise CliError(f"[ERROR] {name} is required")
    return value


def _parse_iso_timestamp(ts):
    """Parse an ISO timestamp from the API into a datetime."""
    if not ts:
        return None
    try:
        # Handle both "2026-01-15T10:30:00Z" and "2026-01-15T10:30:00.000Z"
        clean = str(ts).replace("Z", "+00:00")
        return datetime.fromisoformat(clean)
    except (ValueError, TypeError):
        return None


def _format_timestamp(ts):
    """Human-readable timestamp; falls back to the raw value if unparseable."""
    parsed = _parse_iso_timestamp(ts)
    if parsed is None:
        return str(ts) if ts else ""
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def _timestamp_sort_key(ts):
    """Sort key for timestamps; unparseable values sort as the oldest."""
    parsed = _parse_iso_timestamp(ts)
    if parsed is None:
        return (0, 0.0)
    return (1, parsed.timestamp())
