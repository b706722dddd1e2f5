from datetime import timezone
from dateutil.parser import parse


def normalize_ts(ts):
    """
    Ensure datetime is timezone-aware.
    Defaults to UTC if naive (SQLite drops tzinfo on the way back).
    """
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def parse_ts(raw):
    """Parse an ISO 8601 / HTTP date string into an aware datetime."""
    return normalize_ts(parse(raw))


def to_iso(ts):
    ts = normalize_ts(ts)
    return ts.isoformat() if ts is not None else None
