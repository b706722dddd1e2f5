from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from website_admin.utils.timestamps import parse_ts


class EventMeta(NamedTuple):
    label: str
    icon: str
    tone: str


EVENT_META: Dict[str, EventMeta] = {
    "submitted": EventMeta("Submitted for review", "Send", "blue"),
    "reviewed": EventMeta("Reviewed", "Eye", "muted"),
    "approved": EventMeta("Approved", "CheckCircle2", "emerald"),
    "rejected": EventMeta("Changes requested", "FileWarning", "red"),
    "published": EventMeta("Published", "CheckCircle2", "emerald"),
    "scheduled": EventMeta("Scheduled", "CalendarClock", "purple"),
    "cancelled": EventMeta("Schedule cancelled", "TimerReset", "amber"),
}

FALLBACK_ICON = "Hourglass"
FALLBACK_TONE = "muted"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def event_meta(event_type: Optional[str]) -> EventMeta:
    """Unknown event types still render, labelled with their raw type."""
    meta = EVENT_META.get(event_type or "")
    if meta is not None:
        return meta
    return EventMeta(event_type or "unknown", FALLBACK_ICON, FALLBACK_TONE)


@dataclass(frozen=True)
class TimelineEntry:
    type: str
    label: str
    icon: str
    tone: str
    timestamp: Optional[datetime]
    actor: Optional[str] = None
    notes: Optional[str] = None


def _when(raw) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return parse_ts(raw)
    except (TypeError, ValueError, OverflowError):
        return None


def timeline(events: Iterable[Dict[str, Any]]) -> List[TimelineEntry]:
    """Workflow events, oldest first. Read only."""
    entries = []
    for event in events or []:
        meta = event_meta(event.get("type"))
        entries.append(TimelineEntry(
            type=event.get("type"),
            label=meta.label,
            icon=meta.icon,
            tone=meta.tone,
            timestamp=_when(event.get("timestamp")),
            actor=event.get("actor"),
            notes=event.get("notes"),
        ))
    # Stable: events sharing a timestamp keep server order
    return sorted(entries, key=lambda e: e.timestamp or _EPOCH)


def newest_first(versions: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(versions or [], key=lambda v: v.get("version") or 0, reverse=True)
