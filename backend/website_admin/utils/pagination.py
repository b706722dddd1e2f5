# website_admin/utils/pagination.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple, TypedDict, Type, Any

from sqlalchemy.orm import Query
from sqlalchemy.sql import or_, and_
from werkzeug.exceptions import BadRequest

from website_admin.utils.timestamps import normalize_ts

MAX_PAGE_SIZE = 100


class CursorMeta(TypedDict):
    """
    Cursor pagination metadata returned next to list items.
    """
    has_more: bool
    next_cursor: Optional[str]


def encode_cursor(created_at: datetime, row_id: Any) -> str:
    """
    Encode a cursor from the boundary row's sort key.

    Format: ISO8601|<id>
    """
    if not isinstance(created_at, datetime) or row_id is None:
        raise ValueError("created_at and row_id are required to encode cursor")

    return f"{normalize_ts(created_at).isoformat()}|{row_id}"


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    """
    Decode a cursor into (created_at, id).

    Raises:
    - BadRequest if cursor format or timestamp is invalid
    """
    if not cursor or "|" not in cursor:
        raise BadRequest("Invalid cursor format")

    ts_str, row_id = cursor.split("|", 1)
    try:
        return normalize_ts(datetime.fromisoformat(ts_str)), row_id
    except ValueError as exc:
        raise BadRequest("Invalid cursor format") from exc


def parse_limit(raw, default: int = 20) -> int:
    try:
        limit = int(raw) if raw is not None else default
    except (TypeError, ValueError) as exc:
        raise BadRequest("Limit must be an integer") from exc

    if limit <= 0:
        raise BadRequest("Limit must be greater than zero")
    return min(limit, MAX_PAGE_SIZE)


def paginate_cursor(
    query: Query,
    *,
    model: Type[Any],
    limit: int,
    cursor: Optional[str] = None,
) -> tuple[list[Any], CursorMeta]:
    """
    Execute a newest-first cursor-paginated query.

    Ordering contract: ORDER BY created_at DESC, id DESC.
    Fetches limit + 1 rows to detect continuation.
    """
    if cursor:
        cursor_ts, cursor_id = decode_cursor(cursor)
        query = query.filter(
            or_(
                model.created_at < cursor_ts,
                and_(
                    model.created_at == cursor_ts,
                    model.id < cursor_id,
                ),
            )
        )

    rows = (
        query.order_by(model.created_at.desc(), model.id.desc())
        .limit(limit + 1)
        .all()
    )

    has_more = len(rows) > limit
    items = rows[:limit]

    next_cursor: Optional[str] = None
    if items and has_more:
        last = items[-1]
        next_cursor = encode_cursor(last.created_at, last.id)

    return items, {
        "has_more": has_more,
        "next_cursor": next_cursor,
    }
