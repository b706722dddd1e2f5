# website_admin/normalizers/pagination.py
from typing import Callable, Any, List, Dict

from website_admin.utils.pagination import CursorMeta


def normalize_pagination(
    items: List[Any],
    normalize_fn: Callable[[Any], Dict[str, Any]],
    *,
    cursor: CursorMeta,
) -> Dict[str, Any]:
    """
    Normalize a cursor-paginated response.
    """
    return {
        "data": [normalize_fn(item) for item in items],
        "meta": {
            "has_more": cursor["has_more"],
            "next_cursor": cursor["next_cursor"],
        },
    }
