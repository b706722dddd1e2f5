from flask import request, abort
from website_admin.utils.timestamps import normalize_ts, parse_ts


def enforce_optimistic_lock(entity):
    """
    Enforces optimistic locking using the If-Unmodified-Since header.
    Raises 409 Conflict if the entity has been modified since.
    Without the header the save is last-write-wins.
    """
    client_ts = request.headers.get("If-Unmodified-Since")
    if not client_ts:
        return  # No optimistic lock requested

    try:
        client_ts = parse_ts(client_ts)
    except (ValueError, OverflowError):
        abort(400, description="Invalid If-Unmodified-Since header")

    server_ts = normalize_ts(entity.updated_at)

    if server_ts is not None and server_ts > client_ts:
        abort(
            409,
            description="Conflict detected. Page has been modified by another editor."
        )
