from flask import g
from website_admin.extensions import db
from website_admin.models.audit_log import AuditLog
from typing import Optional


def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: dict | None = None,
    actor_id: Optional[str] = None,
):
    """
    Stage an immutable audit entry in the current session.
    The caller's transaction commits it.
    """
    if actor_id is None:
        user = getattr(g, "current_user", None)
        actor_id = user.id if user is not None else None

    log = AuditLog()
    log.actor_id = actor_id
    log.action = action
    log.entity_type = entity_type
    log.entity_id = str(entity_id) if entity_id is not None else "*"
    log.payload = payload or {}

    db.session.add(log)
    return log
