# website_admin/normalizers/audit.py
from __future__ import annotations

from typing import Any, Dict

from website_admin.models.audit_log import AuditLog
from website_admin.utils.timestamps import to_iso


def normalize_audit_log(log: AuditLog) -> Dict[str, Any]:
    """
    One activity feed entry.

    ``slug`` is lifted out of the payload so the feed can link to the page
    without reading the payload; bulk and sync entries have none.
    """
    payload = log.payload or {}

    return {
        "id": log.id,
        "actor_id": log.actor_id,
        "action": log.action,
        "entity_type": log.entity_type,
        "entity_id": log.entity_id,
        "slug": payload.get("slug"),
        "payload": payload,
        "created_at": to_iso(log.created_at),
    }
