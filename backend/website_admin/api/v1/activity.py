from flask import request, jsonify
from website_admin.models.audit_log import AuditLog
from website_admin.domain.permissions import ANALYTICS_VIEW, PAGES_VIEW
from website_admin.normalizers.audit import normalize_audit_log
from website_admin.normalizers.pagination import normalize_pagination
from website_admin.utils.decorators import current_user_required, permissions_required
from website_admin.utils.pagination import paginate_cursor, parse_limit
from . import api_bp


@api_bp.route("/admin/website/activity", methods=["GET"])
@current_user_required
@permissions_required(ANALYTICS_VIEW, PAGES_VIEW, any_of=True)
def list_activity():
    limit = parse_limit(request.args.get("limit"))
    cursor = request.args.get("cursor")

    query = AuditLog.query

    # Optional filters
    if action := request.args.get("action"):
        query = query.filter(AuditLog.action == action)

    if entity_type := request.args.get("entity_type"):
        query = query.filter(AuditLog.entity_type == entity_type)

    if entity_id := request.args.get("entity_id"):
        query = query.filter(AuditLog.entity_id == entity_id)

    logs, meta = paginate_cursor(query, model=AuditLog, limit=limit, cursor=cursor)

    return jsonify(normalize_pagination(logs, normalize_audit_log, cursor=meta)), 200
