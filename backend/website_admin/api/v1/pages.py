# website_admin/api/v1/pages.py
from flask import g, request, jsonify
from werkzeug.exceptions import BadRequest

from website_admin.application.pages.get_page import get_or_create_page, list_pages
from website_admin.application.pages.save_draft import save_draft
from website_admin.application.pages.preview_page import create_preview
from website_admin.application.pages.request_approval import request_approval
from website_admin.application.pages.review_page import approve_and_publish, reject_changes
from website_admin.application.pages.publish_page import publish_directly
from website_admin.application.pages.schedule_page import schedule_publish, cancel_schedule
from website_admin.application.pages.bulk_publish import bulk_publish_pages
from website_admin.application.pages.history import get_history, publishing_queue
from website_admin.domain.lifecycle import page as page_lifecycle
from website_admin.domain.permissions import (
    PAGES_APPROVE,
    PAGES_BULK_PUBLISH,
    PAGES_EDIT,
    PAGES_PUBLISH,
    PAGES_SCHEDULE,
    PAGES_VIEW,
)
from website_admin.normalizers.history import normalize_version
from website_admin.normalizers.page import normalize_page
from website_admin.normalizers.workflow import normalize_queue_item
from website_admin.utils.decorators import current_user_required, permissions_required
from website_admin.utils.optimistic_lock import enforce_optimistic_lock
from . import api_bp

PAGES = "/admin/website/pages"


def _body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def _optional_str(data, field):
    value = data.get(field)
    if value is not None and not isinstance(value, str):
        raise BadRequest(f"{field} must be a string")
    return value or None


def _actor():
    return g.current_user.label


# ------------------------
# Pages
# ------------------------

@api_bp.route(PAGES, methods=["GET"])
@current_user_required
@permissions_required(PAGES_VIEW)
def list_all_pages():
    status = request.args.get("status")
    if status and status not in page_lifecycle.PAGE_STATUSES:
        raise BadRequest(f"Unknown status: {status}")

    return jsonify({"data": [normalize_page(p) for p in list_pages(status=status)]}), 200


@api_bp.route(f"{PAGES}/publishing-queue", methods=["GET"])
@current_user_required
@permissions_required(PAGES_VIEW)
def get_publishing_queue():
    state = request.args.get("state")
    return jsonify({"data": [normalize_queue_item(w) for w in publishing_queue(state=state)]}), 200


@api_bp.route(f"{PAGES}/publish-all", methods=["POST"])
@current_user_required
@permissions_required(PAGES_BULK_PUBLISH)
def publish_all_pages():
    slugs = _body().get("slugs")
    if slugs is not None and not (isinstance(slugs, list) and all(isinstance(s, str) for s in slugs)):
        raise BadRequest("slugs must be a list of strings")

    result = bulk_publish_pages(actor_name=_actor(), slugs=slugs)
    return jsonify({"data": result}), 200


@api_bp.route(f"{PAGES}/<slug>", methods=["GET"])
@current_user_required
@permissions_required(PAGES_VIEW)
def get_page(slug):
    page = get_or_create_page(slug=slug)
    return jsonify({"data": normalize_page(page)}), 200


@api_bp.route(f"{PAGES}/<slug>", methods=["PUT"])
@current_user_required
@permissions_required(PAGES_EDIT)
def save_page_draft(slug):
    page = get_or_create_page(slug=slug)

    # Optimistic locking; absent header means last write wins
    enforce_optimistic_lock(page)

    page = save_draft(
        slug=slug,
        data=request.get_json(silent=True),
        actor_name=_actor(),
        page=page,
    )
    return jsonify({"data": normalize_page(page)}), 200


@api_bp.route(f"{PAGES}/<slug>/preview", methods=["POST"])
@current_user_required
@permissions_required(PAGES_VIEW)
def preview_page(slug):
    page, preview_url = create_preview(slug=slug, data=_body(), actor_name=_actor())
    return jsonify({"data": normalize_page(page, preview_url=preview_url)}), 200


@api_bp.route(f"{PAGES}/<slug>/history", methods=["GET"])
@current_user_required
@permissions_required(PAGES_VIEW)
def page_history(slug):
    return jsonify({"data": [normalize_version(v) for v in get_history(slug=slug)]}), 200


# ------------------------
# Workflow
# ------------------------

@api_bp.route(f"{PAGES}/<slug>/request-approval", methods=["POST"])
@current_user_required
@permissions_required(PAGES_EDIT)
def request_page_approval(slug):
    data = _body()
    page = request_approval(
        slug=slug,
        actor_name=_actor(),
        draft_id=_optional_str(data, "draft_id"),
        notes=_optional_str(data, "notes"),
        assigned_to=_optional_str(data, "assigned_to"),
    )
    return jsonify({"data": normalize_page(page)}), 200


@api_bp.route(f"{PAGES}/<slug>/approve", methods=["POST"])
@current_user_required
@permissions_required(PAGES_APPROVE)
def approve_page(slug):
    data = _body()
    page = approve_and_publish(
        slug=slug,
        actor_name=_actor(),
        draft_id=_optional_str(data, "draft_id"),
        notes=_optional_str(data, "notes"),
    )
    return jsonify({"data": normalize_page(page)}), 200


@api_bp.route(f"{PAGES}/<slug>/reject", methods=["POST"])
@current_user_required
@permissions_required(PAGES_APPROVE)
def reject_page(slug):
    page = reject_changes(slug=slug, actor_name=_actor(), notes=_optional_str(_body(), "notes"))
    return jsonify({"data": normalize_page(page)}), 200


@api_bp.route(f"{PAGES}/<slug>/publish", methods=["POST"])
@current_user_required
@permissions_required(PAGES_PUBLISH)
def publish_page(slug):
    page = publish_directly(slug=slug, actor_name=_actor(), notes=_optional_str(_body(), "notes"))
    return jsonify({"data": normalize_page(page)}), 200


@api_bp.route(f"{PAGES}/<slug>/schedule", methods=["POST"])
@current_user_required
@permissions_required(PAGES_SCHEDULE)
def schedule_page(slug):
    data = _body()
    page = schedule_publish(
        slug=slug,
        scheduled_for=data.get("scheduled_for"),
        actor_name=_actor(),
        notes=_optional_str(data, "notes"),
        draft_id=_optional_str(data, "draft_id"),
    )
    return jsonify({"data": normalize_page(page)}), 200


@api_bp.route(f"{PAGES}/<slug>/schedule", methods=["DELETE"])
@current_user_required
@permissions_required(PAGES_SCHEDULE, PAGES_APPROVE, PAGES_PUBLISH, any_of=True)
def cancel_page_schedule(slug):
    page = cancel_schedule(slug=slug, actor_name=_actor())
    return jsonify({"data": normalize_page(page)}), 200
