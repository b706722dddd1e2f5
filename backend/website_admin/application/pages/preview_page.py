from typing import Any, Optional, Tuple

from flask import current_app

from website_admin.extensions import db
from website_admin.models.page import Page
from website_admin.models.page_preview import PagePreview
from website_admin.models.page_version import PageVersion
from website_admin.domain.invariants.exceptions import PageNotFound
from website_admin.utils.audit import log_action
from website_admin.utils.transaction import transactional
from website_admin.utils.versioning import snapshot_page, snapshot_payload
from .get_page import get_or_create_page, load_page
from .save_draft import clean_draft_payload


def preview_url_for(slug: str, draft_id: Optional[str] = None) -> str:
    base = f"{current_app.config['PREVIEW_PATH'].rstrip('/')}/{slug}"
    return f"{base}?draftId={draft_id}" if draft_id else base


def create_preview(
    *,
    slug: str,
    data: Any,
    actor_name: Optional[str],
) -> Tuple[Page, str]:
    """
    Capture the submitted draft for a shareable preview link.
    Page status and workflow state are left untouched.
    """
    payload = clean_draft_payload(data or {})
    page = get_or_create_page(slug=slug)

    with transactional():
        preview = PagePreview()
        preview.page_id = page.id
        preview.snapshot = snapshot_payload(page, payload)
        preview.created_by = actor_name

        db.session.add(preview)
        db.session.flush()

        log_action(
            action="page.preview",
            entity_type="page",
            entity_id=page.id,
            payload={"slug": page.slug, "preview_id": preview.id},
        )

    return page, preview_url_for(page.slug, preview.id)


def resolve_preview(*, slug: str, draft_id: Optional[str] = None) -> dict:
    """
    Snapshot behind a preview link. ``draft_id`` may name a preview or a
    saved version; without it the latest saved draft is shown.
    """
    page = load_page(slug)

    if not draft_id:
        return snapshot_page(page)

    preview = PagePreview.query.filter_by(id=draft_id, page_id=page.id).first()
    if preview:
        return preview.snapshot

    version = PageVersion.query.filter_by(id=draft_id, page_id=page.id).first()
    if version:
        return version.snapshot

    raise PageNotFound(f"Preview '{draft_id}' not found for page '{slug}'")
