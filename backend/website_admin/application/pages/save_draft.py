# website_admin/application/pages/save_draft.py
from typing import Any, Dict, Optional

from website_admin.extensions import db
from website_admin.models.content_block import ContentBlock
from website_admin.models.page import Page
from website_admin.models.base import utcnow
from website_admin.domain.content import BlockType, LOCALES
from website_admin.domain.invariants.exceptions import InvariantViolation
from website_admin.domain.invariants.page import assert_page, assert_page_payload
from website_admin.domain.lifecycle import page as page_lifecycle
from website_admin.utils.audit import log_action
from website_admin.utils.transaction import transactional
from .get_page import get_or_create_page
from .publishing import ensure_workflow, next_page_status, record_version

DRAFT_FIELDS = ("title_en", "title_ar", "content_blocks", "status", "notes")


def clean_draft_payload(data: Any) -> Dict[str, Any]:
    """
    Keep the draft fields a client may send and tidy the titles.
    """
    if not isinstance(data, dict):
        raise InvariantViolation("Request body must be a JSON object.")

    payload = {field: data[field] for field in DRAFT_FIELDS if field in data}

    for field in ("title_en", "title_ar"):
        if field not in payload:
            continue
        value = payload[field]
        if value is not None and not isinstance(value, str):
            raise InvariantViolation(f"{field} must be a string.")
        payload[field] = (value or "").strip() or None

    notes = payload.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise InvariantViolation("notes must be a string.")

    assert_page_payload(payload)
    return payload


def _replace_blocks(page: Page, blocks) -> None:
    # Flush removals first; the (page_id, key) constraint would reject
    # re-inserted keys otherwise
    page.blocks = []
    db.session.flush()

    for position, data in enumerate(blocks):
        value = data.get("value") or {}
        block = ContentBlock()
        block.key = data["key"].strip()
        block.type = BlockType.coerce(data.get("type")).value
        block.position = position
        block.value = {locale: value.get(locale) for locale in LOCALES}
        page.blocks.append(block)


def save_draft(
    *,
    slug: str,
    data: Any,
    actor_name: Optional[str],
    actor_id: Optional[str] = None,
    page: Optional[Page] = None,
) -> Page:
    """
    Persist a draft and record a new version.

    Responsibilities:
    - payload validation
    - block replacement in editorial order
    - version creation
    - workflow bookkeeping (draft id, unpublished changes)
    - audit logging
    """
    payload = clean_draft_payload(data)

    if page is None:
        page = get_or_create_page(slug=slug, actor_id=actor_id)

    with transactional():
        if "title_en" in payload:
            page.title_en = payload["title_en"]
        if "title_ar" in payload:
            page.title_ar = payload["title_ar"]

        if payload.get("content_blocks") is not None:
            _replace_blocks(page, payload["content_blocks"])

        page.status = next_page_status(page, payload.get("status") or page_lifecycle.DRAFT)
        page.draft_updated_at = utcnow()
        page.last_edited_by = actor_name

        assert_page(page)

        version = record_version(
            page,
            status=page.status,
            editor=actor_name,
            notes=payload.get("notes"),
        )

        workflow = ensure_workflow(page)
        workflow.draft_id = version.id
        workflow.has_unpublished_changes = True

        log_action(
            action="page.save_draft",
            entity_type="page",
            entity_id=page.id,
            payload={"slug": page.slug, "version": version.version, "status": page.status},
            actor_id=actor_id,
        )

    return page
