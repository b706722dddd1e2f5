# website_admin/application/pages/review_page.py
from typing import Optional

from website_admin.models.base import utcnow
from website_admin.models.page import Page
from website_admin.domain.lifecycle import workflow as wf
from website_admin.utils.audit import log_action
from website_admin.utils.transaction import transactional
from .get_page import load_page
from .publishing import append_events, assert_current_draft, ensure_workflow, publish_current


def approve_and_publish(
    *,
    slug: str,
    actor_name: Optional[str],
    draft_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Page:
    """
    Approve a page under review and publish it in the same transaction.
    Appends ``approved`` then ``published``.
    """
    page = load_page(slug)

    with transactional():
        workflow = ensure_workflow(page)

        wf.assert_workflow_transition(
            action=wf.APPROVE_AND_PUBLISH,
            from_state=workflow.state,
            has_unpublished_changes=workflow.has_unpublished_changes,
        )
        assert_current_draft(workflow, draft_id)

        workflow.approved_by = actor_name
        version = publish_current(
            page,
            actor=actor_name,
            now=utcnow(),
            events=wf.ACTION_EVENTS[wf.APPROVE_AND_PUBLISH],
            notes=notes,
        )

        log_action(
            action="page.approve",
            entity_type="page",
            entity_id=page.id,
            payload={"slug": page.slug, "version": version.version},
        )

    return page


def reject_changes(
    *,
    slug: str,
    actor_name: Optional[str],
    notes: Optional[str] = None,
) -> Page:
    """Send a page under review back to draft."""
    page = load_page(slug)

    with transactional():
        workflow = ensure_workflow(page)

        wf.assert_workflow_transition(
            action=wf.REJECT_CHANGES,
            from_state=workflow.state,
            has_unpublished_changes=workflow.has_unpublished_changes,
        )

        workflow.state = wf.target_state(wf.REJECT_CHANGES)
        workflow.approved_by = None

        append_events(workflow, wf.ACTION_EVENTS[wf.REJECT_CHANGES], actor=actor_name, now=utcnow(), notes=notes)

        log_action(
            action="page.reject",
            entity_type="page",
            entity_id=page.id,
            payload={"slug": page.slug, "notes": notes},
        )

    return page
