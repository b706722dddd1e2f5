# website_admin/application/pages/request_approval.py
from typing import Optional

from website_admin.models.base import utcnow
from website_admin.models.page import Page
from website_admin.domain.lifecycle import workflow as wf
from website_admin.utils.audit import log_action
from website_admin.utils.transaction import transactional
from .get_page import load_page
from .publishing import append_events, assert_current_draft, ensure_workflow


def request_approval(
    *,
    slug: str,
    actor_name: Optional[str],
    draft_id: Optional[str] = None,
    notes: Optional[str] = None,
    assigned_to: Optional[str] = None,
) -> Page:
    """
    Submit the current draft for review.
    """
    page = load_page(slug)

    with transactional():
        workflow = ensure_workflow(page)

        wf.assert_workflow_transition(
            action=wf.REQUEST_APPROVAL,
            from_state=workflow.state,
            has_unpublished_changes=workflow.has_unpublished_changes,
        )
        assert_current_draft(workflow, draft_id)

        workflow.state = wf.target_state(wf.REQUEST_APPROVAL)
        workflow.submitted_by = actor_name
        workflow.approved_by = None
        if assigned_to is not None:
            workflow.assigned_to = assigned_to

        append_events(workflow, wf.ACTION_EVENTS[wf.REQUEST_APPROVAL], actor=actor_name, now=utcnow(), notes=notes)

        log_action(
            action="page.request_approval",
            entity_type="page",
            entity_id=page.id,
            payload={"slug": page.slug, "draft_id": workflow.draft_id, "assigned_to": workflow.assigned_to},
        )

    return page
