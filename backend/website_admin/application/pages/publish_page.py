# website_admin/application/pages/publish_page.py
from typing import Optional

from website_admin.models.base import utcnow
from website_admin.models.page import Page
from website_admin.domain.lifecycle import workflow as wf
from website_admin.utils.audit import log_action
from website_admin.utils.transaction import transactional
from .get_page import load_page
from .publishing import ensure_workflow, publish_current


def publish_directly(
    *,
    slug: str,
    actor_name: Optional[str],
    notes: Optional[str] = None,
) -> Page:
    """
    Publishes the current draft without review and creates an immutable
    version snapshot.

    Responsibilities:
    - transactional boundary
    - invariant enforcement
    - version creation
    - audit logging
    """
    page = load_page(slug)

    with transactional():
        workflow = ensure_workflow(page)

        wf.assert_workflow_transition(
            action=wf.PUBLISH_DIRECTLY,
            from_state=workflow.state,
            has_unpublished_changes=workflow.has_unpublished_changes,
        )

        version = publish_current(
            page,
            actor=actor_name,
            now=utcnow(),
            events=wf.ACTION_EVENTS[wf.PUBLISH_DIRECTLY],
            notes=notes,
        )

        log_action(
            action="page.publish",
            entity_type="page",
            entity_id=page.id,
            payload={"slug": page.slug, "version": version.version},
        )

    return page
