from typing import Dict, List, Optional

from website_admin.models.base import utcnow
from website_admin.models.page import Page
from website_admin.domain.lifecycle import page as page_lifecycle
from website_admin.domain.lifecycle import workflow as wf
from website_admin.utils.audit import log_action
from website_admin.utils.transaction import transactional
from .publishing import ensure_workflow, publish_current


def _needs_publish(page: Page) -> bool:
    workflow = page.workflow
    if workflow is None:
        return True
    return wf.effective_state(workflow.state, workflow.has_unpublished_changes) != wf.PUBLISHED


def bulk_publish_pages(
    *,
    actor_name: Optional[str],
    slugs: Optional[List[str]] = None,
) -> Dict[str, object]:
    """
    Publish every page with unpublished content.

    Responsibilities:
    - Transactional update
    - Pages without content blocks are skipped, not failed
    - Audit logging once per batch
    """
    query = Page.query.filter(Page.status != page_lifecycle.UNLINKED)
    if slugs:
        query = query.filter(Page.slug.in_(slugs))
    pages = query.order_by(Page.slug.asc()).all()

    published, skipped = [], []
    now = utcnow()

    with transactional():
        for page in pages:
            if not _needs_publish(page):
                continue
            if not page.blocks:
                skipped.append(page.slug)
                continue

            ensure_workflow(page)
            publish_current(page, actor=actor_name, now=now)
            published.append(page.slug)

        log_action(
            action="page.bulk_publish",
            entity_type="page",
            entity_id="*",
            payload={"count": len(published), "published": published, "skipped": skipped},
        )

    return {"count": len(published), "published": published, "skipped": skipped}
