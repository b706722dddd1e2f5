from typing import List, Optional

from website_admin.models.page_version import PageVersion
from website_admin.models.workflow import PageWorkflow
from website_admin.domain.lifecycle import page as page_lifecycle
from website_admin.domain.lifecycle import workflow as wf
from website_admin.domain.invariants.exceptions import PageNotFound
from website_admin.utils.timestamps import normalize_ts
from .get_page import load_page


def get_history(*, slug: str) -> List[PageVersion]:
    """Versions newest first."""
    page = load_page(slug)
    return (
        PageVersion.query
        .filter_by(page_id=page.id)
        .order_by(PageVersion.version.desc())
        .all()
    )


def latest_published(*, slug: str) -> PageVersion:
    page = load_page(slug)
    version = (
        PageVersion.query
        .filter_by(page_id=page.id, status=page_lifecycle.PUBLISHED)
        .order_by(PageVersion.version.desc())
        .first()
    )
    if version is None:
        raise PageNotFound(f"Page '{slug}' has not been published")
    return version


def publishing_queue(*, state: Optional[str] = None) -> List[PageWorkflow]:
    """
    Pages waiting on a reviewer or a scheduled time.
    Scheduled items come first, soonest first.
    """
    states = [state] if state else [wf.SCHEDULED, wf.PENDING_REVIEW]

    workflows = (
        PageWorkflow.query
        .filter(PageWorkflow.state.in_(states))
        .order_by(PageWorkflow.updated_at.desc())
        .all()
    )

    scheduled = sorted(
        (w for w in workflows if w.state == wf.SCHEDULED),
        key=lambda w: (w.scheduled_for is None, normalize_ts(w.scheduled_for) or 0),
    )
    pending = [w for w in workflows if w.state != wf.SCHEDULED]
    return scheduled + pending
