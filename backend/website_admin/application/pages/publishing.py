# website_admin/application/pages/publishing.py
from datetime import datetime
from typing import Iterable, List, Optional

from website_admin.extensions import db
from website_admin.models.page import Page
from website_admin.models.page_version import PageVersion
from website_admin.models.workflow import PageWorkflow, WorkflowEvent
from website_admin.domain.invariants.exceptions import StaleDraft
from website_admin.domain.invariants.page import assert_page
from website_admin.domain.lifecycle import page as page_lifecycle
from website_admin.domain.lifecycle import workflow as wf
from website_admin.utils.versioning import next_version, snapshot_page


def ensure_workflow(page: Page) -> PageWorkflow:
    """Every page owns exactly one workflow record."""
    if page.workflow is None:
        workflow = PageWorkflow()
        workflow.state = wf.PUBLISHED if page.status == page_lifecycle.PUBLISHED else wf.DRAFT
        workflow.has_unpublished_changes = False
        page.workflow = workflow
        db.session.add(workflow)
    return page.workflow


def next_page_status(page: Page, desired: str) -> str:
    # Unlinked pages stay unlinked until their slug is a landing section again
    if page.status == page_lifecycle.UNLINKED:
        return page_lifecycle.UNLINKED
    return desired


def assert_current_draft(workflow: PageWorkflow, draft_id: Optional[str]) -> None:
    if draft_id and workflow.draft_id and draft_id != workflow.draft_id:
        raise StaleDraft("The draft has changed since it was loaded. Reload the page and try again.")


def append_events(
    workflow: PageWorkflow,
    types: Iterable[str],
    *,
    actor: Optional[str],
    now: datetime,
    notes: Optional[str] = None,
) -> List[WorkflowEvent]:
    """
    Append events in order. Events share the timestamp of the action;
    ``sequence`` keeps their relative order stable.
    """
    db.session.flush()
    last = (
        db.session.query(db.func.max(WorkflowEvent.sequence))
        .filter(WorkflowEvent.workflow_id == workflow.id)
        .scalar()
    )
    sequence = last or 0

    created = []
    for event_type in types:
        sequence += 1
        event = WorkflowEvent()
        event.type = event_type
        event.actor = actor
        event.notes = notes
        event.timestamp = now
        event.sequence = sequence
        workflow.events.append(event)
        db.session.add(event)
        created.append(event)
    return created


def record_version(page: Page, *, status: str, editor: Optional[str], notes: Optional[str] = None) -> PageVersion:
    version = PageVersion()
    version.page_id = page.id
    version.version = next_version(page.id)
    version.status = status
    version.snapshot = snapshot_page(page)
    version.editor = editor
    version.notes = notes

    db.session.add(version)
    db.session.flush()
    return version


def publish_current(
    page: Page,
    *,
    actor: Optional[str],
    now: datetime,
    events: Iterable[str] = ("published",),
    notes: Optional[str] = None,
) -> PageVersion:
    """
    Publish the page's current draft content. Runs inside the caller's
    transaction.
    """
    assert_page(page, publish=True)

    workflow = ensure_workflow(page)

    page.status = next_page_status(page, page_lifecycle.PUBLISHED)
    page.published_at = now

    version = record_version(page, status=page_lifecycle.PUBLISHED, editor=actor, notes=notes)

    workflow.state = wf.PUBLISHED
    workflow.scheduled_for = None
    workflow.resume_state = None
    workflow.draft_id = None
    workflow.has_unpublished_changes = False

    types = list(events)
    append_events(workflow, types[:1], actor=actor, now=now, notes=notes)
    append_events(workflow, types[1:], actor=actor, now=now)

    return version
