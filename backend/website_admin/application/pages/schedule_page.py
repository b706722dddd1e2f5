# website_admin/application/pages/schedule_page.py
from datetime import datetime, timezone
from typing import List, Optional

from flask import current_app

from website_admin.models.base import utcnow
from website_admin.models.page import Page
from website_admin.models.workflow import PageWorkflow
from website_admin.domain.invariants.exceptions import InvariantViolation
from website_admin.domain.invariants.page import assert_page
from website_admin.domain.lifecycle import workflow as wf
from website_admin.utils.audit import log_action
from website_admin.utils.timestamps import normalize_ts, parse_ts
from website_admin.utils.transaction import transactional
from .get_page import load_page
from .publishing import append_events, assert_current_draft, ensure_workflow, publish_current

SCHEDULER_ACTOR = "scheduler"


def parse_schedule_time(raw) -> datetime:
    if isinstance(raw, datetime):
        return normalize_ts(raw).astimezone(timezone.utc)
    if not raw or not isinstance(raw, str):
        raise InvariantViolation("scheduled_for is required")
    try:
        return parse_ts(raw).astimezone(timezone.utc)
    except (ValueError, OverflowError) as exc:
        raise InvariantViolation(f"Invalid scheduled_for timestamp: {raw}") from exc


def schedule_publish(
    *,
    slug: str,
    scheduled_for,
    actor_name: Optional[str],
    notes: Optional[str] = None,
    draft_id: Optional[str] = None,
) -> Page:
    """
    Schedule the current draft to go live at ``scheduled_for``.
    Rescheduling keeps the state the page returns to on cancel.
    """
    when = parse_schedule_time(scheduled_for)
    page = load_page(slug)
    now = utcnow()

    with transactional():
        workflow = ensure_workflow(page)

        wf.assert_workflow_transition(
            action=wf.SCHEDULE_PUBLISH,
            from_state=workflow.state,
            has_unpublished_changes=workflow.has_unpublished_changes,
        )
        wf.assert_schedule_time(when, now)
        assert_current_draft(workflow, draft_id)
        assert_page(page, publish=True)

        if workflow.state != wf.SCHEDULED:
            current = wf.effective_state(workflow.state, workflow.has_unpublished_changes)
            workflow.resume_state = wf.PENDING_REVIEW if current == wf.PENDING_REVIEW else wf.DRAFT

        workflow.state = wf.target_state(wf.SCHEDULE_PUBLISH)
        workflow.scheduled_for = when

        append_events(workflow, wf.ACTION_EVENTS[wf.SCHEDULE_PUBLISH], actor=actor_name, now=now, notes=notes)

        log_action(
            action="page.schedule",
            entity_type="page",
            entity_id=page.id,
            payload={"slug": page.slug, "scheduled_for": when.isoformat()},
        )

    return page


def cancel_schedule(*, slug: str, actor_name: Optional[str]) -> Page:
    page = load_page(slug)

    with transactional():
        workflow = ensure_workflow(page)

        wf.assert_workflow_transition(
            action=wf.CANCEL_SCHEDULE,
            from_state=workflow.state,
            has_unpublished_changes=workflow.has_unpublished_changes,
        )

        workflow.state = wf.target_state(wf.CANCEL_SCHEDULE, resume_state=workflow.resume_state)
        workflow.scheduled_for = None
        workflow.resume_state = None

        append_events(workflow, wf.ACTION_EVENTS[wf.CANCEL_SCHEDULE], actor=actor_name, now=utcnow())

        log_action(
            action="page.cancel_schedule",
            entity_type="page",
            entity_id=page.id,
            payload={"slug": page.slug, "state": workflow.state},
        )

    return page


def publish_due(*, now: Optional[datetime] = None) -> List[str]:
    """
    Publish every scheduled page whose time has come.
    One transaction per page; a failing page is logged and left scheduled.
    """
    now = normalize_ts(now) or utcnow()

    due = (
        PageWorkflow.query
        .filter(
            PageWorkflow.state == wf.SCHEDULED,
            PageWorkflow.scheduled_for <= now,
        )
        .order_by(PageWorkflow.scheduled_for.asc())
        .all()
    )

    published = []
    for workflow in due:
        page = workflow.page
        try:
            with transactional():
                version = publish_current(page, actor=SCHEDULER_ACTOR, now=now)
                log_action(
                    action="page.publish_scheduled",
                    entity_type="page",
                    entity_id=page.id,
                    payload={"slug": page.slug, "version": version.version},
                )
        except InvariantViolation as exc:
            current_app.logger.warning(f"Scheduled publish of '{page.slug}' failed: {exc}")
            continue

        published.append(page.slug)
        current_app.logger.info(f"Published scheduled page '{page.slug}' (v{version.version})")

    return published
