from datetime import datetime
from typing import Dict, FrozenSet, Optional, Tuple

from website_admin.domain.invariants.exceptions import IllegalTransition
from website_admin.domain.permissions import (
    PAGES_APPROVE,
    PAGES_EDIT,
    PAGES_PUBLISH,
    PAGES_SCHEDULE,
)

# Workflow states
DRAFT = "draft"
PENDING_REVIEW = "pendingReview"
SCHEDULED = "scheduled"
PUBLISHED = "published"

WORKFLOW_STATES = (DRAFT, PENDING_REVIEW, SCHEDULED, PUBLISHED)

# Audit trail event types
EVENT_TYPES = (
    "submitted",
    "reviewed",
    "approved",
    "rejected",
    "published",
    "scheduled",
    "cancelled",
)

# Actions
REQUEST_APPROVAL = "request_approval"
APPROVE_AND_PUBLISH = "approve_and_publish"
REJECT_CHANGES = "reject_changes"
PUBLISH_DIRECTLY = "publish_directly"
SCHEDULE_PUBLISH = "schedule_publish"
CANCEL_SCHEDULE = "cancel_schedule"

WORKFLOW_ACTIONS = (
    REQUEST_APPROVAL,
    APPROVE_AND_PUBLISH,
    REJECT_CHANGES,
    PUBLISH_DIRECTLY,
    SCHEDULE_PUBLISH,
    CANCEL_SCHEDULE,
)

# None = legal from any state
ACTION_SOURCE_STATES: Dict[str, Optional[FrozenSet[str]]] = {
    REQUEST_APPROVAL: frozenset({DRAFT}),
    APPROVE_AND_PUBLISH: frozenset({PENDING_REVIEW}),
    REJECT_CHANGES: frozenset({PENDING_REVIEW}),
    PUBLISH_DIRECTLY: None,
    SCHEDULE_PUBLISH: None,
    CANCEL_SCHEDULE: frozenset({SCHEDULED}),
}

# Any one of the listed capabilities unlocks the action
ACTION_CAPABILITIES: Dict[str, Tuple[str, ...]] = {
    REQUEST_APPROVAL: (PAGES_EDIT,),
    APPROVE_AND_PUBLISH: (PAGES_APPROVE,),
    REJECT_CHANGES: (PAGES_APPROVE,),
    PUBLISH_DIRECTLY: (PAGES_PUBLISH,),
    SCHEDULE_PUBLISH: (PAGES_SCHEDULE,),
    CANCEL_SCHEDULE: (PAGES_SCHEDULE, PAGES_APPROVE, PAGES_PUBLISH),
}

# Events appended by each action, in order
ACTION_EVENTS: Dict[str, Tuple[str, ...]] = {
    REQUEST_APPROVAL: ("submitted",),
    APPROVE_AND_PUBLISH: ("approved", "published"),
    REJECT_CHANGES: ("rejected",),
    PUBLISH_DIRECTLY: ("published",),
    SCHEDULE_PUBLISH: ("scheduled",),
    CANCEL_SCHEDULE: ("cancelled",),
}


def effective_state(state: Optional[str], has_unpublished_changes: bool = False) -> str:
    """
    A published page with newer saved edits is back in a draft cycle.
    """
    state = state or DRAFT
    if state == PUBLISHED and has_unpublished_changes:
        return DRAFT
    return state


def is_action_legal(action: str, state: Optional[str], has_unpublished_changes: bool = False) -> bool:
    if action not in ACTION_SOURCE_STATES:
        return False
    allowed = ACTION_SOURCE_STATES[action]
    if allowed is None:
        return True
    return effective_state(state, has_unpublished_changes) in allowed


def assert_workflow_transition(
    *,
    action: str,
    from_state: Optional[str],
    has_unpublished_changes: bool = False,
) -> None:
    """
    Guards workflow transitions.
    Single source of truth shared by the API and the editor session.
    """
    if action not in ACTION_SOURCE_STATES:
        raise IllegalTransition(f"Unknown workflow action: {action}", action=action, state=from_state)

    if not is_action_legal(action, from_state, has_unpublished_changes):
        raise IllegalTransition(
            f"Illegal workflow action '{action}' from state '{from_state or DRAFT}'",
            action=action,
            state=from_state,
        )


def target_state(action: str, *, resume_state: Optional[str] = None) -> str:
    if action == REQUEST_APPROVAL:
        return PENDING_REVIEW
    if action in (APPROVE_AND_PUBLISH, PUBLISH_DIRECTLY):
        return PUBLISHED
    if action == REJECT_CHANGES:
        return DRAFT
    if action == SCHEDULE_PUBLISH:
        return SCHEDULED
    if action == CANCEL_SCHEDULE:
        return PENDING_REVIEW if resume_state == PENDING_REVIEW else DRAFT
    raise IllegalTransition(f"Unknown workflow action: {action}", action=action)


def assert_schedule_time(scheduled_for: datetime, now: datetime) -> None:
    if scheduled_for <= now:
        raise IllegalTransition(
            "Scheduled publish time must be in the future",
            action=SCHEDULE_PUBLISH,
        )
