# website_admin/editor/workflow.py
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from website_admin.domain.lifecycle import workflow as wf
from website_admin.utils.timestamps import normalize_ts, parse_ts
from .errors import ActionInProgress, ContentValidationError, PermissionDenied
from .permissions import PermissionOracle


class WorkflowStateMachine:
    """
    Client side of the publishing workflow.

    Every action is checked locally (capability, then state) before the
    server is called; the server re-checks the same rules. A successful
    response replaces the cached workflow record.
    """

    def __init__(
        self,
        slug: str,
        api,
        permissions: PermissionOracle,
        *,
        on_change: Optional[Callable[[Dict[str, Any]], None]] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.slug = slug
        self.api = api
        self.permissions = permissions
        self.on_change = on_change
        self.clock = clock
        self.record: Optional[Dict[str, Any]] = None
        self.page_status: Optional[str] = None
        self._pending = set()
        self._lock = threading.Lock()

    # ------------------------
    # Record
    # ------------------------

    def load(self, record: Optional[Dict[str, Any]], page_status: Optional[str] = None) -> None:
        self.record = dict(record) if record else None
        self.page_status = page_status

    @property
    def state(self) -> str:
        if self.record and self.record.get("state"):
            return self.record["state"]
        return wf.PUBLISHED if self.page_status == "published" else wf.DRAFT

    @property
    def has_unpublished_changes(self) -> bool:
        return bool(self.record and self.record.get("has_unpublished_changes"))

    @property
    def draft_id(self) -> Optional[str]:
        return self.record.get("draft_id") if self.record else None

    @property
    def effective_state(self) -> str:
        return wf.effective_state(self.state, self.has_unpublished_changes)

    # ------------------------
    # Rules
    # ------------------------

    def permits(self, action: str) -> bool:
        return any(self.permissions.can(cap) for cap in wf.ACTION_CAPABILITIES.get(action, ()))

    def is_legal(self, action: str) -> bool:
        return wf.is_action_legal(action, self.state, self.has_unpublished_changes)

    def available_actions(self) -> List[str]:
        return [a for a in wf.WORKFLOW_ACTIONS if self.permits(a) and self.is_legal(a)]

    def is_pending(self, action: str) -> bool:
        return action in self._pending

    def check(self, action: str) -> None:
        if not self.permits(action):
            raise PermissionDenied(
                f"Missing permission for {action}",
                capability=" or ".join(wf.ACTION_CAPABILITIES.get(action, ())),
            )
        wf.assert_workflow_transition(
            action=action,
            from_state=self.state,
            has_unpublished_changes=self.has_unpublished_changes,
        )

    # ------------------------
    # Actions
    # ------------------------

    def perform(self, action: str, **kwargs) -> Dict[str, Any]:
        self.check(action)

        if action == wf.SCHEDULE_PUBLISH:
            kwargs["scheduled_for"] = self._schedule_time(kwargs.get("scheduled_for"))

        with self._lock:
            if action in self._pending:
                raise ActionInProgress(f"{action} is already in progress")
            self._pending.add(action)

        try:
            page = self._call(action, **kwargs)
        finally:
            with self._lock:
                self._pending.discard(action)

        self.load((page or {}).get("workflow"), (page or {}).get("status"))
        if self.on_change is not None:
            self.on_change(page)
        return page

    def _call(self, action: str, **kwargs) -> Dict[str, Any]:
        if action == wf.REQUEST_APPROVAL:
            return self.api.request_approval(
                self.slug,
                draft_id=self.draft_id,
                notes=kwargs.get("notes"),
                assigned_to=kwargs.get("assigned_to"),
            )
        if action == wf.APPROVE_AND_PUBLISH:
            return self.api.approve(self.slug, draft_id=self.draft_id, notes=kwargs.get("notes"))
        if action == wf.REJECT_CHANGES:
            return self.api.reject(self.slug, notes=kwargs.get("notes"))
        if action == wf.PUBLISH_DIRECTLY:
            return self.api.publish(self.slug, notes=kwargs.get("notes"))
        if action == wf.SCHEDULE_PUBLISH:
            return self.api.schedule(
                self.slug,
                kwargs["scheduled_for"].isoformat(),
                notes=kwargs.get("notes"),
                draft_id=self.draft_id,
            )
        if action == wf.CANCEL_SCHEDULE:
            return self.api.cancel_schedule(self.slug)
        raise ValueError(f"Unknown workflow action: {action}")

    def _schedule_time(self, raw) -> datetime:
        try:
            when = normalize_ts(raw) if isinstance(raw, datetime) else parse_ts(raw)
        except (TypeError, ValueError, OverflowError) as exc:
            raise ContentValidationError(f"Invalid publish time: {raw!r}") from exc

        wf.assert_schedule_time(when, self.clock())
        return when
