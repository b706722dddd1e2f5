# website_admin/editor/session.py
import logging
import threading
import webbrowser
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from website_admin.config import EditorConfig
from website_admin.domain.invariants.exceptions import IllegalTransition
from website_admin.domain.lifecycle import workflow as wf
from website_admin.domain.permissions import PAGES_EDIT, PAGES_VIEW
from website_admin.utils.timestamps import parse_ts
from .autosave import AutosaveScheduler
from .draft import PageDraftStore
from .errors import (
    ActionInProgress,
    ApiError,
    ConflictError,
    ContentValidationError,
    EditorError,
    PermissionDenied,
)
from .history import TimelineEntry, newest_first, timeline
from .notices import NoticeLog
from .permissions import PermissionOracle
from .preview import PreviewGenerator
from .workflow import WorkflowStateMachine

logger = logging.getLogger(__name__)

READ_ONLY_MESSAGE = "You do not have permission to edit this page"
CONFLICT_MESSAGE = "This page was changed by someone else. Reload it to get the latest version."


class ActionCopy(NamedTuple):
    restricted_title: str
    restricted_description: str
    success_title: str
    failure_title: str
    failure_fallback: str
    success_description: Optional[str] = None


ACTION_COPY: Dict[str, ActionCopy] = {
    wf.REQUEST_APPROVAL: ActionCopy(
        "Request blocked",
        "You do not have permission to request approval.",
        "Approval requested",
        "Request failed",
        "Unable to request approval",
        "An administrator will review the draft shortly.",
    ),
    wf.APPROVE_AND_PUBLISH: ActionCopy(
        "Approval restricted",
        "You do not have permission to approve this page.",
        "Changes approved and published",
        "Approval failed",
        "Unable to approve changes",
    ),
    wf.REJECT_CHANGES: ActionCopy(
        "Approval restricted",
        "You do not have permission to request changes on this page.",
        "Changes requested",
        "Request failed",
        "Unable to request changes",
    ),
    wf.PUBLISH_DIRECTLY: ActionCopy(
        "Publishing restricted",
        "You need publish permissions to publish this page.",
        "Page published successfully",
        "Publish failed",
        "Unable to publish page",
    ),
    wf.SCHEDULE_PUBLISH: ActionCopy(
        "Scheduling restricted",
        "You do not have permission to schedule this page.",
        "Publish scheduled",
        "Scheduling failed",
        "Unable to schedule publish",
    ),
    wf.CANCEL_SCHEDULE: ActionCopy(
        "Cancel restricted",
        "You do not have permission to cancel scheduled publishes.",
        "Scheduled publish cancelled",
        "Cancel failed",
        "Unable to cancel schedule",
    ),
}


def _format_timestamp(raw) -> str:
    try:
        return parse_ts(raw).strftime("%Y-%m-%d %H:%M %Z").strip()
    except (TypeError, ValueError, OverflowError):
        return str(raw)


class EditorSession:
    """
    One person editing one page.

    Wires the draft store, autosave scheduler, workflow state machine and
    preview generator around a single API client and permission oracle.

    Public action methods report failures as notices and return a success
    flag; they do not raise.
    """

    def __init__(
        self,
        slug: str,
        api,
        permissions: PermissionOracle,
        *,
        config=EditorConfig,
        notices: Optional[NoticeLog] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
        opener: Callable[[str], Any] = webbrowser.open_new_tab,
        on_invalidate: Optional[Callable[[str], None]] = None,
        use_optimistic_lock: bool = True,
    ):
        self.slug = slug
        self.api = api
        self.permissions = permissions
        self.notices = notices or NoticeLog()
        self.on_invalidate = on_invalidate
        self.use_optimistic_lock = use_optimistic_lock

        self.draft = PageDraftStore(slug, required_locales=config.REQUIRED_LOCALES)
        self.workflow = WorkflowStateMachine(slug, api, permissions, on_change=self._on_workflow_change)
        self.preview = PreviewGenerator(slug, api, base_url=config.API_BASE_URL, opener=opener)
        self.autosave = AutosaveScheduler(
            self._autosave,
            delay=config.AUTOSAVE_DELAY,
            timer_factory=timer_factory,
            enabled=self.can_edit,
        )

        self._page: Optional[Dict[str, Any]] = None
        self._history: Optional[List[Dict[str, Any]]] = None

    # ------------------------
    # Permissions
    # ------------------------

    @property
    def can_edit(self) -> bool:
        return self.permissions.can(PAGES_EDIT)

    @property
    def read_only(self) -> bool:
        return not self.can_edit

    # ------------------------
    # Loading & caches
    # ------------------------

    def open(self) -> bool:
        """Fetch the page and reset the draft to it."""
        if not self.permissions.can(PAGES_VIEW):
            self.notices.error("You do not have permission to view this page.")
            return False

        try:
            page = self.api.get_page(self.slug)
        except ApiError as exc:
            self.notices.error("Unable to load page", exc.server_message or "Failed to load page content")
            return False

        self._set_page(page)
        self.draft.load(page)
        return True

    def refresh(self) -> bool:
        self._history = None
        return self.open()

    @property
    def page(self) -> Optional[Dict[str, Any]]:
        return self._page

    def history(self) -> List[Dict[str, Any]]:
        """Version history, newest first; fetched once and cached until invalidated."""
        if self._history is None:
            try:
                self._history = newest_first(self.api.history(self.slug))
            except ApiError as exc:
                self.notices.error("Unable to load history", exc.server_message or "Failed to load version history")
                return []
        return self._history

    def timeline(self) -> List[TimelineEntry]:
        record = (self._page or {}).get("workflow") or {}
        return timeline(record.get("events") or [])

    @property
    def state(self) -> str:
        return self.workflow.state

    @property
    def effective_state(self) -> str:
        return self.workflow.effective_state

    def available_actions(self) -> List[str]:
        return self.workflow.available_actions()

    def _set_page(self, page: Optional[Dict[str, Any]]) -> None:
        self._page = page
        page = page or {}
        self.workflow.load(page.get("workflow"), page.get("status"))

    def _invalidate(self) -> None:
        self._history = None
        if self.on_invalidate is not None:
            self.on_invalidate(self.slug)

    # ------------------------
    # Editing
    # ------------------------

    def edit(self, path: str, value: Any) -> bool:
        return self._change(lambda: self.draft.mutate(path, value))

    def add_block(self, key: str = "", block_type="text", index: Optional[int] = None) -> bool:
        return self._change(lambda: self.draft.add_block(key, block_type, index))

    def remove_block(self, index: int) -> bool:
        return self._change(lambda: self.draft.remove_block(index))

    def move_block(self, from_index: int, to_index: int) -> bool:
        return self._change(lambda: self.draft.move_block(from_index, to_index))

    def _change(self, apply: Callable[[], Any]) -> bool:
        if self.read_only:
            self.notices.error(READ_ONLY_MESSAGE)
            return False

        try:
            apply()
        except (KeyError, IndexError, ValueError) as exc:
            self.notices.error("Edit failed", str(exc))
            return False

        if self.draft.is_dirty():
            self.autosave.schedule()
        return True

    # ------------------------
    # Saving
    # ------------------------

    def save(self, status: str = "draft") -> bool:
        """
        Manual save. Skips the debounce but waits for an in-flight autosave.
        """
        if self.read_only:
            self.notices.error(READ_ONLY_MESSAGE)
            return False

        self.autosave.cancel()
        return self.autosave.run_exclusive(lambda: self._save(status=status, silent=False))

    def _autosave(self) -> None:
        if self.draft.is_dirty():
            self._save(status="draft", silent=True)

    def _save(self, *, status: str, silent: bool) -> bool:
        snapshot = self.draft.snapshot()
        try:
            payload = self.draft.to_payload(status=status)
        except ContentValidationError as exc:
            if silent:
                self.notices.error("Autosave failed", exc.message)
            elif exc.block_index is not None and exc.block_key is None:
                self.notices.error("Each block needs a key", exc.message)
            else:
                self.notices.error("Validation error", exc.message)
            return False

        if_unmodified_since = None
        if self.use_optimistic_lock and self._page:
            if_unmodified_since = self._page.get("updated_at")

        try:
            page = self.api.save_draft(self.slug, payload, if_unmodified_since=if_unmodified_since)
        except ConflictError as exc:
            self.notices.error("Autosave failed" if silent else "Save failed", exc.server_message or CONFLICT_MESSAGE)
            return False
        except ApiError as exc:
            fallback = "Failed to autosave changes" if silent else "Unable to save draft"
            self.notices.error("Autosave failed" if silent else "Save failed", exc.server_message or fallback)
            return False

        # Later edits stay dirty against the state that was sent
        self.draft.mark_saved(snapshot)
        self._set_page(page)
        self._invalidate()

        if not silent:
            self.notices.notify("Draft saved successfully")
        return True

    # ------------------------
    # Preview
    # ------------------------

    def request_preview(self, *, silent: bool = False) -> Optional[str]:
        if not (self.permissions.can(PAGES_VIEW) or self.can_edit):
            self.notices.error("Preview failed", "You do not have permission to preview this page.")
            return None

        try:
            page = self.preview.request_preview(self.draft.preview_payload())
        except EditorError as exc:
            message = getattr(exc, "server_message", None) or exc.message or "Unable to generate preview"
            if not silent:
                self.notices.error("Preview failed", message)
            return None

        self._set_page(page)
        if not silent:
            self.notices.notify("Preview link updated")
        return self.preview.last_url

    def open_preview(self) -> Optional[str]:
        """Refresh the preview link silently and open it in a new browser tab."""
        if not (self.permissions.can(PAGES_VIEW) or self.can_edit):
            self.notices.error("Preview failed", "You do not have permission to preview this page.")
            return None

        try:
            url = self.preview.open_in_new_tab(self.draft.preview_payload())
        except EditorError as exc:
            message = getattr(exc, "server_message", None) or exc.message or "Unable to open preview"
            self.notices.error("Preview failed", message)
            return None
        except webbrowser.Error as exc:
            self.notices.error("Preview failed", str(exc) or "Unable to open preview")
            return None

        self._set_page(self.preview.last_page)
        return url

    # ------------------------
    # Workflow
    # ------------------------

    def request_approval(self, *, notes: Optional[str] = None, assigned_to: Optional[str] = None) -> bool:
        return self._workflow_action(wf.REQUEST_APPROVAL, notes=notes, assigned_to=assigned_to)

    def approve_and_publish(self, *, notes: Optional[str] = None) -> bool:
        return self._workflow_action(wf.APPROVE_AND_PUBLISH, notes=notes)

    def reject_changes(self, *, notes: Optional[str] = None) -> bool:
        return self._workflow_action(wf.REJECT_CHANGES, notes=notes)

    def publish_directly(self) -> bool:
        return self._workflow_action(wf.PUBLISH_DIRECTLY)

    def schedule_publish(self, scheduled_for, *, notes: Optional[str] = None) -> bool:
        return self._workflow_action(wf.SCHEDULE_PUBLISH, scheduled_for=scheduled_for, notes=notes)

    def cancel_schedule(self) -> bool:
        return self._workflow_action(wf.CANCEL_SCHEDULE)

    def _workflow_action(self, action: str, **kwargs) -> bool:
        copy = ACTION_COPY[action]

        try:
            self.workflow.perform(action, **kwargs)
        except PermissionDenied:
            self.notices.error(copy.restricted_title, copy.restricted_description)
            return False
        except ActionInProgress as exc:
            logger.info("Ignoring %s for %s: %s", action, self.slug, exc.message)
            return False
        except IllegalTransition as exc:
            self.notices.error(copy.failure_title, str(exc))
            return False
        except ApiError as exc:
            self.notices.error(copy.failure_title, exc.server_message or copy.failure_fallback)
            return False
        except EditorError as exc:
            self.notices.error(copy.failure_title, exc.message or copy.failure_fallback)
            return False

        description = copy.success_description
        if action == wf.SCHEDULE_PUBLISH:
            description = f"Content will go live at {_format_timestamp((self.workflow.record or {}).get('scheduled_for'))}"
        self.notices.notify(copy.success_title, description)
        return True

    def _on_workflow_change(self, page: Dict[str, Any]) -> None:
        self._set_page(page)
        self._invalidate()

    # ------------------------
    # Lifecycle
    # ------------------------

    def close(self) -> None:
        """Drop an un-fired autosave; an in-flight save is left to finish."""
        self.autosave.close()
