import copy
from datetime import datetime, timedelta, timezone

import pytest
from flask_jwt_extended import create_access_token

from website_admin import create_app
from website_admin.extensions import db
from website_admin.models.user import User
from website_admin.editor.errors import ApiError
from website_admin.editor.notices import NoticeLog
from website_admin.editor.permissions import StaticPermissions
from website_admin.editor.session import EditorSession


# ------------------------
# Server fixtures
# ------------------------

@pytest.fixture
def app(tmp_path):
    """Create and configure a test application instance."""
    app = create_app("testing")
    app.config.update({
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "LANDING_SECTIONS": ["hero", "about", "contact"],
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create a test client for the app."""
    return app.test_client()


def _create_user(email, role, *, name=None, extra=None, password="Secret123!"):
    user = User(
        email=email,
        display_name=name,
        role=role,
        extra_permissions=list(extra or []),
        is_active=True,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def users(app):
    """One account per role, keyed by role name."""
    return {
        "Admin": _create_user("admin@example.com", "Admin", name="Amal Admin"),
        "Editor": _create_user("editor@example.com", "Editor", name="Eli Editor"),
        "Viewer": _create_user("viewer@example.com", "Viewer"),
    }


def _token_for(user):
    return create_access_token(
        identity=user.id,
        additional_claims={"role": user.role, "permissions": user.permissions},
    )


@pytest.fixture
def auth(users):
    """``auth("Editor")`` -> Authorization headers for that role's account."""
    def headers(role):
        return {"Authorization": f"Bearer {_token_for(users[role])}"}
    return headers


@pytest.fixture
def token_for(users):
    def token(role):
        return _token_for(users[role])
    return token


# ------------------------
# Editor fakes
# ------------------------

class FakeTimer:
    """Stands in for threading.Timer; fired explicitly by the test."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.cancelled or self.fired:
            return
        self.fired = True
        self.function()


class FakeTimers:
    def __init__(self):
        self.created = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.created.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.created if t.started and not t.cancelled and not t.fired]

    def advance(self):
        """Let the debounce elapse: fire every live timer."""
        for timer in self.active:
            timer.fire()


BASE_TIME = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def make_page(slug="home", *, blocks=None, state="draft", status="draft", events=None):
    if blocks is None:
        blocks = [
            {"id": "b1", "key": "hero_title", "type": "text", "value": {"en": "Welcome", "ar": "أهلا"}},
            {"id": "b2", "key": "services", "type": "list", "value": {"en": ["Litigation", "Advisory"], "ar": []}},
        ]
    return {
        "id": "page-1",
        "slug": slug,
        "title": {"en": "Home", "ar": None},
        "content_blocks": blocks,
        "content": blocks,
        "status": status,
        "preview_url": None,
        "updated_at": BASE_TIME.isoformat(),
        "workflow": {
            "state": state,
            "draft_id": "draft-1",
            "scheduled_for": None,
            "assigned_to": None,
            "has_unpublished_changes": False,
            "events": list(events or []),
        },
    }


class FakeApi:
    """
    In-memory stand-in for PagesApi. Records every call and applies the
    workflow effects the server would.
    """

    def __init__(self, page=None):
        self.page = page or make_page()
        self.calls = []
        self.failures = {}
        self.versions = []
        self._tick = 0
        self.on_call = None

    def fail(self, method, error=None):
        self.failures[method] = error or ApiError("Server exploded", status_code=500, server_message="Server exploded")

    def called(self, method):
        return [c for c in self.calls if c[0] == method]

    def _record(self, method, *args, **kwargs):
        self.calls.append((method, args, kwargs))
        if self.on_call is not None:
            self.on_call(method)
        error = self.failures.pop(method, None)
        if error is not None:
            raise error

    def _now(self):
        self._tick += 1
        return (BASE_TIME + timedelta(minutes=self._tick)).isoformat()

    def _snapshot(self):
        return copy.deepcopy(self.page)

    def _events(self, *types, notes=None):
        timestamp = self._now()
        for event_type in types:
            self.page["workflow"]["events"].append({
                "id": f"evt-{len(self.page['workflow']['events']) + 1}",
                "type": event_type,
                "actor": "tester",
                "notes": notes,
                "timestamp": timestamp,
            })

    # Pages

    def get_page(self, slug):
        self._record("get_page", slug)
        return self._snapshot()

    def save_draft(self, slug, payload, *, if_unmodified_since=None):
        self._record("save_draft", slug, payload, if_unmodified_since=if_unmodified_since)
        self.page["title"] = {"en": payload.get("title_en") or None, "ar": payload.get("title_ar") or None}
        blocks = [dict(b, id=f"saved-{i}") for i, b in enumerate(payload["content_blocks"])]
        self.page["content_blocks"] = blocks
        self.page["content"] = blocks
        self.page["status"] = payload.get("status", "draft")
        self.page["updated_at"] = self._now()
        self.versions.append({"version": len(self.versions) + 1, "status": self.page["status"]})
        self.page["workflow"]["draft_id"] = f"draft-{len(self.versions) + 1}"
        self.page["workflow"]["has_unpublished_changes"] = True
        return self._snapshot()

    def preview(self, slug, payload=None):
        self._record("preview", slug, payload)
        page = self._snapshot()
        page["preview_url"] = f"/preview/{slug}?draftId=preview-1"
        return page

    def history(self, slug):
        self._record("history", slug)
        return list(self.versions)

    # Workflow

    def request_approval(self, slug, *, draft_id=None, notes=None, assigned_to=None):
        self._record("request_approval", slug, draft_id=draft_id, notes=notes, assigned_to=assigned_to)
        self.page["workflow"]["state"] = "pendingReview"
        self._events("submitted", notes=notes)
        return self._snapshot()

    def approve(self, slug, *, draft_id=None, notes=None):
        self._record("approve", slug, draft_id=draft_id, notes=notes)
        self._publish("approved", "published")
        return self._snapshot()

    def reject(self, slug, *, notes=None):
        self._record("reject", slug, notes=notes)
        self.page["workflow"]["state"] = "draft"
        self._events("rejected", notes=notes)
        return self._snapshot()

    def publish(self, slug, *, notes=None):
        self._record("publish", slug, notes=notes)
        self._publish("published")
        return self._snapshot()

    def schedule(self, slug, scheduled_for, *, notes=None, draft_id=None):
        self._record("schedule", slug, scheduled_for, notes=notes, draft_id=draft_id)
        self.page["workflow"]["state"] = "scheduled"
        self.page["workflow"]["scheduled_for"] = scheduled_for
        self._events("scheduled", notes=notes)
        return self._snapshot()

    def cancel_schedule(self, slug):
        self._record("cancel_schedule", slug)
        self.page["workflow"]["state"] = "draft"
        self.page["workflow"]["scheduled_for"] = None
        self._events("cancelled")
        return self._snapshot()

    def _publish(self, *types):
        workflow = self.page["workflow"]
        workflow.update(state="published", scheduled_for=None, draft_id=None, has_unpublished_changes=False)
        self.page["status"] = "published"
        self._events(*types)


class RecordingOpener:
    def __init__(self):
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        return True


class EditorTestConfig:
    API_BASE_URL = "http://cms.test"
    API_TIMEOUT = 5.0
    AUTOSAVE_DELAY = 2.0
    REQUIRED_LOCALES = ()


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def opener():
    return RecordingOpener()


@pytest.fixture
def make_session(fake_api, timers, opener):
    """
    Build an opened EditorSession over the fake API.
    ``make_session("Viewer")`` or ``make_session(capabilities=[...])``.
    """
    def build(role="Admin", *, capabilities=None, api=None, config=EditorTestConfig, open_page=True, **kwargs):
        permissions = StaticPermissions(capabilities) if capabilities is not None else StaticPermissions.from_role(role)
        session = EditorSession(
            "home",
            api or fake_api,
            permissions,
            config=config,
            notices=NoticeLog(),
            timer_factory=timers,
            opener=opener,
            **kwargs,
        )
        if open_page:
            session.open()
        return session
    return build


@pytest.fixture
def make_fake_api():
    def build(**page_kwargs):
        return FakeApi(make_page(**page_kwargs))
    return build
