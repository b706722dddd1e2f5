import io
from datetime import datetime, timedelta, timezone

PAGES = "/api/admin/website/pages"

HERO_BLOCKS = [
    {"key": "hero_title", "type": "text", "value": {"en": "Trusted counsel", "ar": "مستشار موثوق"}},
    {"key": "hero_points", "type": "list", "value": {"en": ["Litigation", "Arbitration"], "ar": []}},
    {"key": "hero_cta", "type": "json", "value": {"en": {"label": "Book a call"}, "ar": None}},
]


def save(client, headers, slug="hero", blocks=HERO_BLOCKS, **extra):
    body = {"title_en": "Hero", "title_ar": "الرئيسية", "content_blocks": blocks}
    body.update(extra)
    return client.put(f"{PAGES}/{slug}", json=body, headers=headers)


def future(**delta):
    return (datetime.now(timezone.utc) + timedelta(**(delta or {"days": 1}))).isoformat()


def event_types(response):
    return [e["type"] for e in response.get_json()["data"]["workflow"]["events"]]


# ------------------------
# Access
# ------------------------

def test_requests_without_a_token_are_unauthorized(client):
    assert client.get(f"{PAGES}/hero").status_code == 401


def test_login_issues_tokens_with_permissions(client, users):
    response = client.post("/api/auth/login", json={"email": "Editor@Example.com", "password": "Secret123!"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["user"]["role"] == "Editor"
    assert "pages:edit" in body["user"]["permissions"]

    page = client.get(f"{PAGES}/hero", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert page.status_code == 200


def test_login_rejects_bad_credentials(client, users):
    response = client.post("/api/auth/login", json={"email": "editor@example.com", "password": "wrong"})
    assert response.status_code == 401


def test_viewer_cannot_save(client, auth):
    response = save(client, auth("Viewer"))

    assert response.status_code == 403
    assert response.get_json()["message"] == "Missing permission: pages:edit"


# ------------------------
# Pages & drafts
# ------------------------

def test_pages_are_created_on_first_reference(client, auth):
    first = client.get(f"{PAGES}/hero", headers=auth("Viewer"))
    second = client.get(f"{PAGES}/hero", headers=auth("Viewer"))

    assert first.status_code == 200
    data = first.get_json()["data"]
    assert data["slug"] == "hero"
    assert data["status"] == "draft"
    assert data["content_blocks"] == []
    assert data["workflow"] is None or data["workflow"]["state"] == "draft"
    assert second.get_json()["data"]["id"] == data["id"]


def test_invalid_slug_is_rejected(client, auth):
    response = client.get(f"{PAGES}/Hero_Section", headers=auth("Viewer"))
    assert response.status_code == 400


def test_save_draft_records_a_version(client, auth):
    response = save(client, auth("Editor"), notes="first pass")

    assert response.status_code == 200
    page = response.get_json()["data"]
    assert [b["key"] for b in page["content_blocks"]] == ["hero_title", "hero_points", "hero_cta"]
    assert page["content_blocks"][1]["value"] == {"en": ["Litigation", "Arbitration"], "ar": []}
    assert page["title"] == {"en": "Hero", "ar": "الرئيسية"}
    assert page["status"] == "draft"
    assert page["last_edited_by"] == "Eli Editor"
    assert page["workflow"]["has_unpublished_changes"] is True
    assert page["workflow"]["draft_id"]

    history = client.get(f"{PAGES}/hero/history", headers=auth("Viewer")).get_json()["data"]
    assert len(history) == 1
    assert history[0]["version"] == 1
    assert history[0]["editor"] == "Eli Editor"
    assert history[0]["notes"] == "first pass"


def test_resaving_replaces_blocks_in_the_new_order(client, auth):
    save(client, auth("Editor"))
    response = save(client, auth("Editor"), blocks=list(reversed(HERO_BLOCKS)))

    assert response.status_code == 200
    keys = [b["key"] for b in response.get_json()["data"]["content_blocks"]]
    assert keys == ["hero_cta", "hero_points", "hero_title"]

    history = client.get(f"{PAGES}/hero/history", headers=auth("Viewer")).get_json()["data"]
    assert [v["version"] for v in history] == [2, 1]


def test_preview_status_is_saveable(client, auth):
    response = save(client, auth("Editor"), status="preview")
    assert response.get_json()["data"]["status"] == "preview"


def test_duplicate_keys_are_rejected(client, auth):
    blocks = HERO_BLOCKS + [{"key": "hero_title", "type": "text", "value": {"en": "again"}}]
    response = save(client, auth("Editor"), blocks=blocks)

    assert response.status_code == 400
    assert "Duplicate block key 'hero_title'" in response.get_json()["message"]


def test_value_shape_follows_block_type(client, auth):
    response = save(client, auth("Editor"), blocks=[
        {"key": "points", "type": "list", "value": {"en": "not a list"}},
    ])
    assert response.status_code == 400

    response = save(client, auth("Editor"), blocks=[
        {"key": "points", "type": "video", "value": {"en": "x"}},
    ])
    assert response.status_code == 400


def test_drafts_cannot_be_saved_as_published(client, auth):
    response = save(client, auth("Editor"), status="published")
    assert response.status_code == 400


def test_optimistic_lock(client, auth):
    loaded = client.get(f"{PAGES}/hero", headers=auth("Editor")).get_json()["data"]
    stale = loaded["updated_at"]

    first = client.put(
        f"{PAGES}/hero",
        json={"content_blocks": HERO_BLOCKS},
        headers={**auth("Editor"), "If-Unmodified-Since": stale},
    )
    assert first.status_code == 200
    fresh = first.get_json()["data"]["updated_at"]

    ok = client.put(
        f"{PAGES}/hero",
        json={"title_en": "Mine"},
        headers={**auth("Editor"), "If-Unmodified-Since": fresh},
    )
    assert ok.status_code == 200

    conflict = client.put(
        f"{PAGES}/hero",
        json={"title_en": "Theirs"},
        headers={**auth("Admin"), "If-Unmodified-Since": stale},
    )
    assert conflict.status_code == 409

    bad = client.put(
        f"{PAGES}/hero",
        json={"title_en": "?"},
        headers={**auth("Admin"), "If-Unmodified-Since": "yesterday-ish"},
    )
    assert bad.status_code == 400


def test_list_pages_filters_by_status(client, auth):
    save(client, auth("Editor"), slug="hero")
    save(client, auth("Editor"), slug="about", status="preview")

    everything = client.get(PAGES, headers=auth("Viewer")).get_json()["data"]
    previews = client.get(f"{PAGES}?status=preview", headers=auth("Viewer")).get_json()["data"]

    assert [p["slug"] for p in everything] == ["about", "hero"]
    assert [p["slug"] for p in previews] == ["about"]


# ------------------------
# Preview
# ------------------------

def test_preview_does_not_touch_status_or_workflow(client, auth):
    save(client, auth("Editor"))
    response = client.post(
        f"{PAGES}/hero/preview",
        json={"title_en": "Preview title", "content_blocks": HERO_BLOCKS[:1]},
        headers=auth("Viewer"),
    )

    assert response.status_code == 200
    page = response.get_json()["data"]
    assert page["preview_url"].startswith("/preview/hero?draftId=")
    assert page["status"] == "draft"
    assert page["workflow"]["state"] == "draft"
    assert page["title"]["en"] == "Hero"

    history = client.get(f"{PAGES}/hero/history", headers=auth("Viewer")).get_json()["data"]
    assert len(history) == 1

    shared = client.get(page["preview_url"])
    assert shared.status_code == 200
    snapshot = shared.get_json()["data"]
    assert snapshot["page"]["title"]["en"] == "Preview title"
    assert [b["key"] for b in snapshot["content_blocks"]] == ["hero_title"]


def test_unknown_preview_id_is_not_found(client, auth):
    save(client, auth("Editor"))
    assert client.get("/preview/hero?draftId=nope").status_code == 404
    assert client.get("/preview/hero").status_code == 200


# ------------------------
# Workflow
# ------------------------

def test_review_cycle(client, auth):
    saved = save(client, auth("Editor")).get_json()["data"]
    draft_id = saved["workflow"]["draft_id"]

    requested = client.post(f"{PAGES}/hero/request-approval", json={"draft_id": draft_id, "notes": "Ready"}, headers=auth("Editor"))
    assert requested.status_code == 200
    assert requested.get_json()["data"]["workflow"]["state"] == "pendingReview"
    assert event_types(requested) == ["submitted"]
    assert requested.get_json()["data"]["workflow"]["events"][0]["actor"] == "Eli Editor"

    assert client.post(f"{PAGES}/hero/approve", headers=auth("Editor")).status_code == 403

    approved = client.post(f"{PAGES}/hero/approve", json={"draft_id": draft_id}, headers=auth("Admin"))
    assert approved.status_code == 200
    page = approved.get_json()["data"]
    assert page["status"] == "published"
    assert page["published_at"]
    assert page["workflow"]["state"] == "published"
    assert page["workflow"]["has_unpublished_changes"] is False
    assert event_types(approved) == ["submitted", "approved", "published"]

    history = client.get(f"{PAGES}/hero/history", headers=auth("Viewer")).get_json()["data"]
    assert [(v["version"], v["status"]) for v in history] == [(2, "published"), (1, "draft")]

    public = client.get("/api/website/pages/hero")
    assert public.status_code == 200
    assert public.get_json()["data"]["content_blocks"][0]["value"]["en"] == "Trusted counsel"


def test_request_approval_twice_is_illegal(client, auth):
    save(client, auth("Editor"))
    client.post(f"{PAGES}/hero/request-approval", headers=auth("Editor"))

    again = client.post(f"{PAGES}/hero/request-approval", headers=auth("Editor"))
    assert again.status_code == 409
    assert again.get_json()["error"] == "IllegalTransition"


def test_acting_on_a_superseded_draft_conflicts(client, auth):
    old = save(client, auth("Editor")).get_json()["data"]["workflow"]["draft_id"]
    save(client, auth("Editor"), title_en="Newer")

    response = client.post(f"{PAGES}/hero/request-approval", json={"draft_id": old}, headers=auth("Editor"))
    assert response.status_code == 409
    assert response.get_json()["error"] == "StaleDraft"


def test_reject_returns_to_draft(client, auth):
    save(client, auth("Editor"))
    client.post(f"{PAGES}/hero/request-approval", headers=auth("Editor"))

    rejected = client.post(f"{PAGES}/hero/reject", json={"notes": "Arabic title missing"}, headers=auth("Admin"))

    assert rejected.status_code == 200
    workflow = rejected.get_json()["data"]["workflow"]
    assert workflow["state"] == "draft"
    assert workflow["events"][-1]["type"] == "rejected"
    assert workflow["events"][-1]["notes"] == "Arabic title missing"


def test_publish_directly_requires_content(client, auth):
    client.get(f"{PAGES}/empty", headers=auth("Admin"))

    response = client.post(f"{PAGES}/empty/publish", headers=auth("Admin"))
    assert response.status_code == 400
    assert response.get_json()["message"] == "Cannot publish page without content blocks."

    assert client.post(f"{PAGES}/empty/publish", headers=auth("Editor")).status_code == 403


def test_editing_a_published_page_reopens_review(client, auth):
    save(client, auth("Admin"))
    client.post(f"{PAGES}/hero/publish", headers=auth("Admin"))

    edited = save(client, auth("Editor"), title_en="Updated")
    workflow = edited.get_json()["data"]["workflow"]
    assert workflow["state"] == "published"
    assert workflow["has_unpublished_changes"] is True

    requested = client.post(f"{PAGES}/hero/request-approval", headers=auth("Editor"))
    assert requested.status_code == 200
    assert requested.get_json()["data"]["workflow"]["state"] == "pendingReview"


def test_schedule_validation(client, auth):
    save(client, auth("Editor"))

    past = client.post(f"{PAGES}/hero/schedule", json={"scheduled_for": "2001-01-01T00:00:00Z"}, headers=auth("Editor"))
    assert past.status_code == 409

    garbage = client.post(f"{PAGES}/hero/schedule", json={"scheduled_for": "someday"}, headers=auth("Editor"))
    assert garbage.status_code == 400

    missing = client.post(f"{PAGES}/hero/schedule", json={}, headers=auth("Editor"))
    assert missing.status_code == 400


def test_cancel_returns_to_review_when_scheduled_from_review(client, auth):
    save(client, auth("Editor"))
    client.post(f"{PAGES}/hero/request-approval", headers=auth("Editor"))

    scheduled = client.post(f"{PAGES}/hero/schedule", json={"scheduled_for": future(), "notes": "Launch"}, headers=auth("Editor"))
    assert scheduled.status_code == 200
    workflow = scheduled.get_json()["data"]["workflow"]
    assert workflow["state"] == "scheduled"
    assert workflow["scheduled_for"]

    queue = client.get(f"{PAGES}/publishing-queue", headers=auth("Viewer")).get_json()["data"]
    assert [(q["slug"], q["state"]) for q in queue] == [("hero", "scheduled")]

    cancelled = client.delete(f"{PAGES}/hero/schedule", headers=auth("Editor"))
    assert cancelled.status_code == 200
    workflow = cancelled.get_json()["data"]["workflow"]
    assert workflow["state"] == "pendingReview"
    assert workflow["scheduled_for"] is None
    assert [e["type"] for e in workflow["events"]] == ["submitted", "scheduled", "cancelled"]


def test_cancel_without_a_schedule_is_illegal(client, auth):
    save(client, auth("Editor"))
    assert client.delete(f"{PAGES}/hero/schedule", headers=auth("Admin")).status_code == 409
    assert client.delete(f"{PAGES}/hero/schedule", headers=auth("Viewer")).status_code == 403


def test_publishing_queue_lists_scheduled_first(client, auth):
    save(client, auth("Editor"), slug="hero")
    save(client, auth("Editor"), slug="about")
    client.post(f"{PAGES}/hero/request-approval", headers=auth("Editor"))
    client.post(f"{PAGES}/about/schedule", json={"scheduled_for": future(hours=3)}, headers=auth("Editor"))

    queue = client.get(f"{PAGES}/publishing-queue", headers=auth("Viewer")).get_json()["data"]

    assert [(q["slug"], q["state"]) for q in queue] == [("about", "scheduled"), ("hero", "pendingReview")]
    assert queue[1]["submitted_by"] == "Eli Editor"


def test_publish_all_skips_empty_pages(client, auth):
    save(client, auth("Editor"), slug="hero")
    client.get(f"{PAGES}/contact", headers=auth("Editor"))

    assert client.post(f"{PAGES}/publish-all", headers=auth("Editor")).status_code == 403

    response = client.post(f"{PAGES}/publish-all", headers=auth("Admin"))
    assert response.status_code == 200
    result = response.get_json()["data"]
    assert result["published"] == ["hero"]
    assert result["skipped"] == ["contact"]

    again = client.post(f"{PAGES}/publish-all", headers=auth("Admin")).get_json()["data"]
    assert again["published"] == []


# ------------------------
# Activity, media, public
# ------------------------

def test_activity_is_cursor_paginated(client, auth):
    save(client, auth("Editor"), slug="hero")
    save(client, auth("Editor"), slug="about")
    client.post(f"{PAGES}/hero/request-approval", headers=auth("Editor"))

    first = client.get("/api/admin/website/activity?limit=2", headers=auth("Viewer")).get_json()
    assert len(first["data"]) == 2
    assert first["meta"]["has_more"] is True

    seen = [entry["id"] for entry in first["data"]]
    cursor = first["meta"]["next_cursor"]
    while cursor:
        page = client.get(
            "/api/admin/website/activity",
            query_string={"limit": 2, "cursor": cursor},
            headers=auth("Viewer"),
        ).get_json()
        seen.extend(entry["id"] for entry in page["data"])
        cursor = page["meta"]["next_cursor"]

    assert len(seen) == len(set(seen))
    actions = {entry["action"] for entry in client.get("/api/admin/website/activity?limit=100", headers=auth("Viewer")).get_json()["data"]}
    assert {"page.create", "page.save_draft", "page.request_approval"} <= actions


def test_activity_rejects_a_bad_cursor(client, auth):
    response = client.get("/api/admin/website/activity?cursor=garbage", headers=auth("Viewer"))
    assert response.status_code == 400


def test_media_upload(client, auth):
    response = client.post(
        "/api/admin/website/media",
        data={"file": (io.BytesIO(b"\x89PNG fake"), "Firm Logo.png")},
        content_type="multipart/form-data",
        headers=auth("Editor"),
    )

    assert response.status_code == 201
    stored = response.get_json()["data"]
    assert stored["url"].startswith("/media/") and stored["url"].endswith(".png")
    assert stored["filename"] == "Firm_Logo.png"

    served = client.get(stored["url"])
    assert served.status_code == 200
    assert served.data == b"\x89PNG fake"
    served.close()


def test_media_upload_rejects_other_files(client, auth):
    response = client.post(
        "/api/admin/website/media",
        data={"file": (io.BytesIO(b"#!/bin/sh"), "run.sh")},
        content_type="multipart/form-data",
        headers=auth("Editor"),
    )
    assert response.status_code == 400

    viewer = client.post(
        "/api/admin/website/media",
        data={"file": (io.BytesIO(b"x"), "a.png")},
        content_type="multipart/form-data",
        headers=auth("Viewer"),
    )
    assert viewer.status_code == 403


def test_unpublished_pages_are_not_public(client, auth):
    save(client, auth("Editor"))
    assert client.get("/api/website/pages/hero").status_code == 404
    assert client.get("/api/website/pages/missing").status_code == 404


def test_openapi_document_is_served(client):
    response = client.get("/openapi/website.yaml")
    assert response.status_code == 200
    assert b"/api/admin/website/pages/{slug}" in response.data
    response.close()
