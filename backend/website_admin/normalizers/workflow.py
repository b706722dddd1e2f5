from website_admin.utils.timestamps import to_iso


def normalize_event(event):
    return {
        "id": event.id,
        "type": event.type,
        "actor": event.actor,
        "notes": event.notes,
        "timestamp": to_iso(event.timestamp),
    }


def normalize_workflow(workflow):
    if workflow is None:
        return None

    return {
        "state": workflow.state,
        "draft_id": workflow.draft_id,
        "scheduled_for": to_iso(workflow.scheduled_for) if workflow.state == "scheduled" else None,
        "assigned_to": workflow.assigned_to,
        "has_unpublished_changes": bool(workflow.has_unpublished_changes),
        "events": [normalize_event(e) for e in workflow.events],
    }


def normalize_queue_item(workflow):
    page = workflow.page
    return {
        "slug": page.slug,
        "title": page.title_en or page.title_ar or page.slug,
        "state": workflow.state,
        "draft_id": workflow.draft_id,
        "scheduled_for": to_iso(workflow.scheduled_for),
        "last_updated": to_iso(page.draft_updated_at or page.updated_at),
        "submitted_by": workflow.submitted_by,
        "approved_by": workflow.approved_by,
    }
