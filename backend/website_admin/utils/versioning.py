from website_admin.extensions import db


def snapshot_blocks(blocks):
    return [
        {
            "key": b.key,
            "type": b.type,
            "value": b.value or {},
        }
        for b in sorted(blocks, key=lambda b: b.position)
    ]


def snapshot_page(page):
    return {
        "page": {
            "id": page.id,
            "slug": page.slug,
            "title": {"en": page.title_en, "ar": page.title_ar},
            "status": page.status,
        },
        "content_blocks": snapshot_blocks(page.blocks),
    }


def snapshot_payload(page, payload):
    """Snapshot of a draft payload that has not been written to the page."""
    blocks = payload.get("content_blocks")
    if blocks is None:
        blocks = snapshot_blocks(page.blocks)

    return {
        "page": {
            "id": page.id,
            "slug": page.slug,
            "title": {
                "en": payload.get("title_en", page.title_en),
                "ar": payload.get("title_ar", page.title_ar),
            },
            "status": page.status,
        },
        "content_blocks": [
            {
                "key": b["key"],
                "type": b.get("type") or "text",
                "value": b.get("value") or {},
            }
            for b in blocks
        ],
    }


def next_version(page_id):
    from website_admin.models.page_version import PageVersion

    last = (
        db.session.query(db.func.max(PageVersion.version))
        .filter(PageVersion.page_id == page_id)
        .scalar()
    )
    return (last or 0) + 1
