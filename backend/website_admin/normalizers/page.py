from website_admin.utils.timestamps import to_iso
from .block import normalize_block
from .workflow import normalize_workflow


def normalize_page(page, preview_url=None):
    """
    Admin representation of a page (the editor's PageContent).

    ``content`` duplicates ``content_blocks`` for older landing clients.
    """
    blocks = [normalize_block(b) for b in sorted(page.blocks, key=lambda b: b.position)]

    return {
        "id": page.id,
        "slug": page.slug,
        "title": {"en": page.title_en, "ar": page.title_ar},
        "content_blocks": blocks,
        "content": blocks,
        "status": page.status,
        "draft_updated_at": to_iso(page.draft_updated_at),
        "published_at": to_iso(page.published_at),
        "preview_url": preview_url,
        "last_edited_by": page.last_edited_by,
        "created_at": to_iso(page.created_at),
        "updated_at": to_iso(page.updated_at),
        "workflow": normalize_workflow(page.workflow),
    }


def normalize_public_page(version):
    """Published content as served to the landing site."""
    snapshot = version.snapshot or {}
    page = snapshot.get("page", {})
    return {
        "slug": page.get("slug"),
        "title": page.get("title", {"en": None, "ar": None}),
        "content_blocks": snapshot.get("content_blocks", []),
        "version": version.version,
        "published_at": to_iso(version.created_at),
    }
