from typing import Dict, Iterable, List

from website_admin.extensions import db
from website_admin.models.page import Page
from website_admin.domain.lifecycle import page as page_lifecycle
from website_admin.utils.audit import log_action
from website_admin.utils.transaction import transactional
from .get_page import assert_slug
from .publishing import ensure_workflow


def sync_landing_sections(*, sections: Iterable[str]) -> Dict[str, List[str]]:
    """
    Align stored pages with the landing sections.

    - missing sections are created as drafts
    - pages whose slug is no longer a section become ``unlinked``
    - unlinked pages that are sections again get their status back
    """
    wanted = list(dict.fromkeys(sections))
    for slug in wanted:
        assert_slug(slug)

    pages = {p.slug: p for p in Page.query.all()}
    created, unlinked, relinked = [], [], []

    with transactional():
        for slug in wanted:
            page = pages.get(slug)
            if page is None:
                page = Page()
                page.slug = slug
                page.status = page_lifecycle.DRAFT
                db.session.add(page)
                ensure_workflow(page)
                created.append(slug)
            elif page.status == page_lifecycle.UNLINKED:
                page.status = page_lifecycle.PUBLISHED if page.published_at else page_lifecycle.DRAFT
                relinked.append(slug)

        for slug, page in pages.items():
            if slug not in wanted and page.status != page_lifecycle.UNLINKED:
                page.status = page_lifecycle.UNLINKED
                unlinked.append(slug)

        log_action(
            action="page.sync",
            entity_type="page",
            entity_id="*",
            payload={"created": created, "unlinked": unlinked, "relinked": relinked},
        )

    return {"created": created, "unlinked": sorted(unlinked), "relinked": relinked}
