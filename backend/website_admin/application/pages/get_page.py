import re
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from website_admin.extensions import db
from website_admin.models.page import Page
from website_admin.domain.invariants.exceptions import InvariantViolation, PageNotFound
from website_admin.utils.audit import log_action
from website_admin.utils.transaction import transactional

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{0,199}$")


def assert_slug(slug: str) -> None:
    if not slug or not SLUG_PATTERN.match(slug):
        raise InvariantViolation(
            "Slug must be lowercase letters, digits, '-' or '_' (max 200 characters)"
        )


def load_page(slug: str) -> Page:
    page = Page.query.filter_by(slug=slug).first()
    if not page:
        raise PageNotFound(f"Page '{slug}' not found")
    return page


def get_or_create_page(*, slug: str, actor_id: Optional[str] = None) -> Page:
    """
    Pages are created lazily the first time a slug is referenced.
    """
    page = Page.query.filter_by(slug=slug).first()
    if page:
        return page

    assert_slug(slug)

    page = Page()
    page.slug = slug
    page.status = "draft"

    try:
        with transactional():
            db.session.add(page)
            db.session.flush()

            log_action(
                action="page.create",
                entity_type="page",
                entity_id=page.id,
                payload={"slug": slug},
                actor_id=actor_id,
            )
    except IntegrityError:
        # Another request created it first
        current_app.logger.info(f"Page '{slug}' created concurrently; reloading")
        return load_page(slug)

    return page


def list_pages(*, status: Optional[str] = None) -> List[Page]:
    query = Page.query
    if status:
        query = query.filter_by(status=status)
    return query.order_by(Page.slug.asc()).all()
