from website_admin.extensions import db
from .base import BaseModel


class PagePreview(BaseModel):
    """Draft content captured for a shareable preview link.

    The id doubles as the ``draftId`` query parameter of the preview URL.
    Previews never touch the page's own status or workflow.
    """

    __tablename__ = "page_previews"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, index=True)
    snapshot = db.Column(db.JSON, nullable=False)
    created_by = db.Column(db.String(120), nullable=True)
