from website_admin.extensions import db
from .base import BaseModel


class Page(BaseModel):
    __tablename__ = "pages"

    slug = db.Column(db.String(200), nullable=False, unique=True, index=True)
    title_en = db.Column(db.String(200), nullable=True)
    title_ar = db.Column(db.String(200), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="draft", index=True)
    # draft | preview | published | unlinked

    draft_updated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    published_at = db.Column(db.DateTime(timezone=True), nullable=True)
    last_edited_by = db.Column(db.String(120), nullable=True)

    # Ordered content blocks (editorial order = display order)
    blocks = db.relationship(
        "ContentBlock",
        back_populates="page",
        order_by="ContentBlock.position",
        cascade="all, delete-orphan",
    )

    workflow = db.relationship(
        "PageWorkflow",
        back_populates="page",
        uselist=False,
        cascade="all, delete-orphan",
    )
