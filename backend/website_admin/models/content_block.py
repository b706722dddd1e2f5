from website_admin.extensions import db
from .base import BaseModel


class ContentBlock(BaseModel):
    __tablename__ = "content_blocks"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False)
    key = db.Column(db.String(120), nullable=False)
    type = db.Column(db.String(20), nullable=False, default="text")  # text, list, json, image, media
    position = db.Column(db.Integer, nullable=False, default=0)
    value = db.Column(db.JSON, nullable=False, default=dict)  # {"en": ..., "ar": ...}

    page = db.relationship("Page", back_populates="blocks")

    __table_args__ = (
        db.UniqueConstraint("page_id", "key", name="uq_page_block_key"),
        db.Index("idx_block_page_position", "page_id", "position"),
    )
