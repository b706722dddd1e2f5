from sqlalchemy import event
from website_admin.extensions import db
from .base import BaseModel, utcnow


class PageWorkflow(BaseModel):
    __tablename__ = "page_workflows"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, unique=True)
    state = db.Column(db.String(20), nullable=False, default="draft", index=True)
    # draft | pendingReview | scheduled | published

    draft_id = db.Column(db.String(36), nullable=True)
    scheduled_for = db.Column(db.DateTime(timezone=True), nullable=True, index=True)
    assigned_to = db.Column(db.String(120), nullable=True)

    # State to fall back to when a scheduled publish is cancelled
    resume_state = db.Column(db.String(20), nullable=True)
    has_unpublished_changes = db.Column(db.Boolean, nullable=False, default=False)

    submitted_by = db.Column(db.String(120), nullable=True)
    approved_by = db.Column(db.String(120), nullable=True)

    page = db.relationship("Page", back_populates="workflow")
    events = db.relationship(
        "WorkflowEvent",
        back_populates="workflow",
        order_by=lambda: [WorkflowEvent.timestamp, WorkflowEvent.sequence],
    )


class WorkflowEvent(BaseModel):
    __tablename__ = "workflow_events"

    workflow_id = db.Column(db.String(36), db.ForeignKey("page_workflows.id"), nullable=False, index=True)
    sequence = db.Column(db.Integer, nullable=False, default=0)
    type = db.Column(db.String(20), nullable=False)
    # submitted | reviewed | approved | rejected | published | scheduled | cancelled
    actor = db.Column(db.String(120), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    workflow = db.relationship("PageWorkflow", back_populates="events")


@event.listens_for(WorkflowEvent, "before_update")
@event.listens_for(WorkflowEvent, "before_delete")
def prevent_event_mutation(mapper, connection, target):
    raise RuntimeError("Workflow events are append-only")
