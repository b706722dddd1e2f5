from .audit_log import AuditLog
from .content_block import ContentBlock
from .page import Page
from .page_preview import PagePreview
from .page_version import PageVersion
from .user import User
from .workflow import PageWorkflow, WorkflowEvent

__all__ = [
    "AuditLog",
    "ContentBlock",
    "Page",
    "PagePreview",
    "PageVersion",
    "PageWorkflow",
    "User",
    "WorkflowEvent",
]
