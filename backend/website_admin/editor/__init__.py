"""Editor session library for the website content API."""

from .client import PagesApi
from .errors import (
    ActionInProgress,
    ApiError,
    ConflictError,
    ContentValidationError,
    EditorError,
    PermissionDenied,
)
from .notices import Notice, NoticeLog
from .permissions import PermissionOracle, StaticPermissions
from .session import EditorSession

__all__ = [
    "ActionInProgress",
    "ApiError",
    "ConflictError",
    "ContentValidationError",
    "EditorError",
    "EditorSession",
    "Notice",
    "NoticeLog",
    "PagesApi",
    "PermissionDenied",
    "PermissionOracle",
    "StaticPermissions",
]
