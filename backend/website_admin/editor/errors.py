from typing import Optional


class EditorError(Exception):
    """Base class for editor session failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ContentValidationError(EditorError):
    """Local draft content cannot be sent; names the offending block."""

    def __init__(self, message: str, *, block_key: Optional[str] = None, block_index: Optional[int] = None):
        super().__init__(message)
        self.block_key = block_key
        self.block_index = block_index


class PermissionDenied(EditorError):
    def __init__(self, message: str, *, capability: Optional[str] = None):
        super().__init__(message)
        self.capability = capability


class ActionInProgress(EditorError):
    """The same workflow action is already waiting on the server."""


class ApiError(EditorError):
    """
    The server answered with an error or could not be reached.
    ``server_message`` is the server's own wording, when it sent one.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


class ConflictError(ApiError):
    """The server refused a write made against stale content (HTTP 409)."""
