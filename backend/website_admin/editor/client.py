# website_admin/editor/client.py
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from website_admin.config import EditorConfig
from .errors import ApiError, ConflictError

logger = logging.getLogger(__name__)


def _server_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    # flask-jwt-extended reports auth failures under "msg"
    for field in ("message", "msg", "error"):
        if isinstance(body.get(field), str) and body[field]:
            return body[field]
    return None


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


class PagesApi:
    """
    HTTP client for the website content API.

    Responses arrive wrapped as ``{"data": ...}`` and are unwrapped here.
    Any non-2xx response raises ApiError (ConflictError for 409).
    """

    PAGES = "/api/admin/website/pages"

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url or EditorConfig.API_BASE_URL
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout if timeout is not None else EditorConfig.API_TIMEOUT,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @classmethod
    def login(cls, email: str, password: str, **kwargs) -> Tuple["PagesApi", Dict[str, Any]]:
        """Authenticate and return a client carrying the access token."""
        anonymous = cls(**kwargs)
        try:
            body = anonymous._request("POST", "/api/auth/login", json={"email": email, "password": password}, unwrap=False)
        finally:
            anonymous.close()
        return cls(token=body["access_token"], **kwargs), body.get("user") or {}

    # ------------------------
    # Transport
    # ------------------------

    def _request(self, method: str, path: str, *, unwrap: bool = True, headers=None, **kwargs) -> Any:
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Network error: {exc}") from exc

        if response.is_error:
            server_message = _server_message(response)
            error_cls = ConflictError if response.status_code == 409 else ApiError
            logger.info("%s %s -> %s %s", method, path, response.status_code, server_message or "")
            raise error_cls(
                server_message or f"Request failed with status {response.status_code}",
                status_code=response.status_code,
                server_message=server_message,
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except ValueError as exc:
            # A proxy or captive portal answering 200 with HTML
            logger.warning("%s %s -> %s with a non-JSON body", method, path, response.status_code)
            raise ApiError("Invalid JSON response", status_code=response.status_code) from exc
        return _unwrap(body) if unwrap else body

    def _page_path(self, slug: str, suffix: str = "") -> str:
        return f"{self.PAGES}/{slug}{suffix}"

    # ------------------------
    # Pages
    # ------------------------

    def list_pages(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._request("GET", self.PAGES, params=_drop_none({"status": status}))

    def get_page(self, slug: str) -> Dict[str, Any]:
        return self._request("GET", self._page_path(slug))

    def save_draft(self, slug: str, payload: Dict[str, Any], *, if_unmodified_since: Optional[str] = None) -> Dict[str, Any]:
        headers = {"If-Unmodified-Since": if_unmodified_since} if if_unmodified_since else None
        return self._request("PUT", self._page_path(slug), json=payload, headers=headers)

    def preview(self, slug: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("POST", self._page_path(slug, "/preview"), json=payload or {})

    def history(self, slug: str) -> List[Dict[str, Any]]:
        return self._request("GET", self._page_path(slug, "/history"))

    def published_page(self, slug: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/website/pages/{slug}")

    # ------------------------
    # Workflow
    # ------------------------

    def request_approval(self, slug: str, *, draft_id=None, notes=None, assigned_to=None) -> Dict[str, Any]:
        body = _drop_none({"draft_id": draft_id, "notes": notes, "assigned_to": assigned_to})
        return self._request("POST", self._page_path(slug, "/request-approval"), json=body)

    def approve(self, slug: str, *, draft_id=None, notes=None) -> Dict[str, Any]:
        body = _drop_none({"draft_id": draft_id, "notes": notes})
        return self._request("POST", self._page_path(slug, "/approve"), json=body)

    def reject(self, slug: str, *, notes=None) -> Dict[str, Any]:
        return self._request("POST", self._page_path(slug, "/reject"), json=_drop_none({"notes": notes}))

    def publish(self, slug: str, *, notes=None) -> Dict[str, Any]:
        return self._request("POST", self._page_path(slug, "/publish"), json=_drop_none({"notes": notes}))

    def schedule(self, slug: str, scheduled_for: str, *, notes=None, draft_id=None) -> Dict[str, Any]:
        body = _drop_none({"scheduled_for": scheduled_for, "notes": notes, "draft_id": draft_id})
        return self._request("POST", self._page_path(slug, "/schedule"), json=body)

    def cancel_schedule(self, slug: str) -> Dict[str, Any]:
        return self._request("DELETE", self._page_path(slug, "/schedule"))

    def publishing_queue(self, state: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._request("GET", f"{self.PAGES}/publishing-queue", params=_drop_none({"state": state}))

    def publish_all(self, slugs: Optional[List[str]] = None) -> Dict[str, Any]:
        return self._request("POST", f"{self.PAGES}/publish-all", json=_drop_none({"slugs": slugs}))

    # ------------------------
    # Activity & media
    # ------------------------

    def activity(self, *, limit: Optional[int] = None, cursor: Optional[str] = None) -> Dict[str, Any]:
        """One page of the audit log: ``{"data": [...], "meta": {...}}``."""
        params = _drop_none({"limit": limit, "cursor": cursor})
        return self._request("GET", "/api/admin/website/activity", params=params, unwrap=False)

    def upload_media(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> Dict[str, Any]:
        files = {"file": (filename, content, content_type)}
        return self._request("POST", "/api/admin/website/media", files=files)
