import webbrowser
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode, urljoin

PREVIEW_PATH = "/preview"


def fallback_preview_url(slug: str, draft_id: Optional[str] = None) -> str:
    base = f"{PREVIEW_PATH}/{slug}"
    return f"{base}?{urlencode({'draftId': draft_id})}" if draft_id else base


class PreviewGenerator:
    """
    Shareable preview links for the current draft.

    Requesting a preview never changes the page status or workflow state.
    """

    def __init__(
        self,
        slug: str,
        api,
        *,
        base_url: Optional[str] = None,
        opener: Callable[[str], Any] = webbrowser.open_new_tab,
    ):
        self.slug = slug
        self.api = api
        self.base_url = base_url
        self.opener = opener
        self.last_url: Optional[str] = None
        self.last_page: Optional[Dict[str, Any]] = None

    def request_preview(self, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        page = self.api.preview(self.slug, payload)
        self.last_page = page
        self.last_url = self.resolve_url(page)
        return page

    def resolve_url(self, page: Optional[Dict[str, Any]]) -> str:
        page = page or {}
        if page.get("preview_url"):
            return page["preview_url"]
        workflow = page.get("workflow") or {}
        return fallback_preview_url(self.slug, workflow.get("draft_id"))

    def absolute_url(self, url: str) -> str:
        return urljoin(self.base_url, url) if self.base_url else url

    def open_in_new_tab(self, payload: Optional[Dict[str, Any]] = None) -> str:
        """Refresh the link, then open it in the browser."""
        page = self.request_preview(payload)
        url = self.absolute_url(self.resolve_url(page))
        self.opener(url)
        return url
