from typing import Dict, FrozenSet

# Capabilities gating page/content actions
PAGES_VIEW = "pages:view"
PAGES_EDIT = "pages:edit"
PAGES_PUBLISH = "pages:publish"
PAGES_APPROVE = "pages:approve"
PAGES_SCHEDULE = "pages:schedule"
PAGES_BULK_PUBLISH = "pages:bulk-publish"
MEDIA_UPLOAD = "media:upload"
ANALYTICS_VIEW = "analytics:view"

ALL_CAPABILITIES: FrozenSet[str] = frozenset({
    PAGES_VIEW,
    PAGES_EDIT,
    PAGES_PUBLISH,
    PAGES_APPROVE,
    PAGES_SCHEDULE,
    PAGES_BULK_PUBLISH,
    MEDIA_UPLOAD,
    ANALYTICS_VIEW,
})

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "Admin": ALL_CAPABILITIES,
    "Editor": frozenset({PAGES_VIEW, PAGES_EDIT, PAGES_SCHEDULE, MEDIA_UPLOAD}),
    "Viewer": frozenset({PAGES_VIEW, ANALYTICS_VIEW}),
}

DEFAULT_ROLE = "Viewer"


def permissions_for(role: str | None, extra=None) -> FrozenSet[str]:
    """
    Resolve the capability set of a role plus any explicitly granted extras.
    Unknown roles fall back to the viewer set.
    """
    base = ROLE_PERMISSIONS.get(role or DEFAULT_ROLE, ROLE_PERMISSIONS[DEFAULT_ROLE])
    granted = {p for p in (extra or []) if p in ALL_CAPABILITIES}
    return frozenset(base | granted)
