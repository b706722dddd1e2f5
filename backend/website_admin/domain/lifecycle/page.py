DRAFT = "draft"
PREVIEW = "preview"
PUBLISHED = "published"
UNLINKED = "unlinked"

PAGE_STATUSES = (DRAFT, PREVIEW, PUBLISHED, UNLINKED)

# Statuses a client may request when saving a draft
SAVEABLE_STATUSES = frozenset({DRAFT, PREVIEW})
