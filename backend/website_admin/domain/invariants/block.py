from website_admin.domain.content import LOCALES, MEDIA_TYPES, BlockType
from .exceptions import InvariantViolation

MAX_KEY_LENGTH = 120


def assert_block_keys(blocks):
    """
    Every block needs a non-empty key, unique within the page.
    The error names the first offending block.
    """
    seen = set()
    for index, block in enumerate(blocks, start=1):
        key = (block.get("key") or "").strip()
        if not key:
            raise InvariantViolation(f"Block #{index} is missing a key.")
        if len(key) > MAX_KEY_LENGTH:
            raise InvariantViolation(
                f"Block key '{key[:20]}...' exceeds {MAX_KEY_LENGTH} characters."
            )
        if key in seen:
            raise InvariantViolation(f"Duplicate block key '{key}' (block #{index}).")
        seen.add(key)


def assert_block_value(block):
    key = block.get("key")

    try:
        block_type = BlockType.coerce(block.get("type"))
    except ValueError:
        raise InvariantViolation(
            f"Block '{key}' has unsupported type '{block.get('type')}'."
        )

    value = block.get("value")
    if value is None:
        return
    if not isinstance(value, dict):
        raise InvariantViolation(f"Block '{key}' value must be an object keyed by locale.")

    unknown = set(value) - set(LOCALES)
    if unknown:
        raise InvariantViolation(
            f"Block '{key}' has unsupported locales: {sorted(unknown)}"
        )

    for locale, localized in value.items():
        if localized is None or block_type is BlockType.JSON:
            continue

        if block_type is BlockType.LIST:
            if not isinstance(localized, list) or not all(isinstance(i, str) for i in localized):
                raise InvariantViolation(
                    f"List block '{key}' ({locale}) must be a list of strings."
                )
        elif not isinstance(localized, str):
            kind = "media URL" if block_type in MEDIA_TYPES else "text"
            raise InvariantViolation(
                f"Block '{key}' ({locale}) must be a {kind} string."
            )
