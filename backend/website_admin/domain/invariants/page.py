from website_admin.domain.lifecycle.page import SAVEABLE_STATUSES
from .block import assert_block_keys, assert_block_value
from .exceptions import InvariantViolation


def assert_page_payload(payload):
    """Validate a draft payload before it replaces the page's blocks."""
    blocks = payload.get("content_blocks")

    if blocks is not None:
        if not isinstance(blocks, list):
            raise InvariantViolation("content_blocks must be a list.")
        for block in blocks:
            if not isinstance(block, dict):
                raise InvariantViolation("Each content block must be an object.")

        assert_block_keys(blocks)

        for block in blocks:
            assert_block_value(block)

    status = payload.get("status")
    if status is not None and status not in SAVEABLE_STATUSES:
        raise InvariantViolation(
            f"Drafts can only be saved as {sorted(SAVEABLE_STATUSES)}, got '{status}'."
        )


def assert_page(page, publish=False):
    blocks = page.blocks

    if publish and not blocks:
        raise InvariantViolation("Cannot publish page without content blocks.")

    assert_block_keys([{"key": b.key} for b in blocks])
