"""
Conversion between stored block values and the text an editor types.

Every member of :class:`BlockType` has exactly one codec; adding a type
without a codec fails at import time.
"""
import json
from typing import Any, Callable, Dict, NamedTuple

from website_admin.domain.content import BlockType
from .errors import ContentValidationError


class Codec(NamedTuple):
    serialize: Callable[[Any], str]
    deserialize: Callable[[str], Any]


def _serialize_list(value: Any) -> str:
    if isinstance(value, list):
        return "\n".join(str(item) for item in value)
    return ""


def _deserialize_list(text: str) -> list:
    return [line.strip() for line in text.split("\n") if line.strip()]


def _serialize_json(value: Any) -> str:
    if value is None:
        return ""
    try:
        return json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def _deserialize_json(text: str) -> Any:
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ContentValidationError(
            f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})"
        ) from exc


def _serialize_scalar(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return str(value)


def _deserialize_scalar(text: str) -> Any:
    return text.strip() or None


CODECS: Dict[BlockType, Codec] = {
    BlockType.TEXT: Codec(_serialize_scalar, _deserialize_scalar),
    BlockType.LIST: Codec(_serialize_list, _deserialize_list),
    BlockType.JSON: Codec(_serialize_json, _deserialize_json),
    BlockType.IMAGE: Codec(_serialize_scalar, _deserialize_scalar),
    BlockType.MEDIA: Codec(_serialize_scalar, _deserialize_scalar),
}

_missing = set(BlockType) - set(CODECS)
if _missing:
    raise RuntimeError(f"No codec registered for block types: {sorted(t.value for t in _missing)}")


def serialize_value(value: Any, block_type) -> str:
    """Stored value -> editable text."""
    return CODECS[BlockType.coerce(block_type)].serialize(value)


def deserialize_value(text: str, block_type) -> Any:
    """
    Editable text -> stored value.

    Raises ContentValidationError for malformed JSON.
    """
    return CODECS[BlockType.coerce(block_type)].deserialize(text or "")
