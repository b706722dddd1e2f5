from enum import Enum

LOCALES = ("en", "ar")


class BlockType(str, Enum):
    TEXT = "text"
    LIST = "list"
    JSON = "json"
    IMAGE = "image"
    MEDIA = "media"

    @classmethod
    def coerce(cls, raw) -> "BlockType":
        """Missing types default to text, as the editor has always treated them."""
        if raw is None or raw == "":
            return cls.TEXT
        if isinstance(raw, cls):
            return raw
        return cls(raw)


MEDIA_TYPES = frozenset({BlockType.IMAGE, BlockType.MEDIA})
