# website_admin/editor/draft.py
import json
import threading
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from website_admin.domain.content import LOCALES, BlockType
from website_admin.domain.invariants.block import MAX_KEY_LENGTH
from .content import deserialize_value, serialize_value
from .errors import ContentValidationError


@dataclass
class BlockForm:
    """One block as the editor holds it: every locale value as text."""

    id: str
    key: str = ""
    type: str = BlockType.TEXT.value
    values: Dict[str, str] = field(default_factory=lambda: {locale: "" for locale in LOCALES})


@dataclass
class PageForm:
    title: Dict[str, str] = field(default_factory=lambda: {locale: "" for locale in LOCALES})
    blocks: List[BlockForm] = field(default_factory=list)


def _new_block_id() -> str:
    return uuid.uuid4().hex


def form_from_page(page: Optional[Dict[str, Any]]) -> PageForm:
    if not page:
        return PageForm()

    title = page.get("title") or {}
    blocks = []
    for block in page.get("content_blocks") or []:
        block_type = block.get("type") or BlockType.TEXT.value
        value = block.get("value") or {}
        blocks.append(BlockForm(
            id=str(block.get("id") or block.get("key") or _new_block_id()),
            key=block.get("key") or "",
            type=block_type,
            values={locale: serialize_value(value.get(locale), block_type) for locale in LOCALES},
        ))

    return PageForm(
        title={locale: title.get(locale) or "" for locale in LOCALES},
        blocks=blocks,
    )


class PageDraftStore:
    """
    Local, unsaved form state of one page.

    The serialized form captured at load or after a successful save is the
    baseline; the draft is dirty whenever the current serialization differs.
    Mutations never touch the network.
    """

    def __init__(self, slug: str, *, required_locales: Iterable[str] = ()):
        self.slug = slug
        self.required_locales = tuple(required_locales)
        self.form = PageForm()
        self._baseline = self.snapshot()
        self._lock = threading.RLock()

    # ------------------------
    # State
    # ------------------------

    def load(self, page: Optional[Dict[str, Any]]) -> None:
        with self._lock:
            self.form = form_from_page(page)
            self._baseline = self.snapshot()

    def snapshot(self) -> str:
        return json.dumps(asdict(self.form), sort_keys=True, ensure_ascii=False)

    def is_dirty(self) -> bool:
        with self._lock:
            return self.snapshot() != self._baseline

    def mark_saved(self, snapshot: str) -> None:
        """Adopt the state that was sent as the new baseline."""
        with self._lock:
            self._baseline = snapshot

    # ------------------------
    # Edits
    # ------------------------

    def mutate(self, path: str, value: Any) -> None:
        """
        Edit one field. Paths: ``title_<locale>``, ``blocks.<i>.key``,
        ``blocks.<i>.type``, ``blocks.<i>.value_<locale>``.
        """
        with self._lock:
            if path.startswith("title_"):
                self.form.title[self._locale(path[len("title_"):], path)] = _text(value)
                return

            parts = path.split(".")
            if len(parts) != 3 or parts[0] != "blocks":
                raise KeyError(f"Unknown draft field: {path}")

            block = self._block(parts[1], path)
            name = parts[2]
            if name == "key":
                block.key = _text(value)
            elif name == "type":
                block.type = BlockType.coerce(value).value
            elif name.startswith("value_"):
                block.values[self._locale(name[len("value_"):], path)] = _text(value)
            else:
                raise KeyError(f"Unknown draft field: {path}")

    def add_block(self, key: str = "", block_type=BlockType.TEXT, index: Optional[int] = None) -> BlockForm:
        with self._lock:
            block = BlockForm(id=_new_block_id(), key=key, type=BlockType.coerce(block_type).value)
            if index is None:
                self.form.blocks.append(block)
            else:
                self.form.blocks.insert(index, block)
            return block

    def remove_block(self, index: int) -> BlockForm:
        with self._lock:
            return self.form.blocks.pop(index)

    def move_block(self, from_index: int, to_index: int) -> None:
        with self._lock:
            blocks = self.form.blocks
            if not (0 <= from_index < len(blocks) and 0 <= to_index < len(blocks)):
                raise IndexError(f"Cannot move block {from_index} to {to_index}")
            blocks.insert(to_index, blocks.pop(from_index))

    # ------------------------
    # Validation & payloads
    # ------------------------

    def validate(self) -> None:
        """Raise ContentValidationError for the first offending block."""
        self._content_blocks()

    def to_payload(self, status: Optional[str] = None) -> Dict[str, Any]:
        with self._lock:
            payload: Dict[str, Any] = {
                f"title_{locale}": self.form.title.get(locale, "") for locale in LOCALES
            }
            payload["content_blocks"] = self._content_blocks()
            if status:
                payload["status"] = status
            return payload

    def preview_payload(self) -> Dict[str, Any]:
        """Payload for a preview link; never raises on unfinished blocks."""
        with self._lock:
            payload: Dict[str, Any] = {
                f"title_{locale}": self.form.title.get(locale, "") for locale in LOCALES
            }
            payload["content_blocks"] = self.preview_blocks()
            return payload

    def preview_blocks(self) -> List[Dict[str, Any]]:
        """
        Best-effort blocks for rendering a live preview. Unparseable values
        fall back to their raw text and unnamed blocks get a placeholder key.
        """
        with self._lock:
            blocks = []
            for index, block in enumerate(self.form.blocks, start=1):
                value = {}
                for locale in LOCALES:
                    text = block.values.get(locale, "")
                    try:
                        value[locale] = deserialize_value(text, block.type)
                    except ContentValidationError:
                        value[locale] = text
                blocks.append({"key": block.key or f"block_{index}", "type": block.type, "value": value})
            return blocks

    def _content_blocks(self) -> List[Dict[str, Any]]:
        with self._lock:
            seen = set()
            blocks = []

            for index, block in enumerate(self.form.blocks, start=1):
                key = block.key.strip()
                if not key:
                    raise ContentValidationError(
                        f"Block #{index} is missing a key.", block_index=index - 1
                    )
                if len(key) > MAX_KEY_LENGTH:
                    raise ContentValidationError(
                        f"Block key '{key[:20]}...' exceeds {MAX_KEY_LENGTH} characters.",
                        block_key=key,
                        block_index=index - 1,
                    )
                if key in seen:
                    raise ContentValidationError(
                        f"Duplicate block key '{key}' (block #{index}).",
                        block_key=key,
                        block_index=index - 1,
                    )
                seen.add(key)

                value = {}
                for locale in LOCALES:
                    try:
                        value[locale] = deserialize_value(block.values.get(locale, ""), block.type)
                    except ContentValidationError as exc:
                        raise ContentValidationError(
                            f"Block '{key}' ({locale}): {exc.message}",
                            block_key=key,
                            block_index=index - 1,
                        ) from exc

                for locale in self.required_locales:
                    if value.get(locale) in (None, "", []):
                        raise ContentValidationError(
                            f"Block '{key}' needs a value for '{locale}'.",
                            block_key=key,
                            block_index=index - 1,
                        )

                blocks.append({"key": key, "type": block.type, "value": value})

            return blocks

    # ------------------------
    # Helpers
    # ------------------------

    def _block(self, raw_index: str, path: str) -> BlockForm:
        try:
            return self.form.blocks[int(raw_index)]
        except (ValueError, IndexError):
            raise KeyError(f"Unknown draft field: {path}") from None

    @staticmethod
    def _locale(locale: str, path: str) -> str:
        if locale not in LOCALES:
            raise KeyError(f"Unknown draft field: {path}")
        return locale


def _text(value: Any) -> str:
    return "" if value is None else str(value)
