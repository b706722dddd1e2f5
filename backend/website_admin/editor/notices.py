import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notice:
    """A non-blocking message for the person at the keyboard."""

    title: str
    description: Optional[str] = None
    variant: str = DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == DESTRUCTIVE


class NoticeLog:
    """
    Collects notices in order and forwards each one to an optional listener
    (a UI toast, a CLI printer).
    """

    def __init__(self, listener: Optional[Callable[[Notice], None]] = None):
        self._listener = listener
        self.notices: List[Notice] = []

    def notify(self, title: str, description: Optional[str] = None, *, variant: str = DEFAULT) -> Notice:
        notice = Notice(title=title, description=description, variant=variant)
        self.notices.append(notice)

        level = logging.WARNING if notice.is_error else logging.INFO
        logger.log(level, "%s%s", title, f": {description}" if description else "")

        if self._listener is not None:
            self._listener(notice)
        return notice

    def error(self, title: str, description: Optional[str] = None) -> Notice:
        return self.notify(title, description, variant=DESTRUCTIVE)

    @property
    def last(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    def clear(self) -> None:
        self.notices.clear()
