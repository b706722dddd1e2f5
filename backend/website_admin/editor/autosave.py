import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 2.0


class AutosaveScheduler:
    """
    Debounced autosave with a single in-flight save slot.

    Every ``schedule()`` restarts the countdown; the save runs once the
    editor has been quiet for ``delay`` seconds. Saves (automatic or manual
    through ``run_exclusive``) never overlap.
    """

    def __init__(
        self,
        save_fn: Callable[[], Any],
        *,
        delay: float = DEFAULT_DELAY,
        timer_factory: Callable[..., Any] = threading.Timer,
        enabled: bool = True,
    ):
        self._save_fn = save_fn
        self.delay = delay
        self.enabled = enabled
        self._timer_factory = timer_factory
        self._timer = None
        self._closed = False
        self._state_lock = threading.Lock()
        self._save_lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self) -> bool:
        if not self.enabled or self._closed:
            return False

        with self._state_lock:
            if self._timer is not None:
                self._timer.cancel()

            def fire():
                self._fire(timer)

            timer = self._timer_factory(self.delay, fire)
            timer.daemon = True
            self._timer = timer
            timer.start()
        return True

    def cancel(self) -> None:
        with self._state_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def run_exclusive(self, fn: Callable[[], Any]) -> Any:
        """Run ``fn`` once no other save is in flight."""
        with self._save_lock:
            return fn()

    def close(self) -> None:
        # In-flight saves are left to finish
        self._closed = True
        self.cancel()

    def _fire(self, timer) -> None:
        with self._state_lock:
            if self._timer is not timer:
                return  # superseded or cancelled
            self._timer = None

        try:
            self.run_exclusive(self._save_fn)
        except Exception:
            logger.exception("Autosave raised unexpectedly")
