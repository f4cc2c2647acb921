"""Debounced auto-save coordinator.

State machine::

    CLEAN --mutation--> DIRTY --debounce elapsed--> SAVING --ok--> CLEAN
                                                       |--failed--> ERROR

Every mutation restarts the debounce window. At most one save is in flight;
mutations made while a save is running cause exactly one follow-up save once
it completes. ``flush()`` bypasses the debounce so callers can make sure the
stored copy is current before acting on it (export, enhancement).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from pmtools.config import get_settings
from pmtools.errors import SaveError

logger = logging.getLogger(__name__)

SAVE_FAILED = "Save failed"


class SaveState(str, Enum):
    """Persistence state of the open document."""

    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"
    ERROR = "error"


class AutoSaveCoordinator:
    """Schedules persists of one document.

    ``save_fn`` must capture the document synchronously before its first
    ``await`` so that a save always writes the state as of its start.
    """

    def __init__(
        self,
        save_fn: Callable[[], Awaitable[object]],
        debounce_s: float | None = None,
        armed: bool = False,
    ):
        """Initialize coordinator.

        Args:
            save_fn: Coroutine function that persists the current document
            debounce_s: Quiet period before an automatic save (defaults to
                ``settings.autosave_debounce_ms``)
            armed: Whether the document already exists and may be saved
        """
        if debounce_s is None:
            debounce_s = get_settings().autosave_debounce_ms / 1000
        self._save_fn = save_fn
        self._debounce_s = debounce_s
        self._armed = armed
        self._version = 0
        self._saved_version = 0
        self._timer: asyncio.TimerHandle | None = None
        self._in_flight: asyncio.Task[bool] | None = None
        self.state = SaveState.CLEAN
        self.error: str | None = None

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def is_dirty(self) -> bool:
        return self._version != self._saved_version

    @property
    def is_saving(self) -> bool:
        return self._in_flight is not None

    @property
    def save_pending(self) -> bool:
        """True while a debounce timer is waiting to fire."""
        return self._timer is not None

    @property
    def status_text(self) -> str:
        """Indicator text for the editor header."""
        if self.state is SaveState.ERROR:
            return SAVE_FAILED
        if self.state is SaveState.SAVING:
            return "Saving…"
        if self.state is SaveState.DIRTY:
            return "Unsaved changes"
        return "All changes saved"

    def arm(self) -> None:
        """Allow saves; pending edits are scheduled right away."""
        self._armed = True
        if self.is_dirty:
            self._restart_timer()

    def reset(self) -> None:
        """Forget pending edits (a document was just loaded or replaced)."""
        self._cancel_timer()
        self._saved_version = self._version
        self.state = SaveState.CLEAN
        self.error = None

    def mark_dirty(self) -> None:
        """Record a mutation and restart the debounce window."""
        self._version += 1
        # A failed save stays visible until the next attempt
        if self._in_flight is None and self.state is not SaveState.ERROR:
            self.state = SaveState.DIRTY
        if self._armed:
            self._restart_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _restart_timer(self) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._debounce_s, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        # A running save picks the edit up as its follow-up
        if self._in_flight is not None or not self.is_dirty:
            return
        self._start_save()

    def _start_save(self) -> "asyncio.Task[bool]":
        self._in_flight = asyncio.ensure_future(self._save_once())
        return self._in_flight

    async def _save_once(self) -> bool:
        version = self._version
        self.state = SaveState.SAVING
        ok = False
        try:
            await self._save_fn()
        except Exception as e:
            self.error = str(e) or SAVE_FAILED
            self.state = SaveState.ERROR
            logger.warning(f"Auto-save failed: {self.error}")
        else:
            ok = True
            self._saved_version = max(self._saved_version, version)
            self.error = None
            self.state = SaveState.CLEAN if not self.is_dirty else SaveState.DIRTY
        finally:
            self._in_flight = None

        # Mutations during this save whose timer already fired get one follow-up
        if self._version != version and self._timer is None and self._armed:
            self._start_save()
        return ok

    async def flush(self, force: bool = False) -> None:
        """Persist now and wait for it.

        Args:
            force: Save even when nothing changed since the last save

        Raises:
            SaveError: If the document is not armed yet or the save failed
        """
        if not self._armed:
            raise SaveError("Document has not been created yet")

        self._cancel_timer()
        while self._in_flight is not None:
            await self._in_flight
        # Edits made while waiting restarted the timer; this flush covers them
        self._cancel_timer()

        if force or self.is_dirty or self.state is SaveState.ERROR:
            ok = await self._start_save()
            # A follow-up may have been started by a mutation during the save
            while self._in_flight is not None:
                ok = await self._in_flight
            if not ok:
                raise SaveError(self.error or SAVE_FAILED)

    async def aclose(self) -> None:
        """Cancel the pending timer and wait out any running save."""
        self._cancel_timer()
        while self._in_flight is not None:
            await self._in_flight
