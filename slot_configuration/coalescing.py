import asyncio
import logging
import time

from .conf import editor_setting

logger = logging.getLogger(__name__)


class SaveCoalescer:
    """
    Debounced writer for rapid resize and drag edits.

    ``schedule`` records the newest snapshot and re-arms the timer; only
    the snapshot present when the quiet period ends is written. A call to
    ``flush_now`` writes immediately and supersedes any pending timer.
    Writes never overlap: a flush waits for an in-flight write first.
    """

    def __init__(self, save, delay=None, on_error=None):
        self._save = save
        self._on_error = on_error
        self.delay = editor_setting("SAVE_DEBOUNCE_SECONDS") if delay is None else delay
        self._pending = None
        self._timer = None
        self._lock = asyncio.Lock()

    @property
    def pending(self):
        timer_armed = self._timer is not None and not self._timer.done()
        return timer_armed or self._lock.locked() or self._pending is not None

    def schedule(self, snapshot):
        self._pending = snapshot
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().create_task(self._flush_later())

    async def _flush_later(self):
        await asyncio.sleep(self.delay)
        self._timer = None
        try:
            await self._write()
        except Exception as exc:
            # nobody awaits the timer task, so hand the failure to the owner
            logger.warning(f"Debounced save failed: {exc}")
            if self._on_error is None:
                raise
            await self._on_error(exc)

    async def _write(self):
        async with self._lock:
            snapshot, self._pending = self._pending, None
            if snapshot is None:
                return None
            return await self._save(snapshot)

    async def flush_now(self, snapshot=None):
        if snapshot is not None:
            self._pending = snapshot
        self._cancel_timer()
        return await self._write()

    def cancel(self):
        self._cancel_timer()
        self._pending = None

    def _cancel_timer(self):
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None


class DragGuard:
    """Suppresses reloads for a grace window after a drop completes."""

    def __init__(self, grace=None, clock=time.monotonic):
        self.grace = editor_setting("DRAG_GRACE_SECONDS") if grace is None else grace
        self._clock = clock
        self._dragging = False
        self._released_at = None

    def start(self):
        self._dragging = True

    def release(self):
        self._dragging = False
        self._released_at = self._clock()

    @property
    def active(self):
        if self._dragging:
            return True
        if self._released_at is None:
            return False
        return self._clock() - self._released_at < self.grace
