"""
Autosave scheduler for canvas sessions.

Mutations re-arm a single debounce timer; when the canvas has been quiet for
the full delay, the scheduler asks its owner to commit. A manual save skips the
wait and cancels whatever timer is pending, so a stale autosave can't fire
after it.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

from loguru import logger

from journey_canvas import constants as const
from journey_canvas.exceptions import PersistenceCommitFailed


class CommitTrigger(str, Enum):
    """What caused a commit to the persistence service."""
    AUTOSAVE = "autosave"   # Debounce timer elapsed; notify silently
    MANUAL = "manual"       # User pressed save; confirm with a toast


@dataclass
class CommitResult:
    """Outcome of one commit attempt."""
    trigger: CommitTrigger
    success: bool
    skipped: bool = False
    error: Optional[str] = None
    committed_at: datetime = field(default_factory=datetime.now)

    @property
    def silent(self) -> bool:
        """Whether the UI should stay quiet about this commit."""
        return self.trigger == CommitTrigger.AUTOSAVE and self.success

    def to_dict(self) -> dict:
        return {
            "trigger": self.trigger.value,
            "success": self.success,
            "skipped": self.skipped,
            "error": self.error,
            "silent": self.silent,
            "committed_at": self.committed_at.isoformat(),
        }


# Performs the commit; returns False to report "nothing to commit", raises
# PersistenceCommitFailed when the write fails.
CommitCallback = Callable[[CommitTrigger], Awaitable[bool]]


class AutosaveScheduler:
    """
    Debounces canvas mutations into persistence commits.

    At most one timer is live at a time: each change cancels the pending
    timer and starts a fresh one. Commits are serialized so a manual save
    can't interleave with an autosave that is already writing.
    """

    def __init__(
        self,
        commit: CommitCallback,
        delay: float = const.AUTOSAVE_DELAY_SECONDS,
        on_result: Optional[Callable[[CommitResult], None]] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            commit: Coroutine function doing the actual write
            delay: Quiet period in seconds before an autosave fires
            on_result: Called with every CommitResult, success or failure
        """
        self._commit = commit
        self._on_result = on_result
        self.delay = delay
        self._pending: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self.last_result: Optional[CommitResult] = None
        self.commit_count = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def notify_change(self, reason: str = "position") -> None:
        """(Re)start the debounce timer. Must be called from the event loop."""
        self.cancel_pending()
        self._pending = asyncio.get_running_loop().create_task(self._debounce())
        logger.debug(f"Autosave re-armed by {reason} change ({self.delay}s)")

    def cancel_pending(self) -> bool:
        """Cancel the pending timer. Returns True if one was live."""
        task = self._pending
        self._pending = None
        if task is not None and not task.done():
            task.cancel()
            return True
        return False

    async def _debounce(self) -> None:
        await asyncio.sleep(self.delay)
        # Past this point a new change must arm a new timer, not cancel this commit
        self._pending = None
        await self._run(CommitTrigger.AUTOSAVE)

    async def save_now(self) -> CommitResult:
        """Commit immediately, superseding any pending autosave."""
        if self.cancel_pending():
            logger.debug("Manual save cancelled pending autosave")
        return await self._run(CommitTrigger.MANUAL)

    async def _run(self, trigger: CommitTrigger) -> CommitResult:
        async with self._lock:
            try:
                committed = await self._commit(trigger)
                result = CommitResult(trigger=trigger, success=True, skipped=not committed)
                if committed:
                    self.commit_count += 1
            except PersistenceCommitFailed as e:
                logger.error(f"{trigger.value.capitalize()} commit failed: {e}")
                result = CommitResult(trigger=trigger, success=False, error=str(e))
        self.last_result = result
        if self._on_result is not None:
            self._on_result(result)
        return result

    async def close(self) -> None:
        """Cancel the timer and wait for any in-flight commit to finish."""
        self.cancel_pending()
        async with self._lock:
            pass
