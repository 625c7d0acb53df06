"""
Optimistic delete with undo for bookmark lists.

A deleted bookmark disappears from the visible list immediately. The delete is
only sent to the API once its grace period passes without an undo. Pending deletes
are keyed by bookmark id, so several deletes can be undone independently.

Undo and timer expiry race for the same pending record; whichever pops it from
`pending` first wins and the other becomes a no-op. Both run on the event loop
thread, so the pop is never interleaved.
"""
import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 3.5
UNDO_LABEL = "Undo"


def get_grace_period() -> float:
    """Get the undo window (seconds) from environment."""
    return float(os.getenv("BOOKMARKS_DELETE_GRACE_PERIOD", str(DEFAULT_GRACE_PERIOD)))


def _bookmark_id(bookmark: Any) -> int:
    if isinstance(bookmark, Mapping):
        return bookmark["id"]
    return bookmark.id


@dataclass(frozen=True)
class Notice:
    """Dismissible message offering to undo the most recent delete."""

    message: str
    bookmark_id: int
    action_label: str = UNDO_LABEL


@dataclass
class PendingDelete:
    """A removed bookmark waiting for its delete to be committed."""

    bookmark: Any
    timer: asyncio.TimerHandle


class OptimisticDeleteController:
    """
    Tracks the visible bookmark list and the deletes that can still be undone.

    Args:
        bookmarks: Initial visible list (API dicts or objects with an `id`).
        commit: Coroutine function called with a bookmark id to delete it for real.
        grace_period: Seconds before a delete is committed. Defaults to
            BOOKMARKS_DELETE_GRACE_PERIOD or 3.5.
        on_change: Optional callback invoked whenever `visible` or `notice` changes.

    Must be used from a running event loop.
    """

    def __init__(
        self,
        bookmarks: Iterable[Any],
        commit: Callable[[int], Awaitable[object]],
        grace_period: float | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.visible: list[Any] = list(bookmarks)
        self.pending: dict[int, PendingDelete] = {}
        self.grace_period = get_grace_period() if grace_period is None else grace_period
        self.committed: list[int] = []
        self.failed: list[int] = []
        self._commit = commit
        self._on_change = on_change
        self._inflight: set[asyncio.Task] = set()

    @property
    def notice(self) -> Notice | None:
        """Undo notice for the most recent pending delete, or None when nothing is pending."""
        if not self.pending:
            return None
        latest = next(reversed(self.pending))
        count = len(self.pending)
        message = "Bookmark deleted" if count == 1 else f"{count} bookmarks deleted"
        return Notice(message=message, bookmark_id=latest)

    def delete(self, bookmark_id: int) -> bool:
        """
        Hide a bookmark and arm its commit timer.

        Returns False if the bookmark isn't visible (unknown or already pending).
        """
        if bookmark_id in self.pending:
            return False
        index = next(
            (i for i, b in enumerate(self.visible) if _bookmark_id(b) == bookmark_id),
            None,
        )
        if index is None:
            return False

        bookmark = self.visible.pop(index)
        timer = asyncio.get_running_loop().call_later(
            self.grace_period, self._expire, bookmark_id,
        )
        self.pending[bookmark_id] = PendingDelete(bookmark=bookmark, timer=timer)
        self._changed()
        return True

    def undo(self, bookmark_id: int | None = None) -> bool:
        """
        Cancel a pending delete and put the bookmark back at the top of the list.

        Without an id, undoes the most recent delete. Nothing is sent to the API.
        Returns False if there is no such pending delete (e.g. it already committed).
        """
        if bookmark_id is None:
            if not self.pending:
                return False
            bookmark_id = next(reversed(self.pending))

        record = self.pending.pop(bookmark_id, None)
        if record is None:
            return False

        record.timer.cancel()
        self.visible.insert(0, record.bookmark)
        self._changed()
        return True

    async def flush(self) -> None:
        """Commit every pending delete now and wait for all delete requests to finish."""
        for bookmark_id in list(self.pending):
            record = self.pending.pop(bookmark_id)
            record.timer.cancel()
            self._start_commit(bookmark_id)
        self._changed()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait for delete requests already sent to finish."""
        while self._inflight:
            await asyncio.gather(*self._inflight)

    async def aclose(self) -> None:
        """Drop pending deletes without committing them and wait for in-flight requests."""
        for record in self.pending.values():
            record.timer.cancel()
        self.pending.clear()
        self._changed()
        await self.wait_idle()

    def _expire(self, bookmark_id: int) -> None:
        record = self.pending.pop(bookmark_id, None)
        if record is None:
            return
        self._start_commit(bookmark_id)
        self._changed()

    def _start_commit(self, bookmark_id: int) -> None:
        task = asyncio.get_running_loop().create_task(self._run_commit(bookmark_id))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run_commit(self, bookmark_id: int) -> None:
        # Fire-and-forget: a failed delete is logged and not retried
        try:
            await self._commit(bookmark_id)
        except Exception:
            logger.warning("Delete of bookmark %s failed", bookmark_id, exc_info=True)
            self.failed.append(bookmark_id)
        else:
            self.committed.append(bookmark_id)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
