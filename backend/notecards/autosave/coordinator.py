"""Autosave coordinator for one editable buffer (e.g. one open note).

Edits are held as a pending value and committed through an injected
persistence callback, either after a quiet period (trailing-edge debounce),
on every change, or on an explicit ``save()``. At most one persistence call
is in flight at a time; edits made while it runs are picked up by a
follow-up commit once it settles.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

from notecards.config import get_settings

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


# persist(value) -> None/True on success, False or an exception on failure
PersistFn = Callable[[Any], "Awaitable[bool | None] | bool | None"]
DirtyPredicate = Callable[[Any, Any], bool]
CallLater = Callable[[float, Callable[[], None]], TimerHandle]
ErrorCallback = Callable[["SaveFailedError"], None]


class SaveFailedError(Exception):
    """Recorded when the persistence callback fails."""

    pass


def trimmed_text_differs(pending: Any, committed: Any) -> bool:
    """Default dirtiness: strings compare trimmed, anything else with ``!=``."""
    if isinstance(pending, str) and isinstance(committed, str):
        return pending.strip() != committed.strip()
    return pending != committed


@dataclass(frozen=True)
class SaveStatus:
    """Read model exposed to the editor."""

    value: Any
    is_dirty: bool
    is_saving: bool
    last_error: SaveFailedError | None = None


class SaveCoordinator:
    """Decides when pending edits are persisted.

    States: clean -> dirty (edit) -> saving (timer or manual save) -> clean
    on success, or back to dirty on failure. Further edits while dirty
    restart the debounce timer.

    Args:
        initial_value: Content of the buffer when it was opened.
        persist: Sync or async callable storing a value.
        delay_ms: Debounce quiet period; defaults to ``AUTOSAVE_DELAY_MS``.
        save_on_every_change: Commit immediately instead of debouncing.
        is_dirty: ``(pending, committed) -> bool`` predicate.
        call_later: Timer factory ``(delay_seconds, callback) -> handle``;
            defaults to the running event loop's ``call_later``.
        on_error: Called with the ``SaveFailedError`` of a failed commit.
    """

    def __init__(
        self,
        initial_value: Any,
        persist: PersistFn,
        *,
        delay_ms: int | None = None,
        save_on_every_change: bool | None = None,
        is_dirty: DirtyPredicate = trimmed_text_differs,
        call_later: CallLater | None = None,
        on_error: ErrorCallback | None = None,
    ):
        settings = get_settings()
        self._persist = persist
        self._delay_ms = settings.autosave_delay_ms if delay_ms is None else delay_ms
        self._save_on_every_change = (
            settings.autosave_on_every_change if save_on_every_change is None else save_on_every_change
        )
        self._is_dirty = is_dirty
        self._call_later_factory = call_later
        self._on_error = on_error

        self._value = initial_value
        self._committed = initial_value
        self._is_saving = False
        self._last_error: SaveFailedError | None = None
        self._timer: TimerHandle | None = None
        self._commit_task: asyncio.Task | None = None
        self._commit_queued = False
        # Bumped on every identity switch so stale results are ignored.
        self._generation = 0
        self._closed = False

    @property
    def value(self) -> Any:
        return self._value

    @property
    def committed_value(self) -> Any:
        return self._committed

    @property
    def is_dirty(self) -> bool:
        return self._is_dirty(self._value, self._committed)

    @property
    def is_saving(self) -> bool:
        return self._is_saving

    @property
    def last_error(self) -> SaveFailedError | None:
        return self._last_error

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    @property
    def status(self) -> SaveStatus:
        return SaveStatus(
            value=self._value,
            is_dirty=self.is_dirty,
            is_saving=self._is_saving,
            last_error=self._last_error,
        )

    def set_value(self, new_value: Any) -> None:
        """Replace the pending value and re-run the scheduling rule."""
        self._value = new_value
        self._schedule()

    async def save(self) -> bool:
        """Commit the pending value now.

        Returns True when the value was persisted, False when there was
        nothing to do, another save was in flight, or the commit failed.
        """
        if self._is_saving or not self.is_dirty:
            return False

        self._is_saving = True
        self._cancel_timer()
        snapshot = self._value
        generation = self._generation
        succeeded = False

        try:
            result = self._persist(snapshot)
            if inspect.isawaitable(result):
                result = await result
            if result is False:
                raise SaveFailedError("persist callback reported failure")
            succeeded = True
            if generation == self._generation:
                self._committed = snapshot
                self._last_error = None
        except Exception as e:
            self._record_failure(e, generation)
        finally:
            self._is_saving = False

        # Edits made while the call was in flight (or a failed commit) are re-evaluated here.
        self._schedule(retrying=not succeeded)
        return succeeded

    def reset(self, initial_value: Any) -> None:
        """Switch to a different entity (e.g. another note).

        Cancels any pending commit so nothing of the new entity is written
        under the old one, and marks the new value as committed.
        """
        self._cancel_timer()
        self._cancel_queued_commit()
        self._generation += 1
        self._value = initial_value
        self._committed = initial_value
        self._last_error = None
        logger.debug(f"Autosave buffer reset (generation={self._generation})")

    def close(self) -> None:
        """Stop automatic saving; explicit ``save()`` still works."""
        self._closed = True
        self._cancel_timer()
        self._cancel_queued_commit()

    async def wait_idle(self) -> None:
        """Wait until commits started by the timer or by save-on-every-change settle."""
        while self._commit_task is not None and not self._commit_task.done():
            await asyncio.wait({self._commit_task})

    def _schedule(self, retrying: bool = False) -> None:
        if self._closed or self._is_saving:
            return

        self._cancel_timer()
        if not self.is_dirty:
            return

        if self._save_on_every_change and not retrying:
            self._start_commit()
        else:
            self._timer = self._call_later(self._delay_ms / 1000, self._on_timer)

    def _call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if self._call_later_factory is not None:
            return self._call_later_factory(delay, callback)
        return asyncio.get_running_loop().call_later(delay, callback)

    def _on_timer(self) -> None:
        self._timer = None
        self._start_commit()

    def _start_commit(self) -> None:
        # A queued commit reads the pending value when it runs, so one is enough.
        if self._commit_queued:
            return
        self._commit_queued = True
        self._commit_task = asyncio.get_running_loop().create_task(self._run_commit())

    async def _run_commit(self) -> None:
        self._commit_queued = False
        await self.save()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _cancel_queued_commit(self) -> None:
        if self._commit_queued and self._commit_task is not None:
            self._commit_task.cancel()
        self._commit_queued = False

    def _record_failure(self, error: Exception, generation: int) -> None:
        if isinstance(error, SaveFailedError):
            failure = error
        else:
            failure = SaveFailedError(f"Save failed: {error}")
            failure.__cause__ = error

        logger.warning(f"Save failed, pending edits kept for retry: {error}", exc_info=error)

        if generation != self._generation:
            return
        self._last_error = failure
        if self._on_error is not None:
            try:
                self._on_error(failure)
            except Exception:
                logger.exception("Autosave error callback failed")
