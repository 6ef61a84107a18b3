"""Timer operations for one member at a time.

Every operation that touches a running entry expects the caller to have run
the LongRunningTimerGuard first. Rule violations raise TimerError subclasses.
"""

from datetime import datetime, timedelta
from typing import Any

from timeboard.observability.logging import get_logger
from timeboard.timers.errors import (
    InvalidTimeRangeError,
    MaxDurationExceededError,
    NoRunningTimerError,
    TimeEntryNotFoundError,
)
from timeboard.timers.models import TimerEntry
from timeboard.timers.store import TimeEntryStore
from timeboard.utils.clock import Clock, utc_now
from timeboard.utils.dates import clamp_tz_offset, local_date

logger = get_logger(__name__)


class TimerService:
    """Start, stop and edit a member's time entries."""

    def __init__(
        self,
        store: TimeEntryStore,
        max_entry_seconds: int = 7200,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the service.

        Args:
            store: Time entry storage
            max_entry_seconds: Longest duration accepted on edits and backdating
            clock: Source of the current time
        """
        self._store = store
        self._max_entry_seconds = max_entry_seconds
        self._clock = clock

    async def running(self, member: str) -> TimerEntry | None:
        return await self._store.get_running(member)

    async def start(
        self,
        member: str,
        *,
        description: str | None = None,
        project: str | None = None,
        tz_offset: Any = None,
    ) -> TimerEntry:
        """Start a new entry, stopping the member's running one first."""
        now = self._clock()
        previous = await self._store.get_running(member)
        if previous is not None:
            await self._store.save(previous.model_copy(update={"stop": now}))
            logger.info("timer_implicitly_stopped", member=previous.member, entry_id=previous.id)

        entry = await self._store.create(
            member,
            start=now,
            entry_date=local_date(now, clamp_tz_offset(tz_offset)),
            description=description,
            project=project,
        )
        logger.info("timer_started", member=entry.member, entry_id=entry.id)
        return entry

    async def stop(self, member: str) -> TimerEntry:
        running = await self._require_running(member)
        stopped = await self._store.save(running.model_copy(update={"stop": self._clock()}))
        logger.info("timer_stopped", member=stopped.member, entry_id=stopped.id)
        return stopped

    async def update_running(
        self,
        member: str,
        *,
        description: str | None = None,
        project: str | None = None,
    ) -> TimerEntry:
        """Replace the running entry's description and project."""
        running = await self._require_running(member)
        return await self._store.save(
            running.model_copy(update={"description": description, "project": project})
        )

    async def backdate(
        self,
        member: str,
        elapsed_seconds: int,
        *,
        description: str | None = None,
        project: str | None = None,
        tz_offset: Any = None,
    ) -> TimerEntry:
        """Move the running entry's start so it has been running ``elapsed_seconds``.

        Raises:
            MaxDurationExceededError: The elapsed time exceeds the entry maximum
            NoRunningTimerError: The member has no running entry
        """
        if elapsed_seconds > self._max_entry_seconds:
            raise MaxDurationExceededError(self._max_entry_seconds)

        running = await self._require_running(member)
        start = self._clock() - timedelta(seconds=elapsed_seconds)
        updated = await self._store.save(
            running.model_copy(
                update={
                    "start": start,
                    "entry_date": local_date(start, clamp_tz_offset(tz_offset)),
                    "description": description,
                    "project": project,
                }
            )
        )
        logger.info("timer_backdated", member=updated.member, entry_id=updated.id, elapsed_seconds=elapsed_seconds)
        return updated

    async def update_entry(
        self,
        member: str,
        entry_id: int,
        *,
        start: datetime,
        stop: datetime,
        description: str | None = None,
        project: str | None = None,
        tz_offset: Any = None,
    ) -> TimerEntry:
        """Manually edit a stored entry.

        Raises:
            TimeEntryNotFoundError: No such entry for the member
            InvalidTimeRangeError: ``stop`` is not after ``start``
            MaxDurationExceededError: The entry would exceed the maximum
        """
        entry = await self._store.get(member, entry_id)
        if entry is None:
            raise TimeEntryNotFoundError(entry_id)
        if stop <= start:
            raise InvalidTimeRangeError()
        if (stop - start).total_seconds() > self._max_entry_seconds:
            raise MaxDurationExceededError(self._max_entry_seconds)

        return await self._store.save(
            entry.model_copy(
                update={
                    "start": start,
                    "stop": stop,
                    "entry_date": local_date(start, clamp_tz_offset(tz_offset)),
                    "description": description,
                    "project": project,
                }
            )
        )

    async def delete(self, member: str, entry_id: int) -> None:
        if not await self._store.delete(member, entry_id):
            raise TimeEntryNotFoundError(entry_id)
        logger.info("time_entry_deleted", member=member, entry_id=entry_id)

    async def _require_running(self, member: str) -> TimerEntry:
        running = await self._store.get_running(member)
        if running is None:
            raise NoRunningTimerError(member)
        return running
