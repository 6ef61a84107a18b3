"""Auto-stop of timers left running past the maximum duration."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from timeboard.observability.logging import get_logger
from timeboard.observability.metrics import TIMERS_AUTO_STOPPED
from timeboard.timers.models import TimerEntry
from timeboard.timers.store import TimeEntryStore
from timeboard.utils.clock import Clock, utc_now
from timeboard.utils.dates import clamp_tz_offset, local_date

logger = get_logger(__name__)


@dataclass
class GuardReport:
    """Entries the guard closed during one pass."""

    stopped: list[TimerEntry] = field(default_factory=list)
    max_running_seconds: int = 7200

    @property
    def count(self) -> int:
        return len(self.stopped)

    @property
    def warning(self) -> str | None:
        """Informational message for the caller, None when nothing was stopped."""
        if not self.stopped:
            return None
        hours = self.max_running_seconds / 3600
        noun = "y was" if self.count == 1 else "ies were"
        return f"{self.count} running time entr{noun} auto-stopped at {hours:g} hours."


class LongRunningTimerGuard:
    """Closes running entries older than ``max_running_seconds``.

    Runs before every read or mutation of a member's running entry. A
    stopped entry is capped at exactly the maximum duration.
    """

    def __init__(
        self,
        store: TimeEntryStore,
        max_running_seconds: int = 7200,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._max_running_seconds = max_running_seconds
        self._clock = clock

    async def enforce(self, members: Iterable[str], tz_offset: Any = None) -> GuardReport:
        """Auto-stop the members' over-long running entries.

        Args:
            members: Members whose running entries are checked
            tz_offset: Caller's timezone offset in minutes, used to report
                the local day of each stopped entry

        Returns:
            Report of the stopped entries
        """
        offset = clamp_tz_offset(tz_offset)
        now = self._clock()
        report = GuardReport(max_running_seconds=self._max_running_seconds)

        for entry in await self._store.list_running(members):
            if entry.elapsed_seconds(now) <= self._max_running_seconds:
                continue
            stopped = entry.model_copy(
                update={
                    "stop": entry.start + timedelta(seconds=self._max_running_seconds),
                    "auto_stopped": True,
                }
            )
            await self._store.save(stopped)
            report.stopped.append(stopped)
            TIMERS_AUTO_STOPPED.inc()
            logger.info(
                "timer_auto_stopped",
                member=entry.member,
                entry_id=entry.id,
                started_on=local_date(entry.start, offset),
                max_running_seconds=self._max_running_seconds,
            )

        return report
