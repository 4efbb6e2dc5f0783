"""Clocks for import timestamps and the nightly sync schedule.

Timestamps are always UTC. The scheduled sheet sync is anchored to a
wall-clock hour in ``schedule_tz``, so a deployment can run it at 02:00
Israel time while storing UTC.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from rbs_pipeline.core.utils import utc_now


def resolve_timezone(name: str) -> tzinfo:
    """``"UTC"`` or an IANA zone name such as ``"Asia/Jerusalem"``.

    Raises:
        ValueError: If the zone is unknown.
    """
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unknown timezone '{name}'") from e


class Clock(ABC):
    """Source of the current time plus the daily schedule derived from it."""

    def __init__(self, schedule_tz: tzinfo = timezone.utc) -> None:
        self.schedule_tz = schedule_tz

    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""
        ...

    def next_daily(self, hour: int) -> datetime:
        """Next ``hour``:00 in ``schedule_tz`` strictly after now, in UTC."""
        local = self.now().astimezone(self.schedule_tz)
        run = local.replace(hour=hour, minute=0, second=0, microsecond=0)
        if run <= local:
            run += timedelta(days=1)
        return run.astimezone(timezone.utc)


class SystemClock(Clock):
    def now(self) -> datetime:
        return utc_now()


class FakeClock(Clock):
    """Controllable clock for testing sync schedules."""

    def __init__(
        self,
        initial: datetime | None = None,
        schedule_tz: tzinfo = timezone.utc,
    ) -> None:
        super().__init__(schedule_tz)
        self._now = initial or utc_now()

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: int | float = 0, **kwargs: int) -> None:
        """Move forward by seconds plus any timedelta arguments (hours, days, ...)."""
        self._now = self._now + timedelta(seconds=seconds, **kwargs)

    def set(self, time: datetime) -> None:
        self._now = time
