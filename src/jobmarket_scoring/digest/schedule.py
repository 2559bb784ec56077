"""Saved-search run cadence."""

from __future__ import annotations

from datetime import datetime, timedelta

from jobmarket_scoring.models import Schedule

_INTERVALS: dict[Schedule, timedelta] = {
    Schedule.DAILY: timedelta(hours=24),
    Schedule.WEEKLY: timedelta(days=7),
}


def is_due(schedule: Schedule | str, last_run_at: datetime | None, now: datetime) -> bool:
    """True when a saved search on *schedule* should run at *now*.

    Instant searches are always due, as is any search that has never
    run.  Daily and weekly searches are due once their full interval has
    elapsed since ``last_run_at``.  Unknown schedules are treated as
    daily.
    """
    try:
        cadence = Schedule(schedule)
    except ValueError:
        cadence = Schedule.DAILY

    if cadence is Schedule.INSTANT or last_run_at is None:
        return True
    return now - last_run_at >= _INTERVALS[cadence]
