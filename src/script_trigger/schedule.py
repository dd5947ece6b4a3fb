# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Cron schedule handling.

A schedule holds one cron expression per line. Blank lines and lines
starting with # are ignored. The next fire time is the earliest across lines.

Hashed fields such as H/15 need a hash_id (the job name) so each job
gets a stable spread of its own.
"""

from datetime import datetime, timezone
from typing import List, Optional

from croniter import croniter


class ScheduleError(ValueError):
    """Raised when a schedule is not a valid cron expression."""
    pass


def parse_schedule(schedule: str, hash_id: Optional[str] = None) -> List[str]:
    """
    Split a schedule into its cron expressions.

    Raises:
        ScheduleError: If no expression is present or one is invalid
    """
    if not isinstance(schedule, str):
        raise ScheduleError(f"schedule must be a string, got: {schedule!r}")

    expressions = []
    for line in schedule.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if not croniter.is_valid(line, hash_id=hash_id):
            raise ScheduleError(f"invalid cron expression: {line}")
        expressions.append(line)

    if not expressions:
        raise ScheduleError("schedule must contain at least one cron expression")
    return expressions


def next_fire_time(
    schedule: str,
    after: Optional[datetime] = None,
    hash_id: Optional[str] = None,
) -> datetime:
    """Earliest time after `after` (default now, UTC) at which the schedule fires."""
    start = after or datetime.now(timezone.utc)
    return min(
        croniter(expr, start, hash_id=hash_id).get_next(datetime)
        for expr in parse_schedule(schedule, hash_id)
    )


def next_fire_times(
    schedule: str,
    count: int,
    after: Optional[datetime] = None,
    hash_id: Optional[str] = None,
) -> List[datetime]:
    """The next `count` fire times in order."""
    times = []
    current = after or datetime.now(timezone.utc)
    for _ in range(count):
        current = next_fire_time(schedule, current, hash_id)
        times.append(current)
    return times
