"""
Pure schedule evaluation functions.

Contract:
    ``should_fire(schedule, as_of)`` and ``compute_next_run()`` are PURE --
    no I/O, no side effects, all timestamps supplied by the caller.

Architecture: billing_batch/domain.  ZERO I/O.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from billing_kernel.exceptions import InvalidCronExpressionError

from billing_batch.domain.types import BillingSchedule, ScheduleFrequency


# =============================================================================
# CronSpec (lightweight cron parser)
# =============================================================================


@dataclass(frozen=True)
class CronSpec:
    """Parsed cron expression (minute hour day_of_month month day_of_week).

    Each field is a frozenset of valid integer values.
    Supports: *, values, lists (1,15), ranges (1-5), steps (*/5, 1-10/2).
    """

    minutes: frozenset[int] = field(default_factory=lambda: frozenset(range(60)))
    hours: frozenset[int] = field(default_factory=lambda: frozenset(range(24)))
    days_of_month: frozenset[int] = field(default_factory=lambda: frozenset(range(1, 32)))
    months: frozenset[int] = field(default_factory=lambda: frozenset(range(1, 13)))
    days_of_week: frozenset[int] = field(default_factory=lambda: frozenset(range(7)))


def _parse_range(part: str, min_val: int, max_val: int) -> tuple[int, int]:
    if part == "*":
        return min_val, max_val
    if "-" in part:
        s, e = part.split("-", 1)
        start, end = int(s), int(e)
        if start > end:
            raise ValueError(f"range start > end: {start}-{end}")
    else:
        start = end = int(part)
    if start < min_val or end > max_val:
        raise ValueError(f"value outside range [{min_val}, {max_val}]: {part}")
    return start, end


def _parse_cron_field(field_str: str, min_val: int, max_val: int) -> frozenset[int]:
    """Parse a single cron field into a frozenset of valid values.

    Raises:
        ValueError: If the field is syntactically invalid or out of range.
    """
    values: set[int] = set()

    for part in field_str.split(","):
        part = part.strip()
        step = 1
        if "/" in part:
            part, step_str = part.split("/", 1)
            step = int(step_str)
            if step <= 0:
                raise ValueError(f"step must be positive: {step}")
            if part != "*" and "-" not in part:
                # "N/S" means from N to the end of the range
                part = f"{part}-{max_val}"
        start, end = _parse_range(part, min_val, max_val)
        values.update(range(start, end + 1, step))

    return frozenset(values)


def parse_cron(expression: str) -> CronSpec:
    """Parse a 5-field cron expression into a CronSpec.

    Format: ``minute hour day_of_month month day_of_week``

    Raises:
        InvalidCronExpressionError: If the expression is malformed.
    """
    parts = expression.strip().split()
    if len(parts) != 5:
        raise InvalidCronExpressionError(
            expression, f"expected 5 fields, got {len(parts)}",
        )

    try:
        return CronSpec(
            minutes=_parse_cron_field(parts[0], 0, 59),
            hours=_parse_cron_field(parts[1], 0, 23),
            days_of_month=_parse_cron_field(parts[2], 1, 31),
            months=_parse_cron_field(parts[3], 1, 12),
            days_of_week=_parse_cron_field(parts[4], 0, 6),
        )
    except ValueError as exc:
        raise InvalidCronExpressionError(expression, str(exc)) from exc


def _matches_day(spec: CronSpec, dt: datetime) -> bool:
    cron_dow = (dt.weekday() + 1) % 7
    return (
        dt.day in spec.days_of_month
        and dt.month in spec.months
        and cron_dow in spec.days_of_week
    )


def matches_cron(spec: CronSpec, dt: datetime) -> bool:
    """Check if a datetime matches a cron spec.

    Cron convention: 0=Sunday, 1=Monday, ..., 6=Saturday.
    Python datetime.weekday(): 0=Monday, ..., 6=Sunday.
    """
    return dt.minute in spec.minutes and dt.hour in spec.hours and _matches_day(spec, dt)


# =============================================================================
# Schedule evaluation (pure)
# =============================================================================


def should_fire(schedule: BillingSchedule, as_of: datetime) -> bool:
    """Determine if the schedule should fire at the given time.

    Rules:
        - Inactive schedules never fire.
        - ON_DEMAND never fires automatically.
        - ONCE fires if never run before.
        - Otherwise fires once ``as_of >= next_run_at``.  A schedule with no
          ``next_run_at`` is due immediately.
    """
    if not schedule.is_active:
        return False

    if schedule.frequency == ScheduleFrequency.ON_DEMAND:
        return False

    if schedule.frequency == ScheduleFrequency.ONCE:
        return schedule.last_run_at is None

    if schedule.next_run_at is not None and as_of < schedule.next_run_at:
        return False

    return True


def _add_months(dt: datetime, months: int) -> datetime:
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def compute_next_run(
    frequency: ScheduleFrequency,
    last_run_at: datetime | None,
    cron_expression: str | None = None,
) -> datetime | None:
    """Compute the next run time for a schedule.

    Args:
        frequency: The schedule frequency.
        last_run_at: Reference time, usually when the schedule last fired.
        cron_expression: Optional cron expression; takes precedence over the
            frequency delta for recurring schedules.

    Returns:
        Next run datetime, or None for ON_DEMAND/ONCE or without a reference.

    Raises:
        InvalidCronExpressionError: If ``cron_expression`` is malformed.
    """
    if frequency in (ScheduleFrequency.ON_DEMAND, ScheduleFrequency.ONCE):
        return None

    if last_run_at is None:
        return None

    if cron_expression:
        return _next_cron_match(parse_cron(cron_expression), last_run_at)

    if frequency == ScheduleFrequency.MONTHLY:
        return _add_months(last_run_at, 1)

    delta_map = {
        ScheduleFrequency.HOURLY: timedelta(hours=1),
        ScheduleFrequency.DAILY: timedelta(days=1),
        ScheduleFrequency.WEEKLY: timedelta(weeks=1),
    }
    return last_run_at + delta_map[frequency]


# Leap days can be eight years apart (2096 -> 2104).
_CRON_HORIZON_DAYS = 8 * 366


def _next_cron_match(spec: CronSpec, after: datetime) -> datetime:
    """Find the next datetime strictly after ``after`` matching the spec.

    Scans day by day for up to eight years, then the matching hours and
    minutes within the first matching day.

    Raises:
        InvalidCronExpressionError: If no match found within eight years.
    """
    earliest = after.replace(second=0, microsecond=0) + timedelta(minutes=1)
    day = earliest.replace(hour=0, minute=0)
    times = [(h, m) for h in sorted(spec.hours) for m in sorted(spec.minutes)]

    for _ in range(_CRON_HORIZON_DAYS):
        if _matches_day(spec, day):
            for hour, minute in times:
                candidate = day.replace(hour=hour, minute=minute)
                if candidate >= earliest:
                    return candidate
        day += timedelta(days=1)

    raise InvalidCronExpressionError(
        str(spec), f"no match within eight years after {after.isoformat()}",
    )
