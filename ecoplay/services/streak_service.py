"""
Watering streak calculation.

Two views of the same quantity:
- `compute_streak` re-derives the current streak from the full record history
  (read time, audits).
- `next_stored_streak` is the incremental rule applied at submission time to
  the denormalized `users.watering_streak` field.
"""
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional, Union

DayLike = Union[date, datetime]


def _as_day(value: DayLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _record_day(record: Any) -> date:
    if isinstance(record, (date, datetime)):
        return _as_day(record)
    if isinstance(record, dict):
        return _as_day(record["date"])
    return _as_day(record.date)


def today_utc() -> date:
    return datetime.utcnow().date()


def compute_streak(records: Iterable[Any], today: Optional[date] = None) -> int:
    """
    Count consecutive days with a watering record, ending today.

    Records may be WateringRecord rows, dicts with a "date" key, or bare dates.
    Walks the days newest first with an expected offset starting at 0 days
    before today. A day at the expected offset extends the streak, a day
    further back ends it, and a day closer than expected (a duplicate day or
    a future-dated record) is skipped.
    """
    if today is None:
        today = today_utc()

    days = sorted((_record_day(r) for r in records), reverse=True)
    streak = 0
    for day in days:
        distance = (today - day).days
        if distance == streak:
            streak += 1
        elif distance > streak:
            break

    return streak


def next_stored_streak(
    last_watering_date: Optional[DayLike],
    current_streak: int,
    day: DayLike
) -> int:
    """Streak to store after an accepted watering on `day`."""
    day = _as_day(day)
    if last_watering_date is not None and _as_day(last_watering_date) == day - timedelta(days=1):
        return (current_streak or 0) + 1
    return 1
