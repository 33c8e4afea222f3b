# salahclock/services/prayer_time/calendar_normalizer.py
"""
Turns a month of raw provider days into rows the calendar table can render.

The weekday is always derived from the row's own Gregorian date. A day that
cannot be fully normalised is still emitted, with its problems listed in
`issues`, so one bad day never blanks the rest of the month.
"""
import datetime
import logging
from typing import Iterable, List, Optional, Tuple

from ...exceptions import MalformedTimeFormat
from ...metrics import MALFORMED_CALENDAR_DAYS_TOTAL
from ...models import CalendarRow, RawCalendarDay
from ...utils.constants import PRAYER_NAMES, WEEKDAY_KEYS
from ...utils.time_utils import strip_time_annotation, to_minutes

logger = logging.getLogger(__name__)


def parse_gregorian_date(date_text: str) -> datetime.date:
    """Builds a date from DD-MM-YYYY text. Raises ValueError on anything else."""
    parts = (date_text or "").strip().split("-")
    if len(parts) != 3:
        raise ValueError(f"expected DD-MM-YYYY, got {date_text!r}")
    day, month, year = (int(part) for part in parts)
    return datetime.date(year, month, day)


def weekday_of(date_obj: datetime.date) -> Tuple[int, str]:
    """Weekday index (0=Sunday..6=Saturday) and its lookup key."""
    index = (date_obj.weekday() + 1) % 7  # date.weekday() is 0=Monday
    return index, WEEKDAY_KEYS[index]


def normalize_calendar_day(raw_day: RawCalendarDay) -> CalendarRow:
    issues: List[str] = []

    weekday: Optional[str] = None
    weekday_index: Optional[int] = None
    try:
        weekday_index, weekday = weekday_of(parse_gregorian_date(raw_day.gregorian_date))
    except ValueError as e:
        issues.append(f"date: {e}")

    timings = {}
    for name in PRAYER_NAMES:
        value = strip_time_annotation(raw_day.timings.get(name))
        timings[name] = value
        try:
            to_minutes(value)
        except MalformedTimeFormat as e:
            issues.append(f"{name}: {e}")

    if issues:
        MALFORMED_CALENDAR_DAYS_TOTAL.inc()
        logger.warning(f"Calendar day {raw_day.gregorian_date!r} flagged: {'; '.join(issues)}")

    return CalendarRow(
        weekday=weekday,
        weekday_index=weekday_index,
        gregorian_date=raw_day.gregorian_date,
        hijri_date=raw_day.hijri_date,
        timings=timings,
        issues=issues,
    )


def normalize_month(raw_days: Iterable[RawCalendarDay]) -> List[CalendarRow]:
    """One row per input day, in the provider's order. No sorting, filtering or dedup."""
    return [normalize_calendar_day(raw_day) for raw_day in raw_days]
