# salahclock/services/prayer_time/next_prayer.py
"""
Picks the next prayer for a given instant and computes the countdown to it.
"""
import datetime
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ...exceptions import PreconditionViolation
from ...models import CountdownState, DailyTimings, NextPrayer
from ...utils.constants import MINUTES_PER_DAY, PRAYER_NAMES
from ...utils.time_utils import minutes_of_day, to_minutes
from .remaining import calculate_time_remaining

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NextPrayerSelection:
    next_prayer: NextPrayer
    current_minutes: float
    target_minutes: int
    is_tomorrow: bool


def prayer_minutes(timings: DailyTimings) -> Dict[str, int]:
    """Minutes since midnight for every prayer, in declared order. Raises MalformedTimeFormat."""
    return {name: to_minutes(timings[name]) for name in PRAYER_NAMES}


def select_next_prayer(
    timings: Optional[DailyTimings],
    hour: int,
    minute: int,
    second: int,
    minutes_by_prayer: Optional[Dict[str, int]] = None,
) -> NextPrayerSelection:
    """
    The prayer with the smallest time strictly after hour:minute:second.

    After Isha nothing qualifies, so the result is tomorrow's Fajr with a target of
    Fajr + 1440 minutes. A prayer whose time equals the current instant has already
    arrived and is skipped.
    """
    if timings is None:
        raise PreconditionViolation("select_next_prayer called before daily timings were available")

    current_minutes = minutes_of_day(datetime.time(hour, minute, second))
    if minutes_by_prayer is None:
        minutes_by_prayer = prayer_minutes(timings)

    next_name = None
    next_minutes = None
    for name in PRAYER_NAMES:
        candidate = minutes_by_prayer[name]
        if candidate > current_minutes and (next_minutes is None or candidate < next_minutes):
            next_name = name
            next_minutes = candidate

    is_tomorrow = next_name is None
    if is_tomorrow:
        next_name = "Fajr"
        next_minutes = minutes_by_prayer["Fajr"] + MINUTES_PER_DAY

    return NextPrayerSelection(
        next_prayer=NextPrayer(name=next_name, time=timings[next_name]),
        current_minutes=current_minutes,
        target_minutes=next_minutes,
        is_tomorrow=is_tomorrow,
    )


class NextPrayerSelector:
    """
    Stateful wrapper around select_next_prayer that parses a DailyTimings once
    and reuses the parsed minutes until a different DailyTimings comes in.
    """

    def __init__(self):
        self._cached_for: Optional[DailyTimings] = None
        self._cached_minutes: Optional[Dict[str, int]] = None

    def _minutes_for(self, timings: DailyTimings) -> Dict[str, int]:
        if self._cached_for is not timings:
            # Parse before caching so a malformed day is re-checked, not remembered.
            minutes = prayer_minutes(timings)
            self._cached_for = timings
            self._cached_minutes = minutes
            logger.debug(f"Parsed prayer minutes for {timings.date}: {minutes}")
        return self._cached_minutes

    def select(self, timings: Optional[DailyTimings], now: datetime.datetime) -> NextPrayerSelection:
        if timings is None:
            raise PreconditionViolation("NextPrayerSelector.select called without daily timings")
        return select_next_prayer(
            timings,
            now.hour,
            now.minute,
            now.second,
            minutes_by_prayer=self._minutes_for(timings),
        )

    def countdown(self, timings: Optional[DailyTimings], now: datetime.datetime) -> CountdownState:
        """Next prayer plus the time remaining until it, stamped with `now`."""
        selection = self.select(timings, now)
        remaining = calculate_time_remaining(selection.current_minutes, selection.target_minutes)
        return CountdownState(
            next_prayer=selection.next_prayer,
            remaining=remaining,
            computed_at=now,
            target_minutes=selection.target_minutes,
            is_tomorrow=selection.is_tomorrow,
        )
