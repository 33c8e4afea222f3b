import datetime
import re
import zoneinfo

from ..exceptions import MalformedTimeFormat
from .constants import MINUTES_PER_DAY

_HH_MM_PATTERN = re.compile(r"^(\d+):(\d+)$")


def to_minutes(time_str):
    """
    Parses a time string (HH:MM) into minutes since midnight.
    Raises MalformedTimeFormat if the text is not two colon-separated
    non-negative integers with hours in [0, 23] and minutes in [0, 59].
    """
    if not isinstance(time_str, str):
        raise MalformedTimeFormat(time_str, "not a string")
    match = _HH_MM_PATTERN.match(time_str.strip())
    if not match:
        raise MalformedTimeFormat(time_str, "expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23:
        raise MalformedTimeFormat(time_str, "hours out of range")
    if minutes > 59:
        raise MalformedTimeFormat(time_str, "minutes out of range")
    return hours * 60 + minutes


def to_text(minutes):
    """
    Formats minutes since midnight as a zero-padded HH:MM string.
    The caller must normalise the value into [0, 1440) first.
    """
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes must be in [0, {MINUTES_PER_DAY}), got {minutes}")
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def strip_time_annotation(raw_value):
    """
    Drops everything from the first space onward, so "06:12 (CET)" becomes "06:12".
    Returns an empty string for missing values.
    """
    if raw_value is None:
        return ""
    return str(raw_value).strip().split(" ", 1)[0]


def minutes_of_day(now):
    """Fractional minutes since midnight for a datetime or time (seconds become the fraction)."""
    return now.hour * 60 + now.minute + now.second / 60


class ZoneClock:
    """
    Wall clock pinned to one IANA timezone. The engine never reads the system
    clock directly; it asks an object with this interface, so tests can hand
    in a fixed instant instead.
    """

    def __init__(self, tz_name):
        self.tz = zoneinfo.ZoneInfo(tz_name)

    def now(self):
        return datetime.datetime.now(self.tz)

    def today(self):
        return self.now().date()

    def __repr__(self):
        return f"ZoneClock({self.tz.key!r})"
