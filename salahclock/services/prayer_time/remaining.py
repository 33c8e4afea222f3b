# salahclock/services/prayer_time/remaining.py
import math

from ...models import RemainingDuration
from ...utils.constants import MINUTES_PER_DAY


def calculate_time_remaining(current_minutes: float, target_minutes: int) -> RemainingDuration:
    """
    Hours, minutes and seconds from current_minutes until target_minutes.

    current_minutes may carry a fractional part (the seconds). target_minutes may
    exceed 1440 when the caller already added a day for tomorrow's Fajr. A negative
    difference means the target is tomorrow and wraps by one day.
    """
    diff = (target_minutes - current_minutes) % MINUTES_PER_DAY

    # Rounding to the microsecond first keeps 359 + 59/60 -> 360 at one second
    # instead of flooring to zero through float error.
    total_seconds = math.floor(round(diff * 60, 6)) % (MINUTES_PER_DAY * 60)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return RemainingDuration(hours=int(hours), minutes=int(minutes), seconds=int(seconds))
