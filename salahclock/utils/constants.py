# salahclock/utils/constants.py

# Declared order; used as the tie-break when two prayers share a timestamp.
PRAYER_NAMES = ("Fajr", "Sunrise", "Dhuhr", "Asr", "Maghrib", "Isha")

# Index 0 is Sunday.
WEEKDAY_KEYS = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

MINUTES_PER_DAY = 24 * 60
