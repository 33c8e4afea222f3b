# This module defines the base interface for all prayer time API adapters.
from abc import ABC, abstractmethod


class BasePrayerAdapter(ABC):
    """
    Abstract base class for prayer time API adapters. Every adapter returns
    DailyTimings / RawCalendarDay values and reports problems by raising a
    FetchFailure subclass (NetworkError or MalformedResponseError).
    """

    def __init__(self, base_url, timeout=10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @abstractmethod
    def fetch_daily_timings(self, location, date_obj):
        """Fetches the six prayer times of a single day for the location."""
        pass

    @abstractmethod
    def fetch_monthly_calendar(self, location, year, month):
        """Fetches every day of one month, in calendar order."""
        pass
