# tests/conftest.py

import datetime
import zoneinfo
from unittest.mock import MagicMock

import pytest

from salahclock import create_app
from salahclock.models import DailyTimings, Location, RawCalendarDay
from salahclock.services.api_adapters.base_adapter import BasePrayerAdapter
from salahclock.services.prayer_time_service import PrayerBoard

CANARY = zoneinfo.ZoneInfo("Atlantic/Canary")

SAMPLE_TIMES = {
    "Fajr": "06:00", "Sunrise": "07:30", "Dhuhr": "13:00",
    "Asr": "16:00", "Maghrib": "19:00", "Isha": "20:30",
}


class FixedClock:
    """A clock that stays where the test puts it."""

    def __init__(self, instant):
        self.instant = instant

    def now(self):
        return self.instant

    def today(self):
        return self.instant.date()

    def set(self, hour, minute, second=0, day=None):
        self.instant = self.instant.replace(hour=hour, minute=minute, second=second, day=day or self.instant.day)


class ManualTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, delay, function, args=None, kwargs=None):
        self.delay = delay
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        # Fires even after cancel(), like a timer thread that already woke up.
        self.function(*self.args, **self.kwargs)


class ManualTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, delay, function, args=None, kwargs=None):
        timer = ManualTimer(delay, function, args, kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]


@pytest.fixture
def sample_timings():
    return DailyTimings(times=dict(SAMPLE_TIMES), date=datetime.date(2025, 3, 5))


@pytest.fixture
def clock():
    return FixedClock(datetime.datetime(2025, 3, 5, 0, 0, 0, tzinfo=CANARY))


@pytest.fixture
def timer_factory():
    return ManualTimerFactory()


@pytest.fixture
def location():
    return Location(
        city="Playa Blanca", country="Spain",
        latitude=28.8627, longitude=-13.8372,
        method_id=3, timezone="Atlantic/Canary",
    )


def make_raw_day(date_text, suffix=" (WET)", **overrides):
    timings = {name: f"{value}{suffix}" for name, value in SAMPLE_TIMES.items()}
    timings.update(overrides)
    return RawCalendarDay(gregorian_date=date_text, hijri_date="05-09-1446", timings=timings)


@pytest.fixture
def raw_day():
    return make_raw_day


@pytest.fixture
def mock_adapter(sample_timings):
    adapter = MagicMock(spec=BasePrayerAdapter)
    adapter.fetch_daily_timings.return_value = sample_timings
    adapter.fetch_monthly_calendar.return_value = [
        make_raw_day(f"{day:02d}-03-2025") for day in range(1, 32)
    ]
    return adapter


@pytest.fixture
def board(mock_adapter, location, clock, timer_factory):
    board = PrayerBoard(mock_adapter, location, clock, timer_factory=timer_factory)
    yield board
    board.stop()


@pytest.fixture(scope='session')
def app():
    """Session-wide application for testing."""
    return create_app('testing', adapter=MagicMock(spec=BasePrayerAdapter))


@pytest.fixture
def test_client(app, board):
    """A test client whose prayer board is the per-test `board` fixture."""
    original = app.extensions['prayer_board']
    app.extensions['prayer_board'] = board
    yield app.test_client()
    app.extensions['prayer_board'] = original
