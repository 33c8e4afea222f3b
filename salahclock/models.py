# salahclock/models.py
"""
Value objects shared by the engine, the provider adapters and the API layer.
Everything here is immutable: fresh data replaces old data wholesale.
"""
import datetime
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .utils.constants import PRAYER_NAMES


@dataclass(frozen=True)
class Location:
    """The fixed place the schedule is shown for."""

    city: str
    country: str
    latitude: float
    longitude: float
    method_id: int
    timezone: str

    @classmethod
    def from_config(cls, config: Mapping) -> "Location":
        return cls(
            city=config["LOCATION_CITY"],
            country=config["LOCATION_COUNTRY"],
            latitude=float(config["LOCATION_LATITUDE"]),
            longitude=float(config["LOCATION_LONGITUDE"]),
            method_id=int(config["CALCULATION_METHOD_ID"]),
            timezone=config["LOCATION_TIMEZONE"],
        )


@dataclass(frozen=True, eq=False)
class DailyTimings:
    """The six prayer times ("HH:MM") of one calendar day."""

    times: Mapping[str, str]
    date: Optional[datetime.date] = None

    def __post_init__(self) -> None:
        missing = [name for name in PRAYER_NAMES if name not in self.times]
        if missing:
            raise ValueError(f"DailyTimings is missing prayers: {', '.join(missing)}")
        frozen = MappingProxyType({name: self.times[name] for name in PRAYER_NAMES})
        object.__setattr__(self, "times", frozen)

    def __getitem__(self, name: str) -> str:
        return self.times[name]

    def items(self):
        return self.times.items()

    def to_dict(self) -> Dict[str, str]:
        return dict(self.times)


@dataclass(frozen=True)
class NextPrayer:
    name: str
    time: str  # original "HH:MM" text


@dataclass(frozen=True)
class RemainingDuration:
    """A non-negative span shorter than one day."""

    hours: int
    minutes: int
    seconds: int

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    def as_text(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"


@dataclass(frozen=True)
class CountdownState:
    """What the view shows: the next prayer and how long until it."""

    next_prayer: NextPrayer
    remaining: RemainingDuration
    computed_at: datetime.datetime
    target_minutes: int
    is_tomorrow: bool = False


@dataclass(frozen=True)
class RawCalendarDay:
    """One day of a month as the provider delivered it."""

    gregorian_date: str  # DD-MM-YYYY
    hijri_date: str
    timings: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CalendarRow:
    """One display-ready row of the monthly calendar."""

    weekday: Optional[str]
    weekday_index: Optional[int]
    gregorian_date: str
    hijri_date: str
    timings: Mapping[str, str]
    issues: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues
