# salahclock/services/api_adapters/aladhan_adapter.py

import datetime
import logging
from typing import Any, Dict, List

import requests

from ...exceptions import MalformedResponseError, NetworkError
from ...metrics import API_REQUESTS_TOTAL, API_REQUEST_DURATION_SECONDS
from ...models import DailyTimings, Location, RawCalendarDay
from ...utils.constants import PRAYER_NAMES
from ...utils.time_utils import strip_time_annotation
from .base_adapter import BasePrayerAdapter

logger = logging.getLogger(__name__)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


class AlAdhanAdapter(BasePrayerAdapter):
    """
    API Adapter for AlAdhan.com Prayer Times API.
    """

    name = "AlAdhanAdapter"

    def _get(self, endpoint_name: str, url: str, params: Dict[str, Any]) -> Any:
        """
        Performs the GET and returns the `data` member of a successful response.
        Raises NetworkError for transport/HTTP problems, MalformedResponseError
        when the body is not a successful AlAdhan envelope.
        """
        logger.debug(f"AlAdhanAdapter: GET {url} with params: {params}")
        status = "error"
        try:
            with API_REQUEST_DURATION_SECONDS.labels(adapter_name=self.name, endpoint=endpoint_name).time():
                response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            try:
                data = response.json()
            except ValueError as e:
                status = "malformed"
                raise MalformedResponseError(f"{endpoint_name}: response is not JSON") from e

            if not isinstance(data, dict) or data.get("code") != 200 or "data" not in data:
                status = "malformed"
                code = data.get("code") if isinstance(data, dict) else None
                raise MalformedResponseError(f"{endpoint_name}: API error, code {code}")

            status = "success"
            return data["data"]

        except requests.exceptions.Timeout as e:
            status = "timeout"
            raise NetworkError(f"{endpoint_name}: request timed out") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"{endpoint_name}: {e}") from e
        finally:
            API_REQUESTS_TOTAL.labels(adapter_name=self.name, endpoint=endpoint_name, status=status).inc()

    def fetch_daily_timings(self, location: Location, date_obj: datetime.date) -> DailyTimings:
        """
        Fetches prayer times for a single day from the AlAdhan.com API.
        """
        date_str = date_obj.strftime("%d-%m-%Y")
        logger.info(f"AlAdhanAdapter: Fetching daily timings for {date_str} in {location.city}, {location.country}")

        params = {
            "city": location.city,
            "country": location.country,
            "method": location.method_id,
            "timezonestring": location.timezone,
        }
        data = self._get("timingsByCity", f"{self.base_url}/timingsByCity/{date_str}", params)

        raw_timings = data.get("timings") if isinstance(data, dict) else None
        if not isinstance(raw_timings, dict):
            raise MalformedResponseError(f"timingsByCity: no timings for {date_str}")
        missing = [name for name in PRAYER_NAMES if not raw_timings.get(name)]
        if missing:
            raise MalformedResponseError(f"timingsByCity: missing {', '.join(missing)} for {date_str}")

        logger.info(f"AlAdhanAdapter: Successfully fetched daily timings for {date_str}.")
        return DailyTimings(
            times={name: strip_time_annotation(raw_timings[name]) for name in PRAYER_NAMES},
            date=date_obj,
        )

    def fetch_monthly_calendar(self, location: Location, year: int, month: int) -> List[RawCalendarDay]:
        """
        Fetches a month's prayer calendar from the AlAdhan.com API.
        Days come back in the provider's order; a day with missing fields is kept
        with empty values so the month keeps its length.
        """
        logger.info(f"AlAdhanAdapter: Fetching calendar for {year}-{month:02d} at ({location.latitude}, {location.longitude})")

        params = {
            "latitude": str(location.latitude),
            "longitude": str(location.longitude),
            "method": location.method_id,
            "month": month,
            "year": year,
            "timezonestring": location.timezone,
        }
        data = self._get("calendar", f"{self.base_url}/calendar", params)

        if not isinstance(data, list) or not data:
            raise MalformedResponseError(f"calendar: API returned no days for {year}-{month:02d}")

        month_days = []
        for day_data in data:
            # Any member of the wrong shape becomes an empty value; the normalizer flags the day.
            day_data = _as_dict(day_data)
            date_info = _as_dict(day_data.get("date"))
            timings = _as_dict(day_data.get("timings"))
            month_days.append(RawCalendarDay(
                gregorian_date=_as_text(_as_dict(date_info.get("gregorian")).get("date")),
                hijri_date=_as_text(_as_dict(date_info.get("hijri")).get("date")),
                timings={name: _as_text(timings.get(name)) for name in PRAYER_NAMES},
            ))

        logger.info(f"AlAdhanAdapter: Successfully fetched {len(month_days)} days for {year}-{month:02d}.")
        return month_days
