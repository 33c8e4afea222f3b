import datetime
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from flask import current_app

from ..exceptions import FetchFailure, MalformedTimeFormat
from ..metrics import FETCH_FAILURES_TOTAL
from ..models import CalendarRow, CountdownState, DailyTimings, Location
from .prayer_time.calendar_normalizer import normalize_month
from .prayer_time.countdown import CountdownScheduler

logger = logging.getLogger(__name__)


class PrayerBoard:
    """
    Holds everything the view reads: today's timings, the normalised month and
    the live countdown. Each slot is written by exactly one fetch path and is
    replaced wholesale, never patched.
    """

    def __init__(
        self,
        adapter,
        location: Location,
        clock,
        interval_seconds: float = 1.0,
        timer_factory=threading.Timer,
        retry_seconds: float = 300.0,
    ):
        self.adapter = adapter
        self.location = location
        self.clock = clock
        self.timer_factory = timer_factory
        self.retry_seconds = float(retry_seconds)

        self._daily: Optional[DailyTimings] = None
        self._calendar: Optional[List[CalendarRow]] = None
        self._calendar_month: Optional[tuple] = None
        self._countdown: Optional[CountdownState] = None

        self.timings_unavailable = False
        self.calendar_unavailable = False
        self.countdown_error: Optional[str] = None

        self._rollover_lock = threading.Lock()
        self._rollover_thread: Optional[threading.Thread] = None
        self._rollover_attempted_for: Optional[datetime.date] = None
        self._stopped = False

        self._retry_lock = threading.Lock()
        self._retry_timer = None

        self.scheduler = CountdownScheduler(
            timings_provider=lambda: self._daily,
            clock=clock,
            interval_seconds=interval_seconds,
            timer_factory=timer_factory,
            on_error=self._on_countdown_error,
        )
        self.scheduler.subscribe(self._on_countdown)

    # -- read side -----------------------------------------------------------

    @property
    def daily_timings(self) -> Optional[DailyTimings]:
        return self._daily

    @property
    def calendar(self) -> Optional[List[CalendarRow]]:
        return self._calendar

    @property
    def countdown_state(self) -> Optional[CountdownState]:
        return self._countdown

    @property
    def is_counting_down(self) -> bool:
        return self.scheduler.is_running

    def snapshot(self) -> Dict[str, Any]:
        return {
            "timings": self._daily,
            "timings_unavailable": self.timings_unavailable,
            "calendar": self._calendar,
            "calendar_unavailable": self.calendar_unavailable,
            "countdown": self._countdown,
            "countdown_error": self.countdown_error,
            "counting_down": self.is_counting_down,
            "retry_pending": self.retry_pending,
        }

    # -- fetching ------------------------------------------------------------

    def refresh_daily(self, date_obj: Optional[datetime.date] = None) -> bool:
        """
        Fetches the day's timings and swaps them in. On failure the board is
        flagged as unavailable and another attempt is scheduled after
        retry_seconds, until one succeeds or the board is stopped.
        """
        date_obj = date_obj or self.clock.today()
        try:
            timings = self.adapter.fetch_daily_timings(self.location, date_obj)
        except FetchFailure as e:
            FETCH_FAILURES_TOTAL.labels(kind="daily").inc()
            logger.error(f"Daily timings for {date_obj} unavailable: {e}", exc_info=True)
            self.timings_unavailable = True
            if self._daily is not None and self._daily.date != date_obj:
                # Yesterday's times must not be shown as today's.
                self.scheduler.stop()
                self._daily = None
                self._countdown = None
            self._schedule_retry()
            return False

        self._cancel_retry()
        self._daily = timings
        self.timings_unavailable = False
        self.countdown_error = None
        logger.info(f"Daily timings for {date_obj} loaded: {timings.to_dict()}")

        if self._stopped:
            return True
        # Restart so the new day's values are shown without waiting for the next tick.
        if self.scheduler.is_running:
            self.scheduler.restart()
        else:
            self.scheduler.start()
        return True

    def refresh_monthly(self, year: Optional[int] = None, month: Optional[int] = None) -> bool:
        """Fetches and normalises a month. A failed fetch keeps the rows we already have."""
        today = self.clock.today()
        year = year or today.year
        month = month or today.month
        try:
            raw_days = self.adapter.fetch_monthly_calendar(self.location, year, month)
        except FetchFailure as e:
            FETCH_FAILURES_TOTAL.labels(kind="monthly").inc()
            logger.error(f"Calendar for {year}-{month:02d} unavailable: {e}", exc_info=True)
            self.calendar_unavailable = True
            return False

        rows = normalize_month(raw_days)
        self._calendar = rows
        self._calendar_month = (year, month)
        self.calendar_unavailable = False
        flagged = sum(1 for row in rows if not row.is_valid)
        logger.info(f"Calendar for {year}-{month:02d} loaded: {len(rows)} days, {flagged} flagged")
        return True

    def refresh_all(self) -> Dict[str, bool]:
        """Runs the daily and monthly fetches side by side; they write separate slots."""
        with ThreadPoolExecutor(max_workers=2) as executor:
            daily_future = executor.submit(self.refresh_daily)
            monthly_future = executor.submit(self.refresh_monthly)
            return {"daily": daily_future.result(), "monthly": monthly_future.result()}

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> Dict[str, bool]:
        self._stopped = False
        return self.refresh_all()

    def start_countdown(self) -> None:
        """Raises PreconditionViolation when there are no timings yet."""
        self._stopped = False
        self.scheduler.start()

    def stop(self) -> None:
        self._stopped = True
        self._cancel_retry()
        self.scheduler.stop()

    # -- retrying a failed daily fetch ---------------------------------------

    @property
    def retry_pending(self) -> bool:
        return self._retry_timer is not None

    def _schedule_retry(self) -> None:
        with self._retry_lock:
            if self._stopped or self._retry_timer is not None:
                return
            timer = self.timer_factory(self.retry_seconds, self._retry_daily)
            timer.daemon = True
            self._retry_timer = timer
            timer.start()
        logger.info(f"Daily timings fetch will be retried in {self.retry_seconds:g}s")

    def _cancel_retry(self) -> None:
        with self._retry_lock:
            if self._retry_timer is not None:
                self._retry_timer.cancel()
                self._retry_timer = None

    def _retry_daily(self) -> None:
        with self._retry_lock:
            self._retry_timer = None
            if self._stopped:
                return
        logger.info("Retrying daily timings fetch")
        try:
            self.refresh_daily()
        except Exception as e:
            # Log any exceptions that occur within the timer thread
            logger.error(f"Daily timings retry failed: {e}", exc_info=True)

    # -- countdown callbacks -------------------------------------------------

    def _on_countdown(self, state: CountdownState) -> None:
        self._countdown = state
        self.countdown_error = None
        self._check_rollover(state.computed_at.date())

    def _on_countdown_error(self, error: Exception) -> None:
        if isinstance(error, MalformedTimeFormat):
            self.countdown_error = str(error)

    def _check_rollover(self, local_date: datetime.date) -> None:
        daily = self._daily
        month_changed = self._calendar_month is not None and self._calendar_month != (local_date.year, local_date.month)
        day_changed = daily is not None and daily.date is not None and daily.date != local_date
        if not (day_changed or month_changed):
            return

        with self._rollover_lock:
            # One attempt per local date; a failed refresh waits for the next day.
            if self._rollover_attempted_for == local_date:
                return
            if self._rollover_thread is not None and self._rollover_thread.is_alive():
                return
            self._rollover_attempted_for = local_date
            logger.info(f"Local date is now {local_date}; refreshing prayer data in the background")
            self._rollover_thread = threading.Thread(
                target=self._refresh_after_rollover,
                args=(local_date, day_changed, month_changed),
                daemon=True,
            )
            self._rollover_thread.start()

    def _refresh_after_rollover(self, local_date: datetime.date, day_changed: bool, month_changed: bool) -> None:
        try:
            if day_changed:
                self.refresh_daily(local_date)
            if month_changed:
                self.refresh_monthly(local_date.year, local_date.month)
        except Exception as e:
            # Log any exceptions that occur within the thread
            logger.error(f"Background refresh for {local_date} failed: {e}", exc_info=True)


def get_prayer_board() -> PrayerBoard:
    """The board of the current Flask application."""
    return current_app.extensions["prayer_board"]
