# salahclock/services/prayer_time/countdown.py
"""
Once-per-second countdown driver.

Each tick re-reads the clock and the current daily timings, recomputes the next
prayer and the time remaining, and hands the resulting CountdownState to every
subscribed listener. Ticks are chained one-shot timers: the next timer is armed
only after the current tick has finished, so a tick never overlaps itself.
"""
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, List, Optional

from ...exceptions import MalformedTimeFormat, PreconditionViolation
from ...metrics import COUNTDOWN_TICKS_TOTAL
from ...models import CountdownState, DailyTimings
from .next_prayer import NextPrayerSelector

logger = logging.getLogger(__name__)

Listener = Callable[[CountdownState], None]


class CountdownScheduler:

    def __init__(
        self,
        timings_provider: Callable[[], Optional[DailyTimings]],
        clock: Any,
        interval_seconds: float = 1.0,
        selector: Optional[NextPrayerSelector] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
        monotonic: Callable[[], float] = time.monotonic,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.timings_provider = timings_provider
        self.clock = clock
        self.interval_seconds = float(interval_seconds)
        self.selector = selector or NextPrayerSelector()
        self.timer_factory = timer_factory
        self.monotonic = monotonic
        self.on_error = on_error

        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._timer = None
        self._running = False
        self._generation = 0
        self._anchor = 0.0
        self._ticks_due = 0
        self.last_state: Optional[CountdownState] = None

    # -- observers -----------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a listener; returns a callable that removes it again."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # -- lifecycle -----------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Publishes one state right away, then keeps ticking every interval."""
        with self._lock:
            if self._running:
                return
            if self.timings_provider() is None:
                raise PreconditionViolation("Countdown cannot start before daily timings are available")
            self._running = True
            self._generation += 1
            generation = self._generation
            self._anchor = self.monotonic()
            self._ticks_due = 0
            logger.info(f"Countdown started (interval {self.interval_seconds}s)")
        self._run_tick(generation)

    def stop(self) -> None:
        """Cancels the pending tick. Safe to call more than once."""
        with self._lock:
            if not self._running and self._timer is None:
                return
            self._running = False
            # A callback of the old generation that already fired will see the
            # bumped counter and return without publishing.
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            logger.info("Countdown stopped")

    def restart(self) -> None:
        self.stop()
        self.start()

    def __enter__(self) -> "CountdownScheduler":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @contextmanager
    def observe(self, listener: Listener):
        """Subscribes and starts; on leaving the block, unsubscribes and stops."""
        unsubscribe = self.subscribe(listener)
        try:
            self.start()
            yield self
        finally:
            unsubscribe()
            self.stop()

    # -- ticking -------------------------------------------------------------

    def tick(self) -> Optional[CountdownState]:
        """Computes the current state and publishes it. Returns None when nothing was published."""
        timings = self.timings_provider()
        if timings is None:
            logger.debug("Countdown tick skipped: no daily timings held")
            return None
        now = self.clock.now()
        try:
            state = self.selector.countdown(timings, now)
        except MalformedTimeFormat as e:
            # Keep the last good state; the view must never see a garbled countdown.
            COUNTDOWN_TICKS_TOTAL.labels(status="malformed").inc()
            logger.warning(f"Countdown tick for {timings.date} skipped: {e}")
            if self.on_error is not None:
                self.on_error(e)
            return None
        self.last_state = state
        COUNTDOWN_TICKS_TOTAL.labels(status="published").inc()
        self._publish(state)
        return state

    def _publish(self, state: CountdownState) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Countdown listener {listener!r} failed: {e}", exc_info=True)

    def _run_tick(self, generation: int) -> None:
        with self._lock:
            if not self._running or generation != self._generation:
                return
            self._timer = None
            try:
                self.tick()
            finally:
                if self._running and generation == self._generation:
                    self._arm_next(generation)

    def _arm_next(self, generation: int) -> None:
        # Deadlines sit on a fixed grid (anchor + n * interval) so the cadence does
        # not drift by the tick's own run time. A late tick skips missed slots.
        elapsed = self.monotonic() - self._anchor
        self._ticks_due = max(self._ticks_due + 1, int(elapsed // self.interval_seconds) + 1)
        delay = max(0.0, self._anchor + self._ticks_due * self.interval_seconds - self.monotonic())
        timer = self.timer_factory(delay, self._run_tick, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()
