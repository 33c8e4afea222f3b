# tests/test_prayer_service.py

import datetime
from unittest.mock import patch

import pytest

from salahclock.exceptions import MalformedResponseError, NetworkError, PreconditionViolation
from salahclock.models import DailyTimings

from conftest import SAMPLE_TIMES


def test_refresh_daily_loads_timings_and_starts_countdown(board, timer_factory):
    assert board.refresh_daily() is True

    assert board.daily_timings.to_dict() == SAMPLE_TIMES
    assert board.timings_unavailable is False
    assert board.is_counting_down
    assert board.countdown_state.next_prayer.name == "Fajr"
    assert board.countdown_state.remaining.hours == 6
    assert len(timer_factory.timers) == 1


def test_refresh_daily_asks_for_the_clocks_date(board, mock_adapter, location):
    board.refresh_daily()
    mock_adapter.fetch_daily_timings.assert_called_once_with(location, datetime.date(2025, 3, 5))


def test_fetch_failure_flags_unavailable(board, mock_adapter, timer_factory):
    mock_adapter.fetch_daily_timings.side_effect = NetworkError("offline")

    assert board.refresh_daily() is False

    assert board.timings_unavailable is True
    assert board.daily_timings is None
    assert board.countdown_state is None
    assert not board.is_counting_down
    # The only timer armed is the retry.
    assert board.retry_pending
    assert [timer.delay for timer in timer_factory.timers] == [300.0]


def test_failed_refresh_for_same_day_keeps_current_timings(board, mock_adapter):
    board.refresh_daily()
    mock_adapter.fetch_daily_timings.side_effect = MalformedResponseError("garbage")

    assert board.refresh_daily() is False

    assert board.timings_unavailable is True
    assert board.daily_timings is not None
    assert board.is_counting_down


def test_failed_refresh_for_a_new_day_drops_stale_timings(board, mock_adapter):
    board.refresh_daily()
    mock_adapter.fetch_daily_timings.side_effect = NetworkError("offline")

    board.refresh_daily(datetime.date(2025, 3, 6))

    assert board.daily_timings is None
    assert board.countdown_state is None
    assert not board.is_counting_down


def test_new_timings_replace_old_ones_and_recompute(board, mock_adapter, clock, timer_factory):
    clock.set(12, 0)
    board.refresh_daily()
    assert board.countdown_state.next_prayer.time == "13:00"

    replacement = DailyTimings(times=dict(SAMPLE_TIMES, Dhuhr="12:30"), date=datetime.date(2025, 3, 5))
    mock_adapter.fetch_daily_timings.return_value = replacement
    board.refresh_daily()

    assert board.daily_timings is replacement
    assert board.countdown_state.next_prayer.time == "12:30"
    assert timer_factory.timers[0].cancelled


def test_refresh_monthly_normalizes_rows(board, mock_adapter, location):
    assert board.refresh_monthly() is True

    mock_adapter.fetch_monthly_calendar.assert_called_once_with(location, 2025, 3)
    assert len(board.calendar) == 31
    assert board.calendar[4].weekday == "wednesday"
    assert board.calendar[4].timings["Fajr"] == "06:00"
    assert board.calendar_unavailable is False


def test_monthly_failure_keeps_previous_rows(board, mock_adapter):
    board.refresh_monthly()
    rows = board.calendar
    mock_adapter.fetch_monthly_calendar.side_effect = NetworkError("offline")

    assert board.refresh_monthly() is False

    assert board.calendar is rows
    assert board.calendar_unavailable is True


def test_refresh_all_runs_both_fetches(board):
    assert board.refresh_all() == {"daily": True, "monthly": True}
    assert board.daily_timings is not None
    assert board.calendar is not None


def test_one_failed_fetch_does_not_affect_the_other(board, mock_adapter):
    mock_adapter.fetch_monthly_calendar.side_effect = NetworkError("offline")

    assert board.start() == {"daily": True, "monthly": False}

    assert board.is_counting_down
    assert board.calendar is None
    assert board.calendar_unavailable is True


def test_start_countdown_before_timings_is_rejected(board):
    with pytest.raises(PreconditionViolation):
        board.start_countdown()


def test_stop_then_refresh_does_not_restart_countdown(board):
    board.refresh_daily()
    board.stop()
    board.refresh_daily()
    assert not board.is_counting_down


def test_malformed_timings_keep_the_previous_countdown(board, mock_adapter, timer_factory):
    board.refresh_daily()
    good_state = board.countdown_state

    mock_adapter.fetch_daily_timings.return_value = DailyTimings(
        times=dict(SAMPLE_TIMES, Maghrib="7pm"), date=datetime.date(2025, 3, 5)
    )
    board.refresh_daily()

    assert board.countdown_state is good_state
    assert "7pm" in board.countdown_error

    assert board.snapshot()["countdown_error"] == board.countdown_error


def test_rollover_triggers_one_background_refresh(board, clock, timer_factory):
    board.refresh_all()
    clock.instant = datetime.datetime(2025, 3, 6, 0, 0, 1, tzinfo=clock.instant.tzinfo)

    with patch('salahclock.services.prayer_time_service.threading.Thread') as mock_thread:
        timer_factory.last.fire()
        timer_factory.last.fire()

    mock_thread.assert_called_once()
    kwargs = mock_thread.call_args.kwargs
    assert kwargs["args"] == (datetime.date(2025, 3, 6), True, False)
    assert kwargs["daemon"] is True
    mock_thread.return_value.start.assert_called_once()


def test_month_change_refreshes_calendar(board, clock, mock_adapter, location):
    board.refresh_all()
    clock.instant = datetime.datetime(2025, 4, 1, 0, 0, 1, tzinfo=clock.instant.tzinfo)
    mock_adapter.fetch_daily_timings.return_value = DailyTimings(times=dict(SAMPLE_TIMES), date=datetime.date(2025, 4, 1))

    with patch('salahclock.services.prayer_time_service.threading.Thread'):
        board._refresh_after_rollover(datetime.date(2025, 4, 1), True, True)

    mock_adapter.fetch_daily_timings.assert_called_with(location, datetime.date(2025, 4, 1))
    mock_adapter.fetch_monthly_calendar.assert_called_with(location, 2025, 4)
    assert board.daily_timings.date == datetime.date(2025, 4, 1)


def test_snapshot(board):
    board.refresh_all()
    snapshot = board.snapshot()
    assert snapshot["counting_down"] is True
    assert snapshot["timings_unavailable"] is False
    assert len(snapshot["calendar"]) == 31
    assert snapshot["countdown"] is board.countdown_state


def test_failed_startup_fetch_is_retried_until_it_succeeds(board, mock_adapter, timer_factory):
    mock_adapter.fetch_daily_timings.side_effect = NetworkError("offline")
    board.start()
    first_retry = timer_factory.last

    first_retry.fire()
    assert mock_adapter.fetch_daily_timings.call_count == 2
    assert board.retry_pending
    second_retry = timer_factory.last
    assert second_retry is not first_retry

    mock_adapter.fetch_daily_timings.side_effect = None
    second_retry.fire()

    assert board.daily_timings is not None
    assert board.timings_unavailable is False
    assert board.is_counting_down
    assert not board.retry_pending


def test_board_recovers_after_a_failed_midnight_refresh(board, mock_adapter, clock, timer_factory, location):
    board.refresh_all()
    clock.instant = datetime.datetime(2025, 3, 6, 0, 0, 1, tzinfo=clock.instant.tzinfo)
    mock_adapter.fetch_daily_timings.side_effect = NetworkError("offline")

    with patch('salahclock.services.prayer_time_service.threading.Thread') as mock_thread:
        timer_factory.last.fire()
    rollover = mock_thread.call_args.kwargs
    rollover["target"](*rollover["args"])

    assert board.daily_timings is None
    assert not board.is_counting_down
    assert board.retry_pending
    retry = timer_factory.last
    assert retry.delay == 300.0

    # Provider is back the next day.
    mock_adapter.fetch_daily_timings.side_effect = None
    mock_adapter.fetch_daily_timings.return_value = DailyTimings(times=dict(SAMPLE_TIMES), date=datetime.date(2025, 3, 7))
    clock.set(12, 0, day=7)
    retry.fire()

    mock_adapter.fetch_daily_timings.assert_called_with(location, datetime.date(2025, 3, 7))
    assert board.daily_timings.date == datetime.date(2025, 3, 7)
    assert board.is_counting_down
    assert board.countdown_state.next_prayer.name == "Dhuhr"
    assert not board.retry_pending


def test_stop_cancels_a_pending_retry(board, mock_adapter, timer_factory):
    mock_adapter.fetch_daily_timings.side_effect = NetworkError("offline")
    board.refresh_daily()
    retry = timer_factory.last

    board.stop()

    assert retry.cancelled
    assert not board.retry_pending
    retry.fire()
    assert mock_adapter.fetch_daily_timings.call_count == 1
