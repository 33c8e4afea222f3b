# salahclock/routes/api_routes.py
"""
Read-only view of the prayer board for the page that renders the schedule,
plus start/stop controls for the live countdown.
"""
from typing import Any, Dict

from flask import current_app
from flask_smorest import Blueprint, abort
from prometheus_client import generate_latest

from ..exceptions import PreconditionViolation
from ..schemas import (
    CalendarResponseSchema,
    CountdownStateSchema,
    CountdownStatusSchema,
    MessageSchema,
    PrayerTimesResponseSchema,
    RefreshArgsSchema,
)
from ..services.prayer_time_service import get_prayer_board

api_bp = Blueprint('API', __name__, url_prefix='/api', description="Prayer times, next prayer countdown and monthly calendar.")


def _timings_missing_message(board) -> str:
    if board.timings_unavailable:
        return "Prayer timings could not be fetched; retrying."
    return "Prayer timings have not been fetched yet."


@api_bp.route('/metrics')
def metrics():
    return generate_latest(), 200, {'Content-Type': 'text/plain; version=0.0.4; charset=utf-8'}


@api_bp.route('/prayer-times')
@api_bp.arguments(RefreshArgsSchema, location='query')
@api_bp.response(200, PrayerTimesResponseSchema)
@api_bp.alt_response(503, schema=MessageSchema, description="Timings could not be fetched from the prayer time API.")
def prayer_times(args: Dict[str, Any]) -> Dict[str, Any]:
    """Today's six prayer times."""
    board = get_prayer_board()
    if args.get('refresh'):
        current_app.logger.info("Prayer times refresh requested by client.")
        board.refresh_daily()

    timings = board.daily_timings
    if timings is None:
        abort(503, message=_timings_missing_message(board))
    return {
        "available": not board.timings_unavailable,
        "date": timings.date,
        "timings": timings.to_dict(),
    }


@api_bp.route('/next-prayer')
@api_bp.response(200, CountdownStateSchema)
@api_bp.alt_response(503, schema=MessageSchema, description="No countdown has been computed yet.")
def next_prayer():
    """The upcoming prayer and the time left until it."""
    board = get_prayer_board()
    state = board.countdown_state
    if state is None:
        if board.daily_timings is None:
            abort(503, message=_timings_missing_message(board))
        if board.countdown_error:
            abort(503, message=f"Countdown cannot be computed: {board.countdown_error}")
        abort(503, message="Countdown has not been started.")
    return state


@api_bp.route('/calendar')
@api_bp.arguments(RefreshArgsSchema, location='query')
@api_bp.response(200, CalendarResponseSchema)
@api_bp.alt_response(503, schema=MessageSchema, description="The monthly calendar could not be fetched.")
def calendar(args: Dict[str, Any]) -> Dict[str, Any]:
    """The current month, one row per day."""
    board = get_prayer_board()
    if args.get('refresh'):
        current_app.logger.info("Calendar refresh requested by client.")
        board.refresh_monthly()

    rows = board.calendar
    if rows is None:
        if board.calendar_unavailable:
            abort(503, message="Monthly calendar could not be fetched.")
        abort(503, message="Monthly calendar has not been fetched yet.")
    return {"available": not board.calendar_unavailable, "rows": rows}


@api_bp.route('/countdown/start', methods=['POST'])
@api_bp.response(200, CountdownStatusSchema)
@api_bp.alt_response(409, schema=MessageSchema, description="Daily timings have not been loaded yet.")
def start_countdown():
    """Start publishing the countdown once per second."""
    board = get_prayer_board()
    try:
        board.start_countdown()
    except PreconditionViolation as e:
        current_app.logger.warning(f"Countdown start rejected: {e}")
        abort(409, message="Prayer timings are not loaded yet.")
    return {"counting_down": board.is_counting_down, "message": "Countdown started."}


@api_bp.route('/countdown/stop', methods=['POST'])
@api_bp.response(200, CountdownStatusSchema)
def stop_countdown():
    """Stop the countdown. No further updates are published."""
    board = get_prayer_board()
    board.stop()
    return {"counting_down": board.is_counting_down, "message": "Countdown stopped."}
