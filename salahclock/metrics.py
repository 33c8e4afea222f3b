# salahclock/metrics.py

from prometheus_client import Counter, Histogram

# Define Prometheus metrics

# Provider API Metrics
API_REQUESTS_TOTAL = Counter('salahclock_api_requests_total', 'Total prayer API requests', ['adapter_name', 'endpoint', 'status'])
API_REQUEST_DURATION_SECONDS = Histogram('salahclock_api_request_duration_seconds', 'Prayer API request duration in seconds', ['adapter_name', 'endpoint'])

# Engine Metrics
FETCH_FAILURES_TOTAL = Counter('salahclock_fetch_failures_total', 'Failed provider fetches', ['kind'])
COUNTDOWN_TICKS_TOTAL = Counter('salahclock_countdown_ticks_total', 'Countdown ticks by outcome', ['status'])
MALFORMED_CALENDAR_DAYS_TOTAL = Counter('salahclock_malformed_calendar_days_total', 'Calendar days flagged during normalization')
