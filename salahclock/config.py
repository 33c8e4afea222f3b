import os
import zoneinfo

from dotenv import load_dotenv

# Load .env file
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)


def _env_bool(name, default):
    return os.environ.get(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration."""
    LOG_LEVEL = os.environ.get('LOG_LEVEL', "INFO")

    # Sentry Configuration
    SENTRY_DSN = os.environ.get('SENTRY_DSN')

    # Prayer Time API Configuration
    PRAYER_API_ADAPTER = os.environ.get('PRAYER_API_ADAPTER') or "AlAdhanAdapter"
    PRAYER_API_BASE_URL = os.environ.get('PRAYER_API_BASE_URL') or "http://api.aladhan.com/v1"
    PRAYER_API_TIMEOUT = float(os.environ.get('PRAYER_API_TIMEOUT', 10))

    # Fixed location the schedule is shown for (Mezquita Alhuda, Playa Blanca)
    LOCATION_CITY = os.environ.get('LOCATION_CITY', "Playa Blanca")
    LOCATION_COUNTRY = os.environ.get('LOCATION_COUNTRY', "Spain")
    LOCATION_LATITUDE = float(os.environ.get('LOCATION_LATITUDE', 28.8627))
    LOCATION_LONGITUDE = float(os.environ.get('LOCATION_LONGITUDE', -13.8372))
    CALCULATION_METHOD_ID = int(os.environ.get('CALCULATION_METHOD_ID', 3))  # 3 = Muslim World League
    LOCATION_TIMEZONE = os.environ.get('LOCATION_TIMEZONE', "Atlantic/Canary")

    # Countdown
    COUNTDOWN_INTERVAL_SECONDS = float(os.environ.get('COUNTDOWN_INTERVAL_SECONDS', 1.0))
    # Wait between attempts while today's timings could not be fetched
    DAILY_RETRY_SECONDS = float(os.environ.get('DAILY_RETRY_SECONDS', 300))
    # Fetch timings and start the countdown as soon as the app is created
    PRAYER_BOARD_AUTOSTART = _env_bool('PRAYER_BOARD_AUTOSTART', True)


class DevelopmentConfig(Config):
    FLASK_ENV = 'development'
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    FLASK_ENV = 'production'
    DEBUG = False

    try:
        zoneinfo.ZoneInfo(Config.LOCATION_TIMEZONE)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"CRITICAL: LOCATION_TIMEZONE '{Config.LOCATION_TIMEZONE}' is not a known timezone!")

    if not Config.SENTRY_DSN:
        print("Warning: SENTRY_DSN not found. Error tracking will be disabled.")


class TestingConfig(Config):
    TESTING = True
    PRAYER_BOARD_AUTOSTART = False
    PRAYER_API_BASE_URL = "http://aladhan.test/v1"
    SENTRY_DSN = None


config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
