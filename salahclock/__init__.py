import logging

import sentry_sdk
from flask import Flask
from sentry_sdk.integrations.flask import FlaskIntegration

from .extensions import api, cors


def create_app(config_name, adapter=None, clock=None, timer_factory=None):
    """
    Flask Application Factory function.

    adapter, clock and timer_factory replace the configured prayer API adapter,
    the wall clock and threading.Timer (tests pass deterministic stand-ins).
    """
    app = Flask(__name__, instance_relative_config=False)

    # 1. Load Config
    from .config import config_by_name
    config_obj = config_by_name.get(config_name, config_by_name['default'])
    app.config.from_object(config_obj)

    # 2. Set up Logging
    # Every module logger lives under "salahclock", i.e. below app.logger.
    log_level_str = app.config.get('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    app.logger.setLevel(log_level)
    app.logger.info(f"App configured with: {config_obj.__name__}")

    # Flask-Smorest API documentation configuration
    app.config["API_TITLE"] = "SalahClock API"
    app.config["API_VERSION"] = "v1"
    app.config["OPENAPI_VERSION"] = "3.0.2"
    app.config["OPENAPI_URL_PREFIX"] = "/api/docs"
    app.config["OPENAPI_SWAGGER_UI_PATH"] = "/swagger-ui"
    app.config["OPENAPI_SWAGGER_UI_URL"] = "https://cdn.jsdelivr.net/npm/swagger-ui-dist/"

    # 3. Sentry SDK initialization - for error tracking
    if app.config.get('SENTRY_DSN'):
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=1.0
        )
        app.logger.info("Sentry initialized for error tracking.")

    # 4. Initialize Extensions
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})
    api.init_app(app)

    # 5. Register Blueprints
    from .routes.main_routes import main_bp
    from .routes.api_routes import api_bp
    api.register_blueprint(main_bp)
    api.register_blueprint(api_bp)

    # 6. Build the prayer board for the fixed location
    from .models import Location
    from .services.api_adapters import get_selected_api_adapter
    from .services.prayer_time_service import PrayerBoard
    from .utils.time_utils import ZoneClock

    location = Location.from_config(app.config)
    if adapter is None:
        adapter = get_selected_api_adapter(app.config)
        if adapter is None:
            raise RuntimeError(f"No usable prayer API adapter configured ({app.config.get('PRAYER_API_ADAPTER')}).")

    board_kwargs = {}
    if timer_factory is not None:
        board_kwargs['timer_factory'] = timer_factory
    board = PrayerBoard(
        adapter=adapter,
        location=location,
        clock=clock or ZoneClock(location.timezone),
        interval_seconds=app.config['COUNTDOWN_INTERVAL_SECONDS'],
        retry_seconds=app.config['DAILY_RETRY_SECONDS'],
        **board_kwargs
    )
    app.extensions['prayer_board'] = board

    if app.config.get('PRAYER_BOARD_AUTOSTART'):
        results = board.start()
        app.logger.info(f"Prayer board started for {location.city} ({location.timezone}): {results}")

    app.logger.info(f"Application initialized with environment: {app.config.get('FLASK_ENV')}, Debug: {app.config.get('DEBUG')}")

    # 7. Finally, return the app
    return app
