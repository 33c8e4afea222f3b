# salahclock/extensions.py

from flask_cors import CORS
from flask_smorest import Api

# CORS extension (the page that renders the schedule is served from elsewhere)
cors = CORS()

# Flask-Smorest API (blueprints + OpenAPI docs)
api = Api()
