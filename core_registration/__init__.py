from flask import Flask
from flask_cors import CORS
import logging
import os
# Importing the routes imports the connection provider, which refuses to load
# without MONGODB_URI. It does not connect: the first request that needs the
# database starts the (single) connection attempt.
from core_registration.api.routes import api as api_bp
from core_registration.pages.routes import pages_bp


def create_app():
    app = Flask(__name__)

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # basic secret key for sessions; override with environment variable in production
    app.secret_key = os.getenv("SECRET_KEY", "dev-secret-key-change-me")

    # The form page is served from this app, so CORS only matters for a
    # separately hosted frontend dev server.
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
    CORS(app, resources={r"/api/*": {"origins": origins}})

    app.register_blueprint(pages_bp)
    app.register_blueprint(api_bp, url_prefix="/api")

    return app
