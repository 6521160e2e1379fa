# CORS configuration
import logging
import os

from flask import request
from flask_cors import CORS

logger = logging.getLogger(__name__)


def _allowed_origins():
    raw = os.environ.get("CORS_ORIGINS", "*").strip()
    if raw in ("", "*"):
        return "*"
    return [o.strip() for o in raw.split(",") if o.strip()]


def configure_cors(app):
    # The mobile/web client calls the JSON API from a different origin
    CORS(app, resources={
        r"/api/*": {
            "origins": _allowed_origins(),
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-Requested-With"],
        },
        r"/health": {"origins": "*", "methods": ["GET"]},
    })

    @app.after_request
    def log_cors(response):
        origin = request.headers.get('Origin')
        if origin:
            logger.debug(f"CORS - Origin: {origin} Method: {request.method} Response: {response.status_code}")
        return response

    return app
