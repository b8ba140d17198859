"""
Listing Assistant Web API
=========================
Flask app factory. One process-wide listing session backs every route.
"""

import logging
from typing import Optional

from flask import Flask

from ..ai.gemini_lister import GeminiLister
from ..config import Config
from ..session.listing_session import ListingSession
from ..storage.history_store import HistoryStore
from .routes_main import init_routes, main_bp

logger = logging.getLogger(__name__)


def create_app(session: Optional[ListingSession] = None) -> Flask:
    """
    Build the Flask app.

    Without a session one is created from the environment, which fails
    fast (ValueError) when no Gemini API key is configured.
    """
    app = Flask(__name__)
    app.secret_key = Config.SECRET_KEY
    app.config['MAX_CONTENT_LENGTH'] = Config.MAX_UPLOAD_MB * 1024 * 1024

    if session is None:
        session = ListingSession(lister=GeminiLister.from_env(), history_store=HistoryStore())

    init_routes(session)
    app.register_blueprint(main_bp)
    logger.info("Listing API ready (model %s)", getattr(session.lister, "model", "unknown"))
    return app
