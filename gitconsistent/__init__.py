"""Flask app factory and blueprint registration.

Defines `create_app()` to initialize the Flask app, load configuration,
set up logging and CORS, create the document store, and register route
blueprints.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, g, jsonify
from flask_cors import CORS

# Load .env before Config reads the environment
load_dotenv()

from gitconsistent.config import Config, ensure_data_dirs  # noqa: E402
from gitconsistent.errors import register_error_handlers  # noqa: E402
from gitconsistent.routes.coach import coach_bp  # noqa: E402
from gitconsistent.routes.dashboard import dashboard_bp  # noqa: E402
from gitconsistent.routes.habits import habits_bp  # noqa: E402
from gitconsistent.routes.insights import insights_bp  # noqa: E402
from gitconsistent.routes.journal import journal_bp  # noqa: E402
from gitconsistent.routes.settings import settings_bp  # noqa: E402
from gitconsistent.services.auth_service import login_required  # noqa: E402
from gitconsistent.services.store_service import STORE_EXTENSION_KEY, create_store  # noqa: E402

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("gitconsistent").setLevel(level.upper())


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
        if "DATA_DIR" in overrides and "DB_DIR" not in overrides:
            app.config["DB_DIR"] = os.path.join(app.config["DATA_DIR"], "db")

    _configure_logging(app.config["LOG_LEVEL"])
    logger.info(
        "Starting GitConsistent API (env=%s, store=%s, auth=%s)",
        app.config["GC_ENV"],
        app.config["STORE_BACKEND"],
        app.config["AUTH_MODE"],
    )
    if app.config["AUTH_MODE"] == "dev" and app.config["GC_ENV"] == "prod":
        logger.warning("GC_AUTH_MODE=dev accepts unverified tokens and must not be used with GC_ENV=prod")
    if app.config["STORE_BACKEND"] == "json":
        ensure_data_dirs(app.config)

    origins = app.config["CORS_ORIGINS"]
    CORS(
        app,
        resources={r"/*": {"origins": origins if origins == "*" else origins.split(",")}},
        supports_credentials=False,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )

    register_error_handlers(app)
    app.extensions[STORE_EXTENSION_KEY] = create_store(app.config)

    # Blueprints
    app.register_blueprint(habits_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(coach_bp)
    app.register_blueprint(insights_bp)
    app.register_blueprint(journal_bp)
    app.register_blueprint(settings_bp)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/me")
    @login_required
    def me():
        user = g.user
        return jsonify(
            {
                "uid": g.user_id,
                "name": user.get("name"),
                "email": user.get("email"),
                "picture": user.get("picture"),
            }
        )

    return app
