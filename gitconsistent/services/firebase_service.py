"""Firebase Admin SDK setup and ID token verification."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

logger = logging.getLogger(__name__)


def _load_credentials(cfg):
    creds_path = cfg.get("FIREBASE_CREDENTIALS_PATH")
    if creds_path and os.path.exists(creds_path):
        logger.info("Loading Firebase credentials from %s", creds_path)
        return credentials.Certificate(creds_path)

    project_id = cfg.get("FIREBASE_PROJECT_ID")
    private_key = cfg.get("FIREBASE_PRIVATE_KEY")
    client_email = cfg.get("FIREBASE_CLIENT_EMAIL")
    if project_id and private_key and client_email:
        logger.info("Loading Firebase credentials from environment variables")
        return credentials.Certificate(
            {
                "type": "service_account",
                "project_id": project_id,
                "private_key_id": cfg.get("FIREBASE_PRIVATE_KEY_ID", ""),
                # Env vars carry the key with escaped newlines
                "private_key": private_key.replace("\\n", "\n"),
                "client_email": client_email,
                "client_id": cfg.get("FIREBASE_CLIENT_ID", ""),
                "token_uri": cfg.get("FIREBASE_TOKEN_URI", "https://oauth2.googleapis.com/token"),
            }
        )

    logger.info("No explicit Firebase credentials; using application default credentials")
    return credentials.ApplicationDefault()


def initialize_firebase(cfg) -> firebase_admin.App:
    """Initialize the default Firebase app once and return it."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    options = {}
    if cfg.get("FIREBASE_PROJECT_ID"):
        options["projectId"] = cfg["FIREBASE_PROJECT_ID"]
    app = firebase_admin.initialize_app(_load_credentials(cfg), options or None)
    logger.info("Firebase Admin SDK initialized")
    return app


def verify_id_token(token: str) -> Dict[str, Any]:
    """Verify a Firebase ID token and return its decoded claims."""
    return firebase_auth.verify_id_token(token)
