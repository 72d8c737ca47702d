"""Request authentication.

Clients send the Firebase ID token of the signed-in user as
``Authorization: Bearer <token>``. ``login_required`` resolves it to a
user id stored on ``flask.g`` for the rest of the request.

In ``dev`` auth mode (local runs and tests) a token ``dev:<uid>`` signs in
as ``<uid>`` without contacting Firebase.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Dict

from firebase_admin import exceptions as firebase_exceptions
from flask import current_app, g, request

from gitconsistent.errors import AuthError
from gitconsistent.services import firebase_service

logger = logging.getLogger(__name__)

DEV_TOKEN_PREFIX = "dev:"


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Missing bearer token.")
    return token.strip()


def authenticate(token: str) -> Dict[str, Any]:
    """Return the user claims for ``token`` or raise AuthError."""
    mode = current_app.config.get("AUTH_MODE", "firebase")
    if mode == "dev":
        uid = token[len(DEV_TOKEN_PREFIX):] if token.startswith(DEV_TOKEN_PREFIX) else ""
        if not uid:
            raise AuthError("Invalid development token.")
        return {"uid": uid, "name": uid, "email": None, "picture": None}

    firebase_service.initialize_firebase(current_app.config)
    try:
        claims = firebase_service.verify_id_token(token)
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.info("Rejected ID token: %s", e)
        raise AuthError("Invalid or expired authentication token.") from e
    if not claims.get("uid"):
        raise AuthError("Authentication token has no user id.")
    return claims


def login_required(view):
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        claims = authenticate(_bearer_token())
        g.user = claims
        g.user_id = claims["uid"]
        return view(*args, **kwargs)

    return wrapper
