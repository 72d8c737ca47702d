"""Request helpers shared by the blueprints."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict

from flask import current_app, request

from gitconsistent.errors import ValidationFailed
from gitconsistent.utils import dates


def request_today() -> date:
    """``?today=YYYY-MM-DD`` from the client, else today in GC_TIMEZONE."""
    raw = request.args.get("today")
    if raw:
        try:
            return dates.parse_date(raw)
        except ValueError:
            raise ValidationFailed("today must be in YYYY-MM-DD format.") from None
    return dates.today(current_app.config.get("TIMEZONE"))


def json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationFailed("Request body must be a JSON object.")
    return payload
