"""Settings routes: GET /settings, PUT /settings/nudges with {"enabled": bool}."""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from gitconsistent.routes.params import json_body
from gitconsistent.schemas import NudgePreference
from gitconsistent.services.auth_service import login_required
from gitconsistent.services.settings_service import SettingsService
from gitconsistent.services.store_service import get_store

settings_bp = Blueprint("settings", __name__)


@settings_bp.get("/settings")
@login_required
def get_settings():
    return jsonify(SettingsService(get_store()).get_user_settings(g.user_id).to_api())


@settings_bp.put("/settings/nudges")
@login_required
def update_nudges():
    body = NudgePreference.model_validate(json_body())
    settings = SettingsService(get_store()).update_nudge_preference(g.user_id, body.enabled)
    return jsonify(settings.to_api())
