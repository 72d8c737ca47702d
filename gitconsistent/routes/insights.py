"""Insights route: POST /insights/review with body {"timePeriod": "weekly"|"monthly"}."""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify

from gitconsistent.routes.params import json_body, request_today
from gitconsistent.schemas import ReviewRequest
from gitconsistent.services.auth_service import login_required
from gitconsistent.services.habit_service import HabitService
from gitconsistent.services.insights_service import InsightsService
from gitconsistent.services.llm_service import get_llm_service
from gitconsistent.services.store_service import get_store

insights_bp = Blueprint("insights", __name__)


@insights_bp.post("/insights/review")
@login_required
def habit_review():
    body = ReviewRequest.model_validate(json_body())
    cfg = current_app.config
    svc = InsightsService(HabitService(get_store(), cfg), get_llm_service(), cfg)
    result = svc.get_ai_habit_review(g.user_id, body.time_period, request_today())
    return jsonify(result.to_api())
