"""Coach route: POST /coach/tips

Body: {"currentInput": str, "history": [{"role": "user"|"assistant", "content": str}]}
Returns {"tips": str}.
"""

from __future__ import annotations

from flask import Blueprint, jsonify

from gitconsistent.routes.params import json_body
from gitconsistent.schemas import HabitCoachTipsInput
from gitconsistent.services.auth_service import login_required
from gitconsistent.services.coach_service import get_ai_coach_tips
from gitconsistent.services.llm_service import get_llm_service

coach_bp = Blueprint("coach", __name__)


@coach_bp.post("/coach/tips")
@login_required
def coach_tips():
    data = HabitCoachTipsInput.model_validate(json_body())
    return jsonify(get_ai_coach_tips(get_llm_service(), data).to_api())
