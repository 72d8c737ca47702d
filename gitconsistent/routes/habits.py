"""Habit routes: CRUD, archive toggles and per-date completion.

GET    /habits                      active habits (?archived=true for the archive)
POST   /habits                      add a habit
PUT    /habits/<id>                 update name, description, frequency, targetDays
DELETE /habits/<id>                 delete a habit and its logs
POST   /habits/<id>/archive         archive
POST   /habits/<id>/unarchive       restore from the archive
PUT    /habits/<id>/logs/<date>     body {"completed": bool}
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from gitconsistent.routes.params import json_body, request_today
from gitconsistent.schemas import HabitValues, ToggleCompletion
from gitconsistent.services import progress_service
from gitconsistent.services.auth_service import login_required
from gitconsistent.services.habit_service import HabitService
from gitconsistent.services.store_service import get_store

habits_bp = Blueprint("habits", __name__)


def _service() -> HabitService:
    return HabitService(get_store(), current_app.config)


@habits_bp.get("/habits")
@login_required
def list_habits():
    svc = _service()
    today = request_today()
    if request.args.get("archived", "").lower() in ("1", "true", "yes"):
        habits = svc.list_archived_habits(g.user_id)
    else:
        habits = svc.list_active_habits(g.user_id)
    logs = svc.sidebar_logs(g.user_id, today)
    return jsonify({"habits": [progress_service.habit_summary(h, logs, today) for h in habits]})


@habits_bp.post("/habits")
@login_required
def add_habit():
    values = HabitValues.model_validate(json_body())
    habit = _service().add_habit(g.user_id, values)
    return jsonify({"habit": habit.to_api()}), 201


@habits_bp.put("/habits/<habit_id>")
@login_required
def update_habit(habit_id: str):
    values = HabitValues.model_validate(json_body())
    habit = _service().update_habit(habit_id, g.user_id, values)
    return jsonify({"habit": habit.to_api()})


@habits_bp.delete("/habits/<habit_id>")
@login_required
def delete_habit(habit_id: str):
    removed = _service().delete_habit(g.user_id, habit_id)
    return jsonify({"deleted": habit_id, "logsDeleted": removed})


@habits_bp.post("/habits/<habit_id>/archive")
@login_required
def archive_habit(habit_id: str):
    habit = _service().archive_habit(g.user_id, habit_id)
    return jsonify({"habit": habit.to_api()})


@habits_bp.post("/habits/<habit_id>/unarchive")
@login_required
def unarchive_habit(habit_id: str):
    habit = _service().unarchive_habit(g.user_id, habit_id)
    return jsonify({"habit": habit.to_api()})


@habits_bp.put("/habits/<habit_id>/logs/<day>")
@login_required
def toggle_completion(habit_id: str, day: str):
    body = ToggleCompletion.model_validate(json_body())
    log = _service().toggle_habit_completion(g.user_id, habit_id, day, body.completed)
    return jsonify({"log": log.to_api() if log else None})
