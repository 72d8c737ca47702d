"""Progress routes: dashboard, sidebar, per-habit graph and raw logs.

All of them accept ``?today=YYYY-MM-DD`` so streaks and the graph follow
the client's local date.
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from gitconsistent.errors import ValidationFailed
from gitconsistent.routes.params import request_today
from gitconsistent.services import progress_service
from gitconsistent.services.auth_service import login_required
from gitconsistent.services.habit_service import HabitService
from gitconsistent.services.store_service import get_store
from gitconsistent.utils.dates import is_date_str, to_date_str

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.get("/dashboard")
@login_required
def dashboard():
    svc = HabitService(get_store(), current_app.config)
    today = request_today()
    habits = svc.list_active_habits(g.user_id)
    logs = svc.graph_logs(g.user_id, today)
    return jsonify(
        {
            "today": to_date_str(today),
            "habits": [progress_service.habit_summary(h, logs, today) for h in habits],
            "graph": progress_service.build_contribution_graph(logs, today, weeks=current_app.config["GRAPH_WEEKS"]),
            "longestCurrentStreak": progress_service.longest_current_daily_streak(habits, logs, today),
        }
    )


@dashboard_bp.get("/sidebar")
@login_required
def sidebar():
    svc = HabitService(get_store(), current_app.config)
    today = request_today()
    habits = svc.list_active_habits(g.user_id)
    logs = svc.sidebar_logs(g.user_id, today)
    return jsonify(
        {
            "today": to_date_str(today),
            "habits": [progress_service.habit_summary(h, logs, today) for h in habits],
            "weeklyProgress": progress_service.weekly_progress(habits, logs, today),
            "todayProgress": progress_service.today_progress(habits, logs, today),
            "quote": progress_service.daily_quote(today),
        }
    )


@dashboard_bp.get("/habits/<habit_id>/graph")
@login_required
def habit_graph(habit_id: str):
    svc = HabitService(get_store(), current_app.config)
    today = request_today()
    habit = svc.get_owned_habit(g.user_id, habit_id)
    logs = svc.graph_logs(g.user_id, today, habit_id=habit.id)
    return jsonify(progress_service.habit_summary(habit, logs, today, graph=True))


@dashboard_bp.get("/logs")
@login_required
def list_logs():
    svc = HabitService(get_store(), current_app.config)
    since = request.args.get("since")
    if since is None:
        since = svc.sidebar_since(request_today())
    elif not is_date_str(since):
        raise ValidationFailed("since must be in YYYY-MM-DD format.")
    logs = svc.list_logs_since(g.user_id, since, habit_id=request.args.get("habitId"))
    return jsonify({"since": since, "logs": [log.to_api() for log in logs]})
