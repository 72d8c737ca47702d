"""HabitService: habits and their per-date completion logs.

Every operation is scoped to the calling user. Habits owned by someone
else are rejected with PermissionDenied; unknown ids raise NotFound.
Store failures are re-raised as user-facing errors via ``store_error``.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from gitconsistent.config import Config, config_value
from gitconsistent.errors import (
    AuthError,
    GitConsistentError,
    NotFound,
    PermissionDenied,
    ValidationFailed,
    store_error,
)
from gitconsistent.schemas import Habit, HabitLog, HabitValues
from gitconsistent.services.store_service import HABIT_LOGS, HABITS, DocumentStore
from gitconsistent.utils.dates import is_date_str, to_date_str

logger = logging.getLogger(__name__)


def _require_user(user_id: Optional[str], action: str) -> None:
    if not user_id:
        raise AuthError(f"User ID not provided to {action} action")


def _habit_fields(values: HabitValues) -> Dict[str, Any]:
    target_days: List[int] = []
    if values.frequency == "weekly" and values.target_days:
        target_days = sorted(set(values.target_days))
    return {
        "name": values.name,
        "description": values.description or "",
        "frequency": values.frequency,
        "targetDays": target_days,
    }


class HabitService:
    def __init__(self, store: DocumentStore, cfg=Config):
        self.store = store
        self.cfg = cfg

    # -------- Habits --------

    def get_owned_habit(self, user_id: str, habit_id: str) -> Habit:
        if not habit_id:
            raise ValidationFailed("Habit ID not provided")
        try:
            doc = self.store.get(HABITS, habit_id)
        except Exception as e:
            raise store_error("load habit", e) from e
        if doc is None:
            raise NotFound(f"Habit {habit_id} not found.")
        if doc.get("userId") != user_id:
            raise PermissionDenied("You do not have access to this habit.")
        return Habit.model_validate(doc)

    def add_habit(self, user_id: str, values: HabitValues) -> Habit:
        _require_user(user_id, "add habit")
        data = {
            "userId": user_id,
            **_habit_fields(values),
            "createdAt": self.store.server_timestamp(),
            "archived": False,
        }
        try:
            habit_id = self.store.add(HABITS, data)
        except Exception as e:
            logger.error("Error adding habit for user %s: %s", user_id, e)
            raise store_error("add habit", e) from e
        logger.info("Added habit %s for user %s", habit_id, user_id)
        return self.get_owned_habit(user_id, habit_id)

    def update_habit(self, habit_id: str, user_id: str, values: HabitValues) -> Habit:
        _require_user(user_id, "update habit")
        self.get_owned_habit(user_id, habit_id)
        try:
            self.store.update(HABITS, habit_id, _habit_fields(values))
        except GitConsistentError:
            raise
        except Exception as e:
            logger.error("Error updating habit %s: %s", habit_id, e)
            raise store_error("update habit", e) from e
        logger.info("Updated habit %s", habit_id)
        return self.get_owned_habit(user_id, habit_id)

    def set_archived(self, user_id: str, habit_id: str, archived: bool) -> Habit:
        action = "archive habit" if archived else "unarchive habit"
        _require_user(user_id, action)
        self.get_owned_habit(user_id, habit_id)
        try:
            self.store.update(HABITS, habit_id, {"archived": archived})
        except GitConsistentError:
            raise
        except Exception as e:
            logger.error("Error during %s %s: %s", action, habit_id, e)
            raise store_error(action, e) from e
        logger.info("%s %s", "Archived" if archived else "Unarchived", habit_id)
        return self.get_owned_habit(user_id, habit_id)

    def archive_habit(self, user_id: str, habit_id: str) -> Habit:
        return self.set_archived(user_id, habit_id, True)

    def unarchive_habit(self, user_id: str, habit_id: str) -> Habit:
        return self.set_archived(user_id, habit_id, False)

    def delete_habit(self, user_id: str, habit_id: str) -> int:
        """Delete a habit and all of the user's logs for it; returns the log count removed."""
        _require_user(user_id, "delete habit")
        self.get_owned_habit(user_id, habit_id)
        try:
            logs = self.store.query(HABIT_LOGS, [("habitId", "==", habit_id), ("userId", "==", user_id)])
            with self.store.batch() as batch:
                batch.delete(HABITS, habit_id)
                for log in logs:
                    batch.delete(HABIT_LOGS, log["id"])
        except Exception as e:
            logger.error("Error deleting habit %s: %s", habit_id, e)
            raise store_error("delete habit", e) from e
        logger.info("Deleted habit %s and %d logs", habit_id, len(logs))
        return len(logs)

    def list_active_habits(self, user_id: str) -> List[Habit]:
        _require_user(user_id, "list habits")
        try:
            docs = self.store.query(
                HABITS,
                [("userId", "==", user_id), ("archived", "==", False)],
                order_by=[("createdAt", "desc")],
            )
        except Exception as e:
            raise store_error("load habits", e, index_hint=True) from e
        return [Habit.model_validate(d) for d in docs]

    def list_archived_habits(self, user_id: str) -> List[Habit]:
        _require_user(user_id, "list archived habits")
        try:
            docs = self.store.query(
                HABITS,
                [("userId", "==", user_id), ("archived", "==", True)],
                order_by=[("name", "asc")],
            )
        except Exception as e:
            raise store_error("load archived habits", e, index_hint=True) from e
        return [Habit.model_validate(d) for d in docs]

    # -------- Logs --------

    def toggle_habit_completion(self, user_id: str, habit_id: str, day: str, completed: bool) -> Optional[HabitLog]:
        """Mark ``habit_id`` done or not done on ``day``.

        A missing log is only created when marking complete; existing logs
        for the same date are all updated so the pair stays consistent.
        """
        _require_user(user_id, "toggle habit completion")
        if not is_date_str(day):
            raise ValidationFailed("Date must be in YYYY-MM-DD format.")
        self.get_owned_habit(user_id, habit_id)
        try:
            existing = self.store.query(
                HABIT_LOGS,
                [("userId", "==", user_id), ("habitId", "==", habit_id), ("date", "==", day)],
            )
            if not existing and not completed:
                return None
            with self.store.batch() as batch:
                if not existing:
                    log_id = batch.create(
                        HABIT_LOGS,
                        {
                            "userId": user_id,
                            "habitId": habit_id,
                            "date": day,
                            "completed": True,
                            "createdAt": self.store.server_timestamp(),
                        },
                    )
                else:
                    for log in existing:
                        batch.update(HABIT_LOGS, log["id"], {"completed": completed})
                    log_id = existing[0]["id"]
        except Exception as e:
            logger.error("Error toggling habit completion for %s on %s: %s", habit_id, day, e)
            raise store_error("update habit completion", e) from e
        logger.info("Habit %s marked %s on %s", habit_id, "complete" if completed else "incomplete", day)
        return HabitLog.model_validate(self.store.get(HABIT_LOGS, log_id))

    def list_logs_since(self, user_id: str, since: str, habit_id: Optional[str] = None) -> List[HabitLog]:
        _require_user(user_id, "list logs")
        filters = [("userId", "==", user_id), ("date", ">=", since)]
        if habit_id:
            filters.append(("habitId", "==", habit_id))
        try:
            docs = self.store.query(HABIT_LOGS, filters)
        except Exception as e:
            raise store_error("load habit logs", e, index_hint=True) from e
        return [HabitLog.model_validate(d) for d in docs]

    def list_logs_between(self, user_id: str, start: str, end: str) -> List[HabitLog]:
        _require_user(user_id, "list logs")
        try:
            docs = self.store.query(
                HABIT_LOGS,
                [("userId", "==", user_id), ("date", ">=", start), ("date", "<=", end)],
                order_by=[("date", "asc")],
            )
        except Exception as e:
            raise store_error("load habit logs", e, index_hint=True) from e
        return [HabitLog.model_validate(d) for d in docs]

    def graph_logs(self, user_id: str, today: date, habit_id: Optional[str] = None) -> List[HabitLog]:
        """Logs reaching back far enough to fill the contribution graph."""
        since = to_date_str(today - timedelta(days=config_value(self.cfg, "GRAPH_WEEKS") * 7))
        return self.list_logs_since(user_id, since, habit_id=habit_id)

    def sidebar_since(self, today: date) -> str:
        """First date of the recent-logs window shown next to the habit list."""
        return to_date_str(today - timedelta(days=config_value(self.cfg, "SIDEBAR_LOG_DAYS")))

    def sidebar_logs(self, user_id: str, today: date) -> List[HabitLog]:
        return self.list_logs_since(user_id, self.sidebar_since(today))
