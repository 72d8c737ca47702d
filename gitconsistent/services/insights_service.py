"""InsightsService: AI review of a user's habits over the last week or month."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from gitconsistent.config import Config, config_value
from gitconsistent.errors import AIResponseError, PermissionDenied, StoreError, store_error
from gitconsistent.schemas import HabitInsightsInput, HabitInsightsOutput, InsightHabit, InsightLog
from gitconsistent.services.habit_service import HabitService
from gitconsistent.services.llm_service import LLMService
from gitconsistent.utils.dates import to_date_str

logger = logging.getLogger(__name__)

NO_HABITS_MESSAGE = "You don't have any active habits to review. Add some habits first!"
PERIOD_LABELS = {"weekly": "7 days", "monthly": "30 days"}


class InsightsService:
    def __init__(self, habits: HabitService, llm: LLMService, cfg=Config):
        self.habits = habits
        self.llm = llm
        self.cfg = cfg

    def period_bounds(self, time_period: str, today: date) -> tuple[str, str]:
        days = config_value(self.cfg, "REVIEW_PERIOD_DAYS")[time_period]
        return to_date_str(today - timedelta(days=days - 1)), to_date_str(today)

    def get_ai_habit_review(self, user_id: str, time_period: str, today: date) -> HabitInsightsOutput:
        """Review the user's habits over the period; every failure surfaces as a review error."""
        try:
            return self._review(user_id, time_period, today)
        except Exception as e:
            logger.error("Error generating %s review for %s: %s", time_period, user_id, e)
            # Report the underlying store failure, not the habit service wording
            cause = e.__cause__ if isinstance(e, (StoreError, PermissionDenied)) and e.__cause__ else e
            raise store_error("generate review", cause, index_hint=True) from e

    def _review(self, user_id: str, time_period: str, today: date) -> HabitInsightsOutput:
        active = self.habits.list_active_habits(user_id)
        if not active:
            return HabitInsightsOutput(analysis=NO_HABITS_MESSAGE)

        start, end = self.period_bounds(time_period, today)
        logs = self.habits.list_logs_between(user_id, start, end)
        if not logs:
            return HabitInsightsOutput(
                analysis=(
                    f"No activity logged in the last {PERIOD_LABELS[time_period]}. "
                    "Start tracking your habits to get a review!"
                )
            )

        flow_input = HabitInsightsInput(
            user_id=user_id,
            time_period=time_period,
            habits=[
                InsightHabit(
                    id=h.id,
                    name=h.name,
                    description=h.description or "",
                    frequency=h.frequency,
                    target_days=h.target_days or [],
                    archived=h.archived,
                )
                for h in active
            ],
            period_logs=[
                InsightLog(id=log.id, habit_id=log.habit_id, date=log.date, completed=log.completed)
                for log in logs
            ],
        )
        logger.debug("Requesting %s review for %s: %d habits, %d logs", time_period, user_id, len(active), len(logs))
        result = self.llm.generate_habit_insights(flow_input)
        if result is None or not result.analysis.strip():
            logger.error("AI habit insights flow did not return an analysis for %s", user_id)
            raise AIResponseError("AI could not generate a review at this time. The response was empty.")
        return result
