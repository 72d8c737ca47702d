"""Habit coach conversation turn."""

from __future__ import annotations

import logging

from gitconsistent.errors import AIResponseError
from gitconsistent.schemas import HabitCoachTipsInput, HabitCoachTipsOutput
from gitconsistent.services.llm_service import LLMService

logger = logging.getLogger(__name__)


def get_ai_coach_tips(llm: LLMService, data: HabitCoachTipsInput) -> HabitCoachTipsOutput:
    result = llm.habit_coach_tips(data)
    if result is None or not result.tips.strip():
        logger.error("AI coach did not return tips (history=%d turns)", len(data.history or []))
        raise AIResponseError("AI coach could not generate a response at this time. The response was empty.")
    return result
