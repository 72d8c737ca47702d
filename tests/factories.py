"""Builders for habit and log models used across tests."""

from langchain_core.language_models import BaseChatModel

from gitconsistent.schemas import Habit, HabitLog


def make_habit(habit_id="h1", frequency="daily", target_days=None, user_id="alice", name=None):
    return Habit(
        id=habit_id,
        user_id=user_id,
        name=name or f"Habit {habit_id}",
        frequency=frequency,
        target_days=target_days or [],
    )


def make_log(habit_id, day, completed=True, user_id="alice", log_id=None):
    return HabitLog(
        id=log_id or f"{habit_id}-{day}",
        habit_id=habit_id,
        user_id=user_id,
        date=day,
        completed=completed,
    )


class ExhaustedChatModel(BaseChatModel):
    """Chat model whose every call fails like a rate-limited Gemini request."""

    @property
    def _llm_type(self) -> str:
        return "exhausted"

    def _generate(self, messages, stop=None, run_manager=None, **kwargs):
        raise RuntimeError("429 Resource has been exhausted (quota)")
