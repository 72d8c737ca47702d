"""Request/response schemas and stored document models.

Holds Pydantic models to validate input payloads, shape responses and
describe the structured output expected from each LLM prompt. Field names
are snake_case in Python and camelCase on the wire and in the store, so
documents written by the web client and by this API stay interchangeable.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gitconsistent.config import Config

Frequency = Literal["daily", "weekly"]
TimePeriod = Literal["weekly", "monthly"]
Weekday = Annotated[int, Field(ge=0, le=6)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# -------- Stored documents --------

class Habit(CamelModel):
    id: str
    user_id: str
    name: str
    description: str = ""
    frequency: Frequency = "daily"
    target_days: List[int] = Field(default_factory=list)
    archived: bool = False
    created_at: Optional[datetime] = None


class HabitLog(CamelModel):
    id: str
    habit_id: str
    user_id: str
    date: str
    completed: bool = False
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class JournalEntry(CamelModel):
    id: str
    user_id: str
    date: str
    entry_text: str
    ai_day_summary: str = ""
    ai_mood_analysis: str = ""
    created_at: Optional[datetime] = None
    entry_suffix: int = 1


class UserSettings(CamelModel):
    user_id: str
    proactive_nudges_enabled: bool = False
    updated_at: Optional[datetime] = None


# -------- Request payloads --------

class HabitValues(CamelModel):
    name: str = Field(min_length=Config.HABIT_NAME_MIN, max_length=Config.HABIT_NAME_MAX)
    description: Optional[str] = Field(default=None, max_length=Config.HABIT_DESCRIPTION_MAX)
    frequency: Frequency
    target_days: Optional[List[Weekday]] = None


class ToggleCompletion(CamelModel):
    completed: bool


class ReviewRequest(CamelModel):
    time_period: TimePeriod


class NudgePreference(CamelModel):
    enabled: bool


# -------- LLM flow contracts --------

class CoachMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class HabitCoachTipsInput(CamelModel):
    current_input: str = Field(min_length=1, description="The user's latest message or query.")
    history: Optional[List[CoachMessage]] = Field(
        default=None,
        description="The preceding conversation history, if any. Ordered from oldest to newest.",
    )


class HabitCoachTipsOutput(CamelModel):
    tips: str = Field(
        description=(
            "Personalized, empathetic, and detailed guidance for improving habit consistency, "
            "overcoming challenges, and removing bad habits, based on the user data and "
            "conversation history. The tone should be supportive and human-like, similar to a therapist."
        )
    )


class InsightHabit(CamelModel):
    id: str
    name: str
    description: str = ""
    frequency: Frequency
    target_days: List[int] = Field(default_factory=list)
    archived: bool = False


class InsightLog(CamelModel):
    id: str
    habit_id: str
    date: str = Field(description="YYYY-MM-DD format")
    completed: bool


class HabitInsightsInput(CamelModel):
    user_id: str = Field(description="The user's unique identifier.")
    time_period: TimePeriod = Field(description="The period for which the review is generated.")
    habits: List[InsightHabit] = Field(description="An array of the user's active habits.")
    period_logs: List[InsightLog] = Field(
        description="An array of habit logs for the user within the specified time period."
    )


class HabitInsightsOutput(CamelModel):
    analysis: str = Field(
        description=(
            "A detailed, empathetic, and actionable analysis of the user's habit performance over "
            "the period. This should highlight achievements, identify patterns (e.g., most consistent "
            "habits, challenging days/habits), and offer encouragement and practical advice for "
            "improvement. The tone should be supportive and insightful, like a helpful coach. "
            "Format as Markdown."
        )
    )


class JournalAnalysisInput(CamelModel):
    journal_text: str = Field(min_length=1, description="The user's journal entry for the day.")


class JournalAnalysisOutput(CamelModel):
    day_summary: str = Field(
        description=(
            "A concise summary of the key activities, events, and thoughts from your journal entry. "
            "This should be 2-4 sentences, speaking directly to you."
        )
    )
    mood_analysis: str = Field(
        description=(
            "An empathetic analysis of your overall mood as perceived from the journal entry. "
            "This should be 1-3 sentences and offer a gentle reflection, speaking directly to you."
        )
    )
