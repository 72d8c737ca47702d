"""LLMService: schema-validated prompt flows backed by Gemini.

Provides three chains, each ``prompt | llm | PydanticOutputParser``:
- Habit coach tips that continue a conversation with its history.
- Weekly/monthly habit insights grounded in the user's habits and logs.
- Journal entry reflection (day summary + mood analysis).
The parser's format instructions are part of every system prompt, and a
reply that does not parse into the output schema raises AIResponseError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type

from flask import current_app
from langchain_core.exceptions import OutputParserException
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel

from gitconsistent.config import Config
from gitconsistent.errors import AIResponseError
from gitconsistent.schemas import (
    CoachMessage,
    HabitCoachTipsInput,
    HabitCoachTipsOutput,
    HabitInsightsInput,
    HabitInsightsOutput,
    InsightHabit,
    InsightLog,
    JournalAnalysisInput,
    JournalAnalysisOutput,
)
from prompts.coach_templates import (
    HUMAN_INSIGHTS,
    HUMAN_JOURNAL,
    TEMPLATE_COACH,
    TEMPLATE_INSIGHTS,
    TEMPLATE_JOURNAL,
)

logger = logging.getLogger(__name__)

LLM_EXTENSION_KEY = "gitconsistent.llm"


def history_messages(history: Optional[Sequence[CoachMessage]]) -> List[BaseMessage]:
    messages: List[BaseMessage] = []
    for msg in history or []:
        if msg.role == "user":
            messages.append(HumanMessage(content=msg.content))
        else:
            messages.append(AIMessage(content=msg.content))
    return messages


def render_habits_block(habits: Sequence[InsightHabit]) -> str:
    if not habits:
        return "The user has no active habits defined."
    parts = []
    for h in habits:
        lines = [
            f"- Habit: {h.name} (ID: {h.id})",
            f"  Description: {h.description or 'Not provided'}",
            f"  Frequency: {h.frequency}",
        ]
        if h.target_days:
            days = ", ".join(str(d) for d in h.target_days)
            lines.append(f"  Target Days (0=Sun, 1=Mon, ..., 6=Sat): {days}")
        lines.append("---")
        parts.append("\n".join(lines))
    return "\n".join(parts)


def render_logs_block(logs: Sequence[InsightLog]) -> str:
    if not logs:
        return "No habit activity was logged during this period."
    return "\n".join(
        f"- Log for Habit ID {log.habit_id} on {log.date}: {'COMPLETED' if log.completed else 'NOT COMPLETED'}\n---"
        for log in logs
    )


class LLMService:
    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.model_name = model_name or Config.LLM_MODEL
        if llm is None:
            llm = ChatGoogleGenerativeAI(
                model=self.model_name,
                temperature=Config.LLM_TEMPERATURE if temperature is None else temperature,
            )
        self.llm = llm

    def _invoke(
        self,
        flow: str,
        messages: List[Any],
        output_model: Type[BaseModel],
        variables: Dict[str, Any],
    ):
        parser = PydanticOutputParser(pydantic_object=output_model)
        prompt = ChatPromptTemplate.from_messages(messages).partial(
            format_instructions=parser.get_format_instructions()
        )
        chain = prompt | self.llm | parser
        try:
            return chain.invoke(variables)
        except OutputParserException as e:
            logger.error("%s returned output that does not match %s: %s", flow, output_model.__name__, e)
            raise AIResponseError(f"AI response for {flow} could not be understood. Please try again.") from e

    def habit_coach_tips(self, data: HabitCoachTipsInput) -> HabitCoachTipsOutput:
        return self._invoke(
            "habit coach",
            [
                ("system", TEMPLATE_COACH),
                MessagesPlaceholder("history", optional=True),
                ("human", "{current_input}"),
            ],
            HabitCoachTipsOutput,
            {"history": history_messages(data.history), "current_input": data.current_input},
        )

    def generate_habit_insights(self, data: HabitInsightsInput) -> HabitInsightsOutput:
        return self._invoke(
            "habit insights",
            [("system", TEMPLATE_INSIGHTS), ("human", HUMAN_INSIGHTS)],
            HabitInsightsOutput,
            {
                "time_period": data.time_period,
                "habits_block": render_habits_block(data.habits),
                "logs_block": render_logs_block(data.period_logs),
            },
        )

    def analyze_journal_entry(self, data: JournalAnalysisInput) -> JournalAnalysisOutput:
        return self._invoke(
            "journal analysis",
            [("system", TEMPLATE_JOURNAL), ("human", HUMAN_JOURNAL)],
            JournalAnalysisOutput,
            {"journal_text": data.journal_text},
        )


def get_llm_service() -> LLMService:
    """Return the app's LLMService, creating it on first use."""
    svc = current_app.extensions.get(LLM_EXTENSION_KEY)
    if svc is None:
        svc = LLMService(
            model_name=current_app.config.get("LLM_MODEL"),
            temperature=current_app.config.get("LLM_TEMPERATURE"),
        )
        current_app.extensions[LLM_EXTENSION_KEY] = svc
    return svc
