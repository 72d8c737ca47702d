import json
from datetime import date

import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage

from gitconsistent.errors import AIResponseError, StoreError
from gitconsistent.schemas import (
    CoachMessage,
    HabitCoachTipsInput,
    HabitValues,
    InsightHabit,
    InsightLog,
    JournalAnalysisInput,
)
from gitconsistent.services import llm_service
from gitconsistent.services.coach_service import get_ai_coach_tips
from gitconsistent.services.habit_service import HabitService
from gitconsistent.services.insights_service import NO_HABITS_MESSAGE, InsightsService
from gitconsistent.services.journal_service import JournalService
from gitconsistent.services.llm_service import LLMService
from gitconsistent.services.store_service import JsonDocumentStore

pytestmark = pytest.mark.unit

TODAY = date(2024, 5, 15)


def fake_service(*responses):
    return LLMService(llm=FakeListChatModel(responses=list(responses)))


@pytest.fixture()
def store(tmp_path):
    return JsonDocumentStore(str(tmp_path / "db"))


def test_history_messages_map_roles():
    messages = llm_service.history_messages(
        [CoachMessage(role="user", content="hi"), CoachMessage(role="assistant", content="hello")]
    )
    assert isinstance(messages[0], HumanMessage)
    assert isinstance(messages[1], AIMessage)
    assert messages[1].content == "hello"
    assert llm_service.history_messages(None) == []


def test_render_blocks():
    habits = [InsightHabit(id="h1", name="Read", frequency="weekly", target_days=[1, 3])]
    block = llm_service.render_habits_block(habits)
    assert "- Habit: Read (ID: h1)" in block
    assert "Description: Not provided" in block
    assert "Target Days (0=Sun, 1=Mon, ..., 6=Sat): 1, 3" in block

    logs = [InsightLog(id="l1", habit_id="h1", date="2024-05-13", completed=False)]
    assert "Log for Habit ID h1 on 2024-05-13: NOT COMPLETED" in llm_service.render_logs_block(logs)
    assert llm_service.render_logs_block([]) == "No habit activity was logged during this period."


def test_coach_tips_parses_structured_output():
    svc = fake_service(json.dumps({"tips": "Start with two minutes a day."}))
    data = HabitCoachTipsInput.model_validate(
        {"currentInput": "I keep skipping runs", "history": [{"role": "user", "content": "hi"}]}
    )
    assert get_ai_coach_tips(svc, data).tips == "Start with two minutes a day."


def test_coach_tips_accepts_fenced_json():
    svc = fake_service('```json\n{"tips": "Stack it after coffee."}\n```')
    result = svc.habit_coach_tips(HabitCoachTipsInput(current_input="help"))
    assert result.tips == "Stack it after coffee."


def test_coach_empty_tips_is_an_error():
    svc = fake_service(json.dumps({"tips": "  "}))
    with pytest.raises(AIResponseError) as excinfo:
        get_ai_coach_tips(svc, HabitCoachTipsInput(current_input="help"))
    assert excinfo.value.message == (
        "AI coach could not generate a response at this time. The response was empty."
    )


def test_unparseable_output_is_an_error():
    svc = fake_service("Sure! Here are some tips without JSON.")
    with pytest.raises(AIResponseError) as excinfo:
        svc.habit_coach_tips(HabitCoachTipsInput(current_input="help"))
    assert excinfo.value.status_code == 502


def _habit_service(store):
    return HabitService(store)


def test_review_without_habits(store):
    svc = InsightsService(_habit_service(store), fake_service())
    assert svc.get_ai_habit_review("alice", "weekly", TODAY).analysis == NO_HABITS_MESSAGE


def test_review_without_logs_in_window(store):
    habits = _habit_service(store)
    habit = habits.add_habit("alice", HabitValues(name="Read", frequency="daily"))
    habits.toggle_habit_completion("alice", habit.id, "2024-05-08", True)  # one day before the weekly window
    svc = InsightsService(habits, fake_service())
    assert svc.get_ai_habit_review("alice", "weekly", TODAY).analysis == (
        "No activity logged in the last 7 days. Start tracking your habits to get a review!"
    )


def test_monthly_review_calls_model(store):
    habits = _habit_service(store)
    habit = habits.add_habit("alice", HabitValues(name="Read", frequency="daily"))
    habits.toggle_habit_completion("alice", habit.id, "2024-04-16", True)  # first day of the 30-day window
    svc = InsightsService(habits, fake_service(json.dumps({"analysis": "## Great month"})))
    assert svc.period_bounds("monthly", TODAY) == ("2024-04-16", "2024-05-15")
    assert svc.get_ai_habit_review("alice", "monthly", TODAY).analysis == "## Great month"


def test_review_store_failure_uses_review_wording(store, monkeypatch):
    def broken(*_args, **_kwargs):
        raise RuntimeError("deadline exceeded")

    monkeypatch.setattr(store, "query", broken)
    svc = InsightsService(_habit_service(store), fake_service())
    with pytest.raises(StoreError) as excinfo:
        svc.get_ai_habit_review("alice", "weekly", TODAY)
    assert excinfo.value.message == "Failed to generate review: deadline exceeded"


def test_review_missing_index_guidance(store, monkeypatch):
    def needs_index(*_args, **_kwargs):
        raise RuntimeError(
            "400 The query requires an index. You can create it here: "
            "https://console.firebase.google.com/project/demo/firestore/indexes?create_composite=abc"
        )

    monkeypatch.setattr(store, "query", needs_index)
    svc = InsightsService(_habit_service(store), fake_service())
    with pytest.raises(StoreError) as excinfo:
        svc.get_ai_habit_review("alice", "monthly", TODAY)
    assert excinfo.value.message.startswith("Failed to generate review: Firestore requires a composite index.")


def test_review_empty_analysis_keeps_ai_error(store):
    habits = _habit_service(store)
    habit = habits.add_habit("alice", HabitValues(name="Read", frequency="daily"))
    habits.toggle_habit_completion("alice", habit.id, "2024-05-15", True)
    svc = InsightsService(habits, fake_service(json.dumps({"analysis": " "})))
    with pytest.raises(AIResponseError):
        svc.get_ai_habit_review("alice", "weekly", TODAY)


def test_journal_entries_get_daily_suffixes(store):
    reply = json.dumps({"daySummary": "A busy day.", "moodAnalysis": "You seem upbeat."})
    svc = JournalService(store, fake_service(reply, reply, reply))

    _, first = svc.analyze_journal_entry("alice", JournalAnalysisInput(journal_text="Went hiking"), TODAY)
    _, second = svc.analyze_journal_entry("alice", JournalAnalysisInput(journal_text="Cooked dinner"), TODAY)
    analysis, third = svc.analyze_journal_entry(
        "alice", JournalAnalysisInput(journal_text="Slept in"), date(2024, 5, 16)
    )

    assert (first.entry_suffix, second.entry_suffix, third.entry_suffix) == (1, 2, 1)
    assert analysis.day_summary == "A busy day."
    assert second.ai_mood_analysis == "You seem upbeat."

    grouped = svc.list_journal_entries("alice")
    assert [day["date"] for day in grouped] == ["2024-05-16", "2024-05-15"]
    assert [e["entryText"] for e in grouped[1]["entries"]] == ["Went hiking", "Cooked dinner"]


def test_journal_incomplete_analysis(store):
    svc = JournalService(store, fake_service(json.dumps({"daySummary": "Fine.", "moodAnalysis": ""})))
    with pytest.raises(AIResponseError):
        svc.analyze_journal_entry("alice", JournalAnalysisInput(journal_text="ok"), TODAY)
    assert svc.list_journal_entries("alice") == []


def test_journal_save_failure_message(store, monkeypatch):
    reply = json.dumps({"daySummary": "A day.", "moodAnalysis": "Calm."})
    svc = JournalService(store, fake_service(reply))

    def broken(*_args, **_kwargs):
        raise RuntimeError("quota exceeded")

    monkeypatch.setattr(store, "add", broken)
    with pytest.raises(StoreError) as excinfo:
        svc.analyze_journal_entry("alice", JournalAnalysisInput(journal_text="ok"), TODAY)
    assert excinfo.value.message == (
        "AI analysis complete, but failed to save journal entry: Failed to save journal entry: quota exceeded"
    )


def test_journal_save_permission_failure(store, monkeypatch):
    reply = json.dumps({"daySummary": "A day.", "moodAnalysis": "Calm."})
    svc = JournalService(store, fake_service(reply))

    def denied(*_args, **_kwargs):
        raise RuntimeError("7 PERMISSION_DENIED: permission denied")

    monkeypatch.setattr(store, "add", denied)
    with pytest.raises(StoreError) as excinfo:
        svc.analyze_journal_entry("alice", JournalAnalysisInput(journal_text="ok"), TODAY)
    assert excinfo.value.message.startswith(
        "AI analysis complete, but failed to save journal entry: "
        "Failed to save journal entry due to Firestore permission issues."
    )
    assert "security rules" in excinfo.value.message
