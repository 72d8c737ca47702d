"""JournalService: analyze a journal entry with the LLM and keep it.

Entries are stored per user and date; several entries on the same day are
numbered with ``entrySuffix`` (1, 2, 3, ...) in the order they were saved.
"""

from __future__ import annotations

import logging
from datetime import date
from itertools import groupby
from typing import Any, Dict, List, Optional, Tuple

from gitconsistent.errors import AIResponseError, AuthError, StoreError, describe_store_failure, store_error
from gitconsistent.schemas import JournalAnalysisInput, JournalAnalysisOutput, JournalEntry
from gitconsistent.services.llm_service import LLMService
from gitconsistent.services.store_service import JOURNAL_ENTRIES, DocumentStore
from gitconsistent.utils.dates import to_date_str

logger = logging.getLogger(__name__)


class JournalService:
    def __init__(self, store: DocumentStore, llm: Optional[LLMService] = None):
        self.store = store
        self.llm = llm

    def _entries_on(self, user_id: str, day: str) -> List[Dict[str, Any]]:
        return self.store.query(JOURNAL_ENTRIES, [("userId", "==", user_id), ("date", "==", day)])

    def analyze_journal_entry(
        self, user_id: str, data: JournalAnalysisInput, today: date
    ) -> Tuple[JournalAnalysisOutput, JournalEntry]:
        if not user_id:
            raise AuthError("User ID not provided to analyze journal entry action")

        result = self.llm.analyze_journal_entry(data)
        if result is None or not result.day_summary.strip() or not result.mood_analysis.strip():
            logger.error("Journal analysis returned an incomplete result for %s", user_id)
            raise AIResponseError("AI could not analyze the journal entry at this time. The response was incomplete.")

        day = to_date_str(today)
        try:
            suffix = len(self._entries_on(user_id, day)) + 1
            entry_id = self.store.add(
                JOURNAL_ENTRIES,
                {
                    "userId": user_id,
                    "date": day,
                    "entryText": data.journal_text,
                    "aiDaySummary": result.day_summary,
                    "aiMoodAnalysis": result.mood_analysis,
                    "createdAt": self.store.server_timestamp(),
                    "entrySuffix": suffix,
                },
            )
            doc = self.store.get(JOURNAL_ENTRIES, entry_id)
        except Exception as e:
            logger.error("Error saving journal entry for %s: %s", user_id, e)
            raise StoreError(
                "AI analysis complete, but failed to save journal entry: "
                + describe_store_failure("save journal entry", e)
            ) from e
        logger.info("Saved journal entry %s for %s on %s (#%d)", entry_id, user_id, day, suffix)
        return result, JournalEntry.model_validate(doc)

    def list_journal_entries(self, user_id: str) -> List[Dict[str, Any]]:
        """Entries grouped by date: newest date first, oldest entry first within a date."""
        if not user_id:
            raise AuthError("User ID not provided to list journal entries action")
        try:
            docs = self.store.query(JOURNAL_ENTRIES, [("userId", "==", user_id)])
        except Exception as e:
            raise store_error("load journal entries", e) from e

        entries = [JournalEntry.model_validate(d) for d in docs]
        entries.sort(key=lambda e: e.entry_suffix)
        entries.sort(key=lambda e: e.date, reverse=True)
        return [
            {"date": day, "entries": [e.to_api() for e in group]}
            for day, group in groupby(entries, key=lambda e: e.date)
        ]
