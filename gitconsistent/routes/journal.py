"""Journal routes.

GET  /journal   saved entries grouped by date
POST /journal   body {"journalText": str}; analyzes and saves today's entry
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from gitconsistent.routes.params import json_body, request_today
from gitconsistent.schemas import JournalAnalysisInput
from gitconsistent.services.auth_service import login_required
from gitconsistent.services.journal_service import JournalService
from gitconsistent.services.llm_service import get_llm_service
from gitconsistent.services.store_service import get_store

journal_bp = Blueprint("journal", __name__)


@journal_bp.get("/journal")
@login_required
def list_entries():
    svc = JournalService(get_store())
    return jsonify({"days": svc.list_journal_entries(g.user_id)})


@journal_bp.post("/journal")
@login_required
def analyze_entry():
    data = JournalAnalysisInput.model_validate(json_body())
    svc = JournalService(get_store(), get_llm_service())
    analysis, entry = svc.analyze_journal_entry(g.user_id, data, request_today())
    return jsonify({**analysis.to_api(), "entry": entry.to_api()}), 201
