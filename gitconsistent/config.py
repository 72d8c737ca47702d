"""Configuration for environment variables and runtime knobs.

Provides a simple config object with the store backend, auth mode,
LLM model and the habit-domain limits used across services.
This keeps the rest of the codebase decoupled from direct env access.
"""

from __future__ import annotations

import os
from collections.abc import Mapping


class Config:
    # Base
    GC_ENV = os.getenv("GC_ENV", "dev")
    DATA_DIR = os.getenv("GC_DATA_DIR", os.path.abspath(os.path.join(os.getcwd(), "data")))
    DB_DIR = os.path.join(DATA_DIR, "db")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # Dates ("today") are resolved in this zone unless the client sends ?today=
    TIMEZONE = os.getenv("GC_TIMEZONE", "UTC")

    # Persistence: "json" (local files under DB_DIR) or "firestore"
    STORE_BACKEND = os.getenv("GC_STORE_BACKEND", "json")

    # Auth: "firebase" verifies ID tokens; "dev" accepts "dev:<uid>" tokens
    AUTH_MODE = os.getenv("GC_AUTH_MODE", "firebase")

    # Firebase Admin credentials (file first, then env service account)
    FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", "")
    FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
    FIREBASE_PRIVATE_KEY = os.getenv("FIREBASE_PRIVATE_KEY", "")
    FIREBASE_PRIVATE_KEY_ID = os.getenv("FIREBASE_PRIVATE_KEY_ID", "")
    FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL", "")
    FIREBASE_CLIENT_ID = os.getenv("FIREBASE_CLIENT_ID", "")
    FIREBASE_TOKEN_URI = os.getenv("FIREBASE_TOKEN_URI", "https://oauth2.googleapis.com/token")

    # Gemini chat model via langchain-google-genai
    LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.0-flash")
    LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))

    CORS_ORIGINS = os.getenv("GC_CORS_ORIGINS", "*")

    # Habit validation limits
    HABIT_NAME_MIN = 2
    HABIT_NAME_MAX = 50
    HABIT_DESCRIPTION_MAX = 200

    # Contribution graph: 53 Sunday-start weeks ending with the current week
    GRAPH_WEEKS = 53
    # Sidebar shows the last 60 days of logs
    SIDEBAR_LOG_DAYS = 60

    # AI review windows (inclusive of today)
    REVIEW_PERIOD_DAYS = {"weekly": 7, "monthly": 30}


def config_value(cfg, key: str):
    """Read ``key`` from the Config class or from a mapping such as ``app.config``."""
    if isinstance(cfg, Mapping):
        return cfg[key]
    return getattr(cfg, key)


def ensure_data_dirs(cfg=Config) -> None:
    """Ensure required data directories exist."""
    os.makedirs(config_value(cfg, "DB_DIR"), exist_ok=True)
