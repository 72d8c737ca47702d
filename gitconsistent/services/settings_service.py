"""User settings stored one document per user."""

from __future__ import annotations

import logging

from gitconsistent.errors import store_error
from gitconsistent.schemas import UserSettings
from gitconsistent.services.store_service import USER_SETTINGS, DocumentStore

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def get_user_settings(self, user_id: str) -> UserSettings:
        """Stored settings, or the defaults when the user never saved any."""
        try:
            doc = self.store.get(USER_SETTINGS, user_id)
        except Exception as e:
            raise store_error("load user settings", e) from e
        if doc is None:
            return UserSettings(user_id=user_id)
        doc.pop("id", None)
        doc.setdefault("userId", user_id)
        return UserSettings.model_validate(doc)

    def update_nudge_preference(self, user_id: str, enabled: bool) -> UserSettings:
        data = {
            "userId": user_id,
            "proactiveNudgesEnabled": enabled,
            "updatedAt": self.store.server_timestamp(),
        }
        try:
            self.store.set(USER_SETTINGS, user_id, data, merge=True)
        except Exception as e:
            logger.error("Error updating nudge preference for %s: %s", user_id, e)
            raise store_error("update nudge preference", e) from e
        logger.info("Proactive nudges %s for %s", "enabled" if enabled else "disabled", user_id)
        return self.get_user_settings(user_id)
