"""Error types and Flask error handlers.

Services raise ``GitConsistentError`` subclasses; the handlers registered by
``register_error_handlers`` turn them into ``{"error": message}`` responses
with the status carried by the exception.
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from pydantic import ValidationError

logger = logging.getLogger(__name__)

ERROR_SNIPPET_CHARS = 250


class GitConsistentError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(GitConsistentError):
    status_code = 400

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.details = details


class AuthError(GitConsistentError):
    status_code = 401


class PermissionDenied(GitConsistentError):
    status_code = 403


class NotFound(GitConsistentError):
    status_code = 404


class StoreError(GitConsistentError):
    status_code = 500


class AIResponseError(GitConsistentError):
    status_code = 502


def _is_permission_error(exc: BaseException) -> bool:
    if isinstance(exc, PermissionDenied):
        return True
    code = getattr(exc, "code", None)
    if code == "permission-denied" or getattr(code, "name", None) == "PERMISSION_DENIED":
        return True
    return "permission denied" in str(exc).lower()


def _is_missing_index_error(exc: BaseException) -> bool:
    text = str(exc)
    return "/firestore/indexes?create_composite=" in text or "requires an index" in text.lower()


def describe_store_failure(action: str, exc: BaseException, index_hint: bool = False) -> str:
    """Build the user-facing message for a failed store operation."""
    if _is_permission_error(exc):
        return (
            f"Failed to {action} due to Firestore permission issues. "
            "Please review your Firestore security rules and the service account's roles."
        )
    text = str(exc)
    if not text:
        return f"Failed to {action}. Please check server logs for details."
    if index_hint and _is_missing_index_error(exc):
        return (
            f"Failed to {action}: Firestore requires a composite index. "
            "For the 'habits' collection create an index on 'userId' (ASC) and 'archived' (ASC); "
            "for 'habitLogs' an index on 'userId' (ASC) and 'date' (ASC). "
            f"Original error: {text[:200]}"
        )
    return f"Failed to {action}: {text[:ERROR_SNIPPET_CHARS]}"


def store_error(action: str, exc: BaseException, index_hint: bool = False) -> GitConsistentError:
    """Translate an exception raised by the store into the error to re-raise."""
    if isinstance(exc, GitConsistentError) and not isinstance(exc, StoreError):
        return exc
    message = describe_store_failure(action, exc, index_hint=index_hint)
    if _is_permission_error(exc):
        return PermissionDenied(message)
    return StoreError(message)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(GitConsistentError)
    def handle_app_error(exc: GitConsistentError):
        body = {"error": exc.message}
        details = getattr(exc, "details", None)
        if details:
            body["details"] = details
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc.message)
        return jsonify(body), exc.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        details = exc.errors(include_url=False, include_context=False, include_input=False)
        return jsonify({"error": "validation_error", "details": details}), 400

    @app.errorhandler(404)
    def handle_not_found(_exc):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(_exc):
        return jsonify({"error": "method not allowed"}), 405

    @app.errorhandler(500)
    def handle_internal_error(exc):
        original = getattr(exc, "original_exception", None) or exc
        logger.exception("Unhandled error: %s", original)
        return jsonify({"error": "internal server error"}), 500
