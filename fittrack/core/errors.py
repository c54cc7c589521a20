"""
Error types and helpers shared by services and routes.

Services raise these; main.py maps them to JSON envelopes of the form
{"error": "...", "details": ...}.
"""
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred."


class FitTrackError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 400
    public_message = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        super().__init__(message or self.public_message)
        self.details = details


class AuthError(FitTrackError):
    status_code = 401
    public_message = "Not authenticated"


class NotFoundError(FitTrackError):
    status_code = 404
    public_message = "Not found"


class ConflictError(FitTrackError):
    status_code = 409
    public_message = "Already exists"


class WebhookError(FitTrackError):
    """Raised when a workflow webhook fails or answers with an error."""

    status_code = 502
    public_message = "Workflow request failed. Please try again."


class WebhookNotConfiguredError(WebhookError):
    """Raised when the webhook URL for a workflow is not set."""

    status_code = 500
    public_message = "Service is not properly configured. Please try again later."


def get_error_message(error: Any) -> str:
    if isinstance(error, BaseException):
        return str(error) or error.__class__.__name__
    if isinstance(error, str):
        return error
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return GENERIC_ERROR_MESSAGE


def log_error(error: Any, context: Optional[str] = None) -> None:
    message = get_error_message(error)
    exc_info = error if isinstance(error, BaseException) else None
    if context:
        logger.error(f"[APP ERROR] {context}: {message}", exc_info=exc_info)
    else:
        logger.error(f"[APP ERROR] {message}", exc_info=exc_info)
