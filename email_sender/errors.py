"""
Error taxonomy for draft generation and dispatch.

Each error knows its HTTP status and renders its own JSON payload, so the FastAPI app only
needs one exception handler. Fields appear on an error only when they belong to that kind.
"""
from __future__ import annotations

from typing import Any


class EmailSenderError(Exception):
    """Base for every error surfaced to the caller."""

    status_code = 500
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"success": False, "error": self.message}


# ---------------------------------------------------------------------------
# Draft generation
# ---------------------------------------------------------------------------
class GenerationError(EmailSenderError):
    """Draft generation failed."""


class InvalidPromptError(GenerationError):
    status_code = 400


class CompletionNotConfiguredError(GenerationError):
    status_code = 500

    def __init__(self, message: str = "Groq API key not configured"):
        super().__init__(message)


class EmptyCompletionError(GenerationError):
    status_code = 500

    def __init__(self, message: str = "Failed to generate email content"):
        super().__init__(message)


class UpstreamAuthError(GenerationError):
    status_code = 401

    def __init__(self, message: str = "Invalid API key configuration"):
        super().__init__(message)


class UpstreamThrottledError(GenerationError):
    status_code = 429
    retryable = True

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message)


class UpstreamUnavailableError(GenerationError):
    status_code = 500
    retryable = True

    def __init__(self, message: str = "Internal server error occurred while generating email"):
        super().__init__(message)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
class DispatchError(EmailSenderError):
    """Dispatch failed before or during sending."""


class MissingFieldError(DispatchError):
    status_code = 400

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"{field.capitalize()} is required and must be a non-empty string")
        self.field = field


class InvalidRecipientsError(DispatchError):
    """Batch-level violation (detail only) or per-address failures (invalid_items listed)."""

    status_code = 400

    def __init__(self, detail: str, invalid_items: list[str] | None = None):
        super().__init__(detail)
        self.detail = detail
        self.invalid_items = list(invalid_items or [])

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.invalid_items:
            payload["failedRecipients"] = self.invalid_items
        return payload


class TransportUnavailableError(DispatchError):
    status_code = 500
    retryable = True

    def __init__(self, message: str = "Email service configuration error", recipients: list[str] | None = None):
        super().__init__(message)
        self.recipients = list(recipients or [])

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["sentCount"] = 0
        payload["failedRecipients"] = self.recipients
        return payload


class AllSendsFailedError(DispatchError):
    """Content was accepted but no recipient could be delivered to."""

    status_code = 500
    retryable = True

    def __init__(self, failed_recipients: list[str]):
        super().__init__("Failed to send emails to any recipients")
        self.failed_recipients = list(failed_recipients)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["sentCount"] = 0
        payload["failedRecipients"] = self.failed_recipients
        return payload
