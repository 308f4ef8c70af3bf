# =============================================================================
# GITHUB WEBHOOK RECEIVER - EXCEPTIONS
# =============================================================================
"""
Webhook Exceptions

Every exception carries the HTTP status it maps to and the public body
returned to the sender. Detailed causes stay in the server log; bodies
only carry sender-correctable information.

    WebhookError               500  generic base
    ├── WebhookConfigError     500  secret not configured
    ├── WebhookValidationError 401  signature missing / invalid
    ├── WebhookParseError      500  body is not JSON (logged, generic body)
    ├── MalformedPayloadError  400  payload fails a structural check
    └── UnsupportedEventError  400  event header missing / unknown
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

INTERNAL_ERROR_MESSAGE = "Internal server error"


class WebhookError(Exception):
    """Base exception for webhook errors."""

    status_code = 500

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message if details is None else f"{message}: {details}")

    def to_body(self) -> Dict[str, Any]:
        """Public response body."""
        return {"message": self.message}


class WebhookConfigError(WebhookError):
    """Raised when webhook configuration is invalid (e.g. no secret)."""

    def __init__(self, message: str = "Webhook secret not configured", details: Optional[str] = None):
        super().__init__(message, details)


class WebhookValidationError(WebhookError):
    """Raised when webhook signature validation fails."""

    status_code = 401


class WebhookParseError(WebhookError):
    """
    Raised when the webhook body cannot be decoded as JSON.

    The sender only sees the generic internal error; the decoder message
    is kept in ``details`` for the log.
    """

    def to_body(self) -> Dict[str, Any]:
        return {"message": INTERNAL_ERROR_MESSAGE}


class MalformedPayloadError(WebhookError):
    """Raised when a payload fails a structural check."""

    status_code = 400

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.details:
            body["error"] = self.details
        return body


class UnsupportedEventError(WebhookError):
    """Raised when the event header is missing or not a supported event."""

    status_code = 400

    def __init__(self, event_type: Optional[str], supported_events: Sequence[str]):
        self.event_type = event_type
        self.supported_events = list(supported_events)
        token = event_type if event_type else "undefined"
        super().__init__(f"Unsupported GitHub event: {token}")

    def to_body(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "supported_events": list(self.supported_events),
        }


__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "WebhookError",
    "WebhookConfigError",
    "WebhookValidationError",
    "WebhookParseError",
    "MalformedPayloadError",
    "UnsupportedEventError",
]
