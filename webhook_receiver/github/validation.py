# =============================================================================
# GITHUB WEBHOOK RECEIVER - REQUEST VALIDATION
# =============================================================================
"""
Request Validation

Checks that run before a delivery is dispatched:

    - body size against the configured limit
    - the ``X-Hub-Signature-256`` header against the raw body
    - the structure of ``audit_log_streaming`` payloads

Each check returns a :class:`ValidationResult` (or a bool for the audit
validator) rather than raising, so the handler can map outcomes to
status codes in one place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from webhook_receiver.github.events import AUDIT_LOG_STREAMING
from webhook_receiver.github.signature import verify_signature

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

HEADER_SIGNATURE = "X-Hub-Signature-256"

MISSING_SIGNATURE_MESSAGE = "Missing signature header"
INVALID_SIGNATURE_MESSAGE = "Invalid signature"
PAYLOAD_TOO_LARGE_MESSAGE = "Payload too large"


# =============================================================================
# RESULT TYPES
# =============================================================================


class ValidationStatus(str, Enum):
    """Outcome of a pre-dispatch check."""

    VALID = "valid"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED_PAYLOAD = "malformed_payload"


@dataclass(frozen=True)
class ValidationResult:
    status: ValidationStatus
    status_code: int = 200
    message: Optional[str] = None
    details: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.status is ValidationStatus.VALID

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(ValidationStatus.VALID)

    @classmethod
    def missing_signature(cls) -> "ValidationResult":
        return cls(ValidationStatus.INVALID_SIGNATURE, 401, MISSING_SIGNATURE_MESSAGE, "missing")

    @classmethod
    def invalid_signature(cls) -> "ValidationResult":
        return cls(ValidationStatus.INVALID_SIGNATURE, 401, INVALID_SIGNATURE_MESSAGE, "invalid")

    @classmethod
    def malformed_payload(cls, message: str, details: Optional[str] = None) -> "ValidationResult":
        return cls(ValidationStatus.MALFORMED_PAYLOAD, 400, message, details)

    @classmethod
    def payload_too_large(cls, size: int, limit: int) -> "ValidationResult":
        return cls.malformed_payload(PAYLOAD_TOO_LARGE_MESSAGE, f"{size} > {limit} bytes")


# =============================================================================
# CHECKS
# =============================================================================


def validate_body_size(body: bytes, max_bytes: Optional[int]) -> ValidationResult:
    """Reject bodies over ``max_bytes``. A falsy limit disables the check."""
    if max_bytes and len(body) > max_bytes:
        logger.warning(f"Rejecting oversized body ({len(body)} > {max_bytes} bytes)")
        return ValidationResult.payload_too_large(len(body), max_bytes)
    return ValidationResult.valid()


def validate_signature_header(
    headers: Mapping[str, str],
    body: bytes,
    secret: str,
) -> ValidationResult:
    """
    Verify the delivery signature.

    Args:
        headers: Request headers; lookup must be case-insensitive
        body: Raw request body
        secret: Configured webhook secret (non-empty)

    Returns:
        ValidationResult distinguishing a missing header from a mismatch
    """
    signature = headers.get(HEADER_SIGNATURE)
    if not signature:
        logger.warning("Missing webhook signature header")
        return ValidationResult.missing_signature()

    if not verify_signature(body, signature, secret):
        logger.warning("Webhook signature verification failed")
        return ValidationResult.invalid_signature()

    return ValidationResult.valid()


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_valid_audit_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    actor = entry.get("actor")
    return (
        _is_non_empty_str(entry.get("action"))
        and isinstance(actor, dict)
        and _is_non_empty_str(actor.get("login"))
        and bool(entry.get("created_at"))
        and _is_non_empty_str(entry.get("resource"))
        and _is_non_empty_str(entry.get("resource_type"))
    )


def validate_audit_log_payload(payload: Any) -> bool:
    """
    Structural check for ``audit_log_streaming`` payloads.

    Valid when the payload is an object whose ``action`` is
    ``"audit_log_streaming"`` and whose ``audit_log_events`` is a list in
    which every entry has non-empty string ``action``, ``actor.login``,
    ``resource`` and ``resource_type`` plus a non-empty ``created_at``.
    An empty list is valid. Never raises.
    """
    if not isinstance(payload, dict):
        return False

    if payload.get("action") != AUDIT_LOG_STREAMING:
        return False

    entries = payload.get("audit_log_events")
    if not isinstance(entries, list):
        return False

    return all(_is_valid_audit_entry(entry) for entry in entries)


__all__ = [
    "HEADER_SIGNATURE",
    "MISSING_SIGNATURE_MESSAGE",
    "INVALID_SIGNATURE_MESSAGE",
    "PAYLOAD_TOO_LARGE_MESSAGE",
    "ValidationStatus",
    "ValidationResult",
    "validate_body_size",
    "validate_signature_header",
    "validate_audit_log_payload",
]
