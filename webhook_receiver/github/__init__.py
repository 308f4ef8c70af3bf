# =============================================================================
# GITHUB WEBHOOK RECEIVER - GITHUB WEBHOOK PACKAGE
# =============================================================================
"""
GitHub Webhook Package

Components:
    - WebhookHandler: Verify and dispatch a single delivery
    - WebhookServer: aiohttp server exposing the webhook, health and
      metrics endpoints
    - EventDispatcher: Header-based routing to event variants
    - EventSink / LoggingSink: Destinations for accepted events

Security:
    Deliveries are accepted only with a valid ``X-Hub-Signature-256``
    computed with the configured secret.

Usage:
    from webhook_receiver.github import create_webhook_handler, create_webhook_server

    handler = create_webhook_handler(secret="s3cr3t")
    server = create_webhook_server(handler, {"port": 8080})
    await server.start()
"""

from webhook_receiver.github.signature import (
    generate_signature,
    verify_signature,
)

from webhook_receiver.github.errors import (
    WebhookError,
    WebhookConfigError,
    WebhookValidationError,
    WebhookParseError,
    MalformedPayloadError,
    UnsupportedEventError,
)

from webhook_receiver.github.events import (
    SUPPORTED_EVENTS,
    EVENT_TYPES,
    WebhookEvent,
    AuditLogEntry,
    parse_event,
)

from webhook_receiver.github.validation import (
    ValidationResult,
    ValidationStatus,
    validate_audit_log_payload,
)

from webhook_receiver.github.processors import (
    EventSink,
    LoggingSink,
    RecordingSink,
)

from webhook_receiver.github.dispatcher import (
    EventDispatcher,
    WebhookResponse,
)

from webhook_receiver.github.webhook_handler import (
    WebhookHandler,
    WebhookServer,
    create_webhook_handler,
    create_webhook_server,
)

__all__ = [
    # Signature
    "generate_signature",
    "verify_signature",
    # Exceptions
    "WebhookError",
    "WebhookConfigError",
    "WebhookValidationError",
    "WebhookParseError",
    "MalformedPayloadError",
    "UnsupportedEventError",
    # Events
    "SUPPORTED_EVENTS",
    "EVENT_TYPES",
    "WebhookEvent",
    "AuditLogEntry",
    "parse_event",
    # Validation
    "ValidationResult",
    "ValidationStatus",
    "validate_audit_log_payload",
    # Sinks
    "EventSink",
    "LoggingSink",
    "RecordingSink",
    # Dispatch
    "EventDispatcher",
    "WebhookResponse",
    # Handler / Server
    "WebhookHandler",
    "WebhookServer",
    "create_webhook_handler",
    "create_webhook_server",
]
