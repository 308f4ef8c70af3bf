# =============================================================================
# GITHUB WEBHOOK RECEIVER - EVENT DISPATCHER
# =============================================================================
"""
Event Dispatcher

Routes a verified delivery to the handler for its ``X-GitHub-Event``
token. Only the header selects the handler; the payload is never
inspected to guess its type.

Dispatch steps:
    1. Parse the body as JSON (failure -> 500, generic body)
    2. Classify the token (unknown / missing -> 400 with supported list)
    3. Narrow the payload to its variant (missing field -> 400)
    4. Record the event with the sink
    5. Return the variant's acknowledgement (200)

The handler table is built once at construction and never mutated.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Optional,
    TYPE_CHECKING,
)

from webhook_receiver.github.errors import (
    INTERNAL_ERROR_MESSAGE,
    MalformedPayloadError,
    UnsupportedEventError,
    WebhookError,
    WebhookParseError,
)
from webhook_receiver.github.events import (
    AUDIT_LOG_STREAMING,
    EVENT_TYPES,
    SUPPORTED_EVENTS,
    AuditLogStreamingEvent,
)
from webhook_receiver.github.processors import EventSink, LoggingSink
from webhook_receiver.github.validation import validate_audit_log_payload

if TYPE_CHECKING:
    from monitoring.metrics import MetricsCollector


logger = logging.getLogger(__name__)


# =============================================================================
# TYPE DEFINITIONS
# =============================================================================


@dataclass
class WebhookResponse:
    """HTTP status and JSON body returned to the sender."""

    status: int
    body: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, error: WebhookError) -> "WebhookResponse":
        return cls(status=error.status_code, body=error.to_body())


# Handler signature: payload -> acknowledgement body
EventHandler = Callable[[str, Any], Awaitable[Dict[str, Any]]]


# =============================================================================
# DISPATCHER
# =============================================================================


class EventDispatcher:
    """
    Dispatches verified deliveries to per-event handlers.

    Attributes:
        sink: Destination for accepted events
        metrics: Optional MetricsCollector for latency / audit counters
        event_handlers: Map of event token to handler coroutine
    """

    def __init__(
        self,
        sink: Optional[EventSink] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.sink = sink or LoggingSink()
        self.metrics = metrics

        self.event_handlers: Dict[str, EventHandler] = {
            event_type: self._handle_event for event_type in SUPPORTED_EVENTS
        }
        self.event_handlers[AUDIT_LOG_STREAMING] = self._handle_audit_log_event

    @property
    def supported_events(self):
        return list(SUPPORTED_EVENTS)

    async def dispatch(self, event_type: Optional[str], body: bytes) -> WebhookResponse:
        """
        Dispatch one verified delivery.

        Never raises; every failure is mapped to a WebhookResponse.

        Args:
            event_type: Raw ``X-GitHub-Event`` header value (may be None)
            body: Raw request body, already signature-checked

        Returns:
            WebhookResponse with status 200, 400 or 500
        """
        started = time.perf_counter()
        try:
            payload = self._parse_body(body)

            handler = self.event_handlers.get(event_type or "")
            if handler is None:
                logger.warning(f"Unsupported GitHub event: {event_type or 'undefined'}")
                raise UnsupportedEventError(event_type, SUPPORTED_EVENTS)

            acknowledgement = await handler(event_type, payload)
            return WebhookResponse(status=200, body=acknowledgement)

        except WebhookParseError as e:
            logger.error(f"Error parsing webhook body: {e}")
            return WebhookResponse.from_error(e)

        except WebhookError as e:
            logger.warning(f"Rejected {event_type or 'undefined'} delivery: {e}")
            return WebhookResponse.from_error(e)

        except Exception as e:
            logger.error(f"Error processing {event_type} webhook: {e}", exc_info=True)
            return WebhookResponse(status=500, body={"message": INTERNAL_ERROR_MESSAGE})

        finally:
            if self.metrics and event_type in EVENT_TYPES:
                self.metrics.observe_processing(event_type, time.perf_counter() - started)

    # =========================================================================
    # PARSING
    # =========================================================================

    @staticmethod
    def _parse_body(body: bytes) -> Any:
        """Decode the body as JSON. An empty body reads as ``{}``."""
        if not body:
            return {}
        try:
            return json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise WebhookParseError(details=f"Invalid JSON payload: {e}")

    # =========================================================================
    # EVENT HANDLERS
    # =========================================================================

    async def _handle_event(self, event_type: str, payload: Any) -> Dict[str, Any]:
        """Narrow, record and acknowledge a regular event."""
        event = EVENT_TYPES[event_type].from_payload(payload)
        self.sink.record(event)
        return event.acknowledgement()

    async def _handle_audit_log_event(self, event_type: str, payload: Any) -> Dict[str, Any]:
        """
        Validate an audit log batch, then record each entry.

        Nothing is recorded when any entry fails the structural check.
        """
        if not validate_audit_log_payload(payload):
            raise MalformedPayloadError("Invalid audit log payload")

        event = AuditLogStreamingEvent.from_payload(payload)
        for entry in event.entries:
            self.sink.record(entry)

        if self.metrics:
            self.metrics.record_audit_entries(len(event.entries))

        logger.info(f"Processed {len(event.entries)} audit log entries")
        return event.acknowledgement()


__all__ = [
    "EventDispatcher",
    "EventHandler",
    "WebhookResponse",
]
