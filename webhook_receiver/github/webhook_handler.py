# =============================================================================
# GITHUB WEBHOOK RECEIVER - WEBHOOK HANDLER
# =============================================================================
"""
GitHub Webhook Handler

Receives deliveries from GitHub, verifies them and hands them to the
event dispatcher.

Request Pipeline:
    1. Secret configured?           -> 500 "Webhook secret not configured"
    2. Body within max_body_bytes?  -> 400 "Payload too large"
    3. X-Hub-Signature-256 present? -> 401 "Missing signature header"
    4. Signature matches?           -> 401 "Invalid signature"
    5. Dispatch by X-GitHub-Event   -> 200 / 400 / 500

Security:
    - Validates webhook signature using HMAC-SHA256 over the raw body
    - Constant-time digest comparison
    - Body size limit enforced before HMAC / JSON work
    - Signature header values never reach the logs
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Dict,
    Mapping,
    Optional,
)

from aiohttp import web
from multidict import CIMultiDict

from monitoring.logger import LogContext
from monitoring.metrics import HealthCheck, MetricsCollector
from webhook_receiver.github.dispatcher import EventDispatcher, WebhookResponse
from webhook_receiver.github.errors import (
    INTERNAL_ERROR_MESSAGE,
    MalformedPayloadError,
    UnsupportedEventError,
    WebhookConfigError,
    WebhookError,
    WebhookParseError,
    WebhookValidationError,
)
from webhook_receiver.github.events import SUPPORTED_EVENTS
from webhook_receiver.github.processors import EventSink
from webhook_receiver.github.validation import (
    HEADER_SIGNATURE,
    PAYLOAD_TOO_LARGE_MESSAGE,
    validate_body_size,
    validate_signature_header,
)


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# GitHub event header names
HEADER_EVENT = "X-GitHub-Event"
HEADER_DELIVERY = "X-GitHub-Delivery"
HEADER_USER_AGENT = "User-Agent"

SERVICE_NAME = "github-webhook-receiver"

DEFAULT_MAX_BODY_BYTES = 25 * 1024 * 1024  # 25 MiB


# =============================================================================
# WEBHOOK HANDLER CLASS
# =============================================================================


class WebhookHandler:
    """
    Handles incoming GitHub webhooks.

    This class:
    1. Checks that a secret is configured
    2. Enforces the body size limit
    3. Validates webhook signatures using HMAC-SHA256
    4. Dispatches the event by its header token

    Attributes:
        secret: Webhook secret for validation (read once at startup)
        dispatcher: EventDispatcher that narrows and records events
        metrics: Optional MetricsCollector
        max_body_bytes: Largest accepted body
    """

    def __init__(
        self,
        secret: Optional[str],
        dispatcher: Optional[EventDispatcher] = None,
        sink: Optional[EventSink] = None,
        metrics: Optional[MetricsCollector] = None,
        max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
    ):
        """
        Initialize webhook handler.

        Args:
            secret: Webhook secret for signature validation. An empty or
                missing secret makes every request fail with 500.
            dispatcher: EventDispatcher (built from sink/metrics if omitted)
            sink: EventSink for a default dispatcher
            metrics: Optional MetricsCollector
            max_body_bytes: Body size limit in bytes
        """
        self.secret = secret or ""
        self.metrics = metrics
        self.max_body_bytes = max_body_bytes
        self.dispatcher = dispatcher or EventDispatcher(sink=sink, metrics=metrics)

        if not self.secret:
            logger.error("GITHUB_WEBHOOK_SECRET is not configured; all deliveries will be rejected")

        logger.info("WebhookHandler initialized")

    @property
    def secret_configured(self) -> bool:
        return bool(self.secret)

    async def handle_webhook(
        self,
        headers: Mapping[str, str],
        body: bytes,
    ) -> WebhookResponse:
        """
        Process an incoming webhook.

        Never raises; every outcome is a WebhookResponse.

        Args:
            headers: HTTP headers including X-Hub-Signature-256. Plain
                dicts are wrapped so lookups are case-insensitive.
            body: Raw request body

        Returns:
            WebhookResponse with the status code and JSON body
        """
        headers = CIMultiDict(headers)
        event_type = headers.get(HEADER_EVENT)
        delivery_id = headers.get(HEADER_DELIVERY, "unknown")

        with LogContext(
            delivery_id=delivery_id,
            user_agent=headers.get(HEADER_USER_AGENT),
            event_type=event_type or "undefined",
        ):
            logger.info(f"Webhook received: {event_type or 'undefined'} (delivery: {delivery_id})")

            try:
                self._check_request(headers, body)
                response = await self.dispatcher.dispatch(event_type, body)

            except WebhookError as e:
                response = WebhookResponse.from_error(e)

            except Exception as e:
                logger.error(f"Unexpected error handling webhook: {e}", exc_info=True)
                response = WebhookResponse(status=500, body={"message": INTERNAL_ERROR_MESSAGE})

            if self.metrics:
                self.metrics.record_request(event_type, response.status)

            logger.info(f"Webhook {event_type or 'undefined'} answered with {response.status}")
            return response

    def _check_request(self, headers: Mapping[str, str], body: bytes) -> None:
        """
        Run the pre-dispatch checks in order.

        Raises:
            WebhookConfigError: If no secret is configured
            MalformedPayloadError: If the body is too large
            WebhookValidationError: If the signature is missing or invalid
        """
        if not self.secret:
            raise WebhookConfigError()

        size_result = validate_body_size(body, self.max_body_bytes)
        if not size_result.is_valid:
            raise MalformedPayloadError(size_result.message)

        result = validate_signature_header(headers, body, self.secret)
        if not result.is_valid:
            if self.metrics:
                self.metrics.record_signature_failure(result.details)
            raise WebhookValidationError(result.message)

    def oversized_response(self, event_type: Optional[str] = None) -> WebhookResponse:
        """
        Response for a body the HTTP layer refused to read.

        The secret check still comes first.
        """
        if not self.secret:
            response = WebhookResponse.from_error(WebhookConfigError())
        else:
            response = WebhookResponse.from_error(MalformedPayloadError(PAYLOAD_TOO_LARGE_MESSAGE))
        if self.metrics:
            self.metrics.record_request(event_type, response.status)
        return response


# =============================================================================
# WEBHOOK SERVER
# =============================================================================


class WebhookServer:
    """
    HTTP server for receiving webhooks.

    Uses aiohttp for async HTTP handling.

    Attributes:
        handler: WebhookHandler instance
        host: Host to bind to
        port: Port to listen on
        path: URL path for webhook endpoint
    """

    def __init__(
        self,
        handler: WebhookHandler,
        host: str = "0.0.0.0",
        port: int = 8080,
        path: str = "/webhooks/github",
    ):
        """
        Initialize webhook server.

        Args:
            handler: WebhookHandler instance
            host: Host to bind to (default: 0.0.0.0)
            port: Port to listen on (default: 8080)
            path: URL path for webhooks (default: /webhooks/github)
        """
        self.handler = handler
        self.host = host
        self.port = port
        self.path = path

        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._running = False

        self.health = HealthCheck()
        self.health.register("webhook_secret", self._check_secret)

        logger.info(f"WebhookServer initialized (will listen on {host}:{port}{path})")

    @property
    def client_max_size(self) -> int:
        """aiohttp body limit matching the handler's; 0 turns both checks off."""
        limit = self.handler.max_body_bytes
        # aiohttp rejects bodies of client_max_size bytes or more
        return limit + 1 if limit else 0

    def create_app(self) -> web.Application:
        """
        Build the aiohttp application.

        Exposed separately from ``start`` so tests can mount it on a test
        server.
        """
        app = web.Application(client_max_size=self.client_max_size)

        app.router.add_post(self.path, self._handle_webhook)
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/metrics", self._handle_metrics)

        return app

    async def start(self) -> None:
        """
        Start the webhook server.

        Creates aiohttp application and starts listening for connections.
        """
        if self._running:
            logger.warning("Webhook server already running")
            return

        self._app = self.create_app()

        # Create runner and site
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        self._running = True
        logger.info(f"Webhook server started on http://{self.host}:{self.port}{self.path}")

    async def stop(self) -> None:
        """Stop the webhook server."""
        if not self._running:
            return

        logger.info("Stopping webhook server...")

        if self._site:
            await self._site.stop()

        if self._runner:
            await self._runner.cleanup()

        self._running = False
        self._app = None
        self._runner = None
        self._site = None

        logger.info("Webhook server stopped")

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    # =========================================================================
    # REQUEST HANDLERS
    # =========================================================================

    async def _handle_webhook(self, request: web.Request) -> web.Response:
        """
        Handle incoming webhook HTTP request.

        Args:
            request: aiohttp request object

        Returns:
            JSON response with the handler's status and body
        """
        try:
            # Read raw body; signature is computed over these exact bytes
            body = await request.read()
        except web.HTTPRequestEntityTooLarge:
            logger.warning(f"Webhook body exceeds {self.handler.max_body_bytes} bytes")
            result = self.handler.oversized_response(request.headers.get(HEADER_EVENT))
            return web.json_response(result.body, status=result.status)

        result = await self.handler.handle_webhook(request.headers, body)
        return web.json_response(result.body, status=result.status)

    async def _handle_health(self, request: web.Request) -> web.Response:
        """
        Handle health check request.

        Args:
            request: aiohttp request object (unused, required by aiohttp)

        Returns:
            Health status response
        """
        del request  # Unused but required by aiohttp
        result = await self.health.check_all()
        return web.json_response(
            {
                "status": "healthy" if result["healthy"] else "degraded",
                "service": SERVICE_NAME,
                "secret_configured": self.handler.secret_configured,
                "supported_events": list(SUPPORTED_EVENTS),
                "checks": result["checks"],
                "timestamp": result["timestamp"],
            },
        )

    async def _check_secret(self) -> Dict[str, Any]:
        return {"healthy": self.handler.secret_configured}

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        """
        Handle Prometheus scrape request.

        Args:
            request: aiohttp request object (unused, required by aiohttp)

        Returns:
            Prometheus text exposition, or 404 without a collector
        """
        del request  # Unused but required by aiohttp
        metrics = self.handler.metrics
        if metrics is None:
            return web.json_response({"message": "Metrics disabled"}, status=404)
        return web.Response(
            body=metrics.render(),
            headers={"Content-Type": metrics.content_type},
        )


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================


def create_webhook_handler(
    secret: Optional[str],
    sink: Optional[EventSink] = None,
    metrics: Optional[MetricsCollector] = None,
    config: Optional[Dict[str, Any]] = None,
) -> WebhookHandler:
    """
    Create a configured webhook handler.

    Args:
        secret: Webhook secret for signature validation
        sink: Optional EventSink (defaults to LoggingSink)
        metrics: Optional MetricsCollector
        config: Optional ``webhook`` configuration section

    Returns:
        Configured WebhookHandler instance
    """
    config = config or {}

    return WebhookHandler(
        secret=secret,
        sink=sink,
        metrics=metrics,
        max_body_bytes=int(config.get("max_body_bytes", DEFAULT_MAX_BODY_BYTES)),
    )


def create_webhook_server(
    handler: WebhookHandler,
    config: Optional[Dict[str, Any]] = None,
) -> WebhookServer:
    """
    Create a configured webhook server.

    Args:
        handler: WebhookHandler instance
        config: Optional ``server`` configuration with host, port, path

    Returns:
        Configured WebhookServer instance
    """
    config = config or {}

    return WebhookServer(
        handler=handler,
        host=config.get("host", "0.0.0.0"),
        port=int(config.get("port", 8080)),
        path=config.get("path", "/webhooks/github"),
    )


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Main classes
    "WebhookHandler",
    "WebhookServer",
    "WebhookResponse",
    # Factory functions
    "create_webhook_handler",
    "create_webhook_server",
    # Exceptions
    "WebhookError",
    "WebhookConfigError",
    "WebhookValidationError",
    "WebhookParseError",
    "MalformedPayloadError",
    "UnsupportedEventError",
    # Constants
    "HEADER_EVENT",
    "HEADER_SIGNATURE",
    "HEADER_DELIVERY",
    "DEFAULT_MAX_BODY_BYTES",
    "SERVICE_NAME",
]
