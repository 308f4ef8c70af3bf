"""End-to-end tests for the aiohttp webhook server."""

from webhook_receiver.github.events import SUPPORTED_EVENTS
from webhook_receiver.github.webhook_handler import WebhookHandler, WebhookServer

from tests.conftest import MINIMAL_PAYLOADS, SECRET, encode, signed_headers


class TestWebhookEndpoint:
    async def test_signed_ping(self, aiohttp_client, server):
        client = await aiohttp_client(server.create_app())
        body = encode(MINIMAL_PAYLOADS["ping"])

        resp = await client.post("/webhooks/github", data=body, headers=signed_headers(body, "ping"))

        assert resp.status == 200
        assert await resp.json() == {
            "message": "Ping received successfully",
            "zen": "Keep it logically awesome.",
            "hook_id": 123,
        }

    async def test_unsigned_request_rejected(self, aiohttp_client, server, sink):
        client = await aiohttp_client(server.create_app())

        resp = await client.post("/webhooks/github", data=b"{}", headers={"X-GitHub-Event": "ping"})

        assert resp.status == 401
        assert await resp.json() == {"message": "Missing signature header"}
        assert sink.events == []

    async def test_oversized_body(self, aiohttp_client, sink):
        handler = WebhookHandler(secret=SECRET, sink=sink, max_body_bytes=64)
        client = await aiohttp_client(WebhookServer(handler).create_app())
        body = encode({"zen": "x" * 512, "hook_id": 1})

        resp = await client.post("/webhooks/github", data=body, headers=signed_headers(body, "ping"))

        assert resp.status == 400
        assert await resp.json() == {"message": "Payload too large"}
        assert sink.events == []

    async def test_zero_limit_disables_size_check(self, aiohttp_client, sink):
        handler = WebhookHandler(secret=SECRET, sink=sink, max_body_bytes=0)
        client = await aiohttp_client(WebhookServer(handler).create_app())
        # Larger than aiohttp's own 1 MiB default
        body = encode({"zen": "x" * (2 * 1024 * 1024), "hook_id": 1})

        resp = await client.post("/webhooks/github", data=body, headers=signed_headers(body, "ping"))

        assert resp.status == 200
        assert len(sink.events) == 1

    def test_client_max_size_follows_handler_limit(self):
        assert WebhookServer(WebhookHandler(secret=SECRET, max_body_bytes=64)).client_max_size == 65
        assert WebhookServer(WebhookHandler(secret=SECRET, max_body_bytes=0)).client_max_size == 0

    async def test_custom_path(self, aiohttp_client, handler):
        client = await aiohttp_client(WebhookServer(handler, path="/hooks").create_app())
        body = encode(MINIMAL_PAYLOADS["watch"])

        resp = await client.post("/hooks", data=body, headers=signed_headers(body, "watch"))

        assert resp.status == 200
        assert (await resp.json())["message"] == "Watch started event processed"


class TestHealthEndpoint:
    async def test_health(self, aiohttp_client, server):
        client = await aiohttp_client(server.create_app())

        resp = await client.get("/health")

        assert resp.status == 200
        data = await resp.json()
        assert data["status"] == "healthy"
        assert data["service"] == "github-webhook-receiver"
        assert data["secret_configured"] is True
        assert data["supported_events"] == list(SUPPORTED_EVENTS)
        assert data["checks"] == {"webhook_secret": {"healthy": True}}

    async def test_health_without_secret(self, aiohttp_client):
        client = await aiohttp_client(WebhookServer(WebhookHandler(secret="")).create_app())

        data = await (await client.get("/health")).json()

        assert data["status"] == "degraded"
        assert data["secret_configured"] is False


class TestMetricsEndpoint:
    async def test_metrics_exposition(self, aiohttp_client, server):
        client = await aiohttp_client(server.create_app())
        body = encode(MINIMAL_PAYLOADS["ping"])
        await client.post("/webhooks/github", data=body, headers=signed_headers(body, "ping"))

        resp = await client.get("/metrics")

        assert resp.status == 200
        text = await resp.text()
        assert 'github_webhook_requests_total{event_type="ping",status_code="200"} 1.0' in text

    async def test_metrics_disabled(self, aiohttp_client):
        client = await aiohttp_client(WebhookServer(WebhookHandler(secret=SECRET)).create_app())

        resp = await client.get("/metrics")

        assert resp.status == 404
