# =============================================================================
# GITHUB WEBHOOK RECEIVER - METRICS COLLECTION
# =============================================================================
"""
Metrics Collection Module

Collects and exports Prometheus metrics for the webhook receiver.

Metric Categories:
    - Request metrics: Deliveries by event type and response status
    - Security metrics: Signature verification failures by reason
    - Processing metrics: Dispatch latency per event type
    - Audit metrics: Audit log entries processed
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================


class MetricsCollector:
    """
    Central metrics collector for the webhook receiver.

    Each collector owns its own ``CollectorRegistry`` so several receivers
    (or test cases) can live in one process without name clashes.

    Usage::

        metrics = MetricsCollector()
        metrics.record_request("push", 200)
        metrics.record_signature_failure("invalid")
        metrics.observe_processing("push", 0.004)
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize all metric collectors.

        Args:
            config: Optional metrics configuration dict. ``namespace``
                prefixes every metric name (default: ``github_webhook``).
        """
        self.config = config or {}
        self._start_time = time.monotonic()
        self.registry = CollectorRegistry()

        namespace = self.config.get("namespace", "github_webhook")

        self.requests_total = Counter(
            f"{namespace}_requests_total",
            "Webhook deliveries by event type and response status",
            ["event_type", "status_code"],
            registry=self.registry,
        )
        self.signature_failures = Counter(
            f"{namespace}_signature_failures_total",
            "Rejected deliveries by signature failure reason",
            ["reason"],
            registry=self.registry,
        )
        self.processing_duration = Histogram(
            f"{namespace}_processing_seconds",
            "Time spent dispatching a verified delivery",
            ["event_type"],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5],
            registry=self.registry,
        )
        self.audit_entries = Counter(
            f"{namespace}_audit_entries_total",
            "Audit log entries processed from audit_log_streaming deliveries",
            registry=self.registry,
        )

    # =====================================================================
    # RECORDING
    # =====================================================================

    def record_request(self, event_type: Optional[str], status_code: int) -> None:
        """Record a finished delivery."""
        self.requests_total.labels(
            event_type=event_type or "undefined",
            status_code=str(status_code),
        ).inc()

    def record_signature_failure(self, reason: str) -> None:
        """Record a signature rejection (``missing`` or ``invalid``)."""
        self.signature_failures.labels(reason=reason).inc()

    def observe_processing(self, event_type: Optional[str], seconds: float) -> None:
        self.processing_duration.labels(event_type=event_type or "undefined").observe(seconds)

    def record_audit_entries(self, count: int) -> None:
        if count > 0:
            self.audit_entries.inc(count)

    def get_uptime(self) -> float:
        """Return seconds since this collector was created."""
        return time.monotonic() - self._start_time

    # =====================================================================
    # EXPORT / SNAPSHOT
    # =====================================================================

    def render(self) -> bytes:
        """Render the registry in Prometheus text exposition format."""
        return generate_latest(self.registry)

    def snapshot(self) -> Dict[str, Any]:
        """
        Return a plain dict snapshot of the request counters.

        Useful for logging and health checks.
        """
        requests: Dict[str, float] = {}
        for metric in self.requests_total.collect():
            for sample in metric.samples:
                if not sample.name.endswith("_total"):
                    continue
                key = f"{sample.labels['event_type']}:{sample.labels['status_code']}"
                requests[key] = sample.value

        return {
            "uptime_seconds": round(self.get_uptime(), 1),
            "requests": requests,
        }


# =============================================================================
# HEALTH CHECK
# =============================================================================


class HealthCheck:
    """
    Health checker that aggregates component statuses.

    Usage::

        health = HealthCheck()
        health.register("webhook_secret", secret_check_fn)
        result = await health.check_all()
    """

    def __init__(self):
        self._checks: Dict[str, Any] = {}
        self._critical: Dict[str, bool] = {}

    def register(self, name: str, check_fn, critical: bool = True) -> None:
        """
        Register a health check.

        Args:
            name: Component name.
            check_fn: Async callable returning a dict with at least
                ``{"healthy": bool}``.
            critical: Whether failure of this check means the service
                is unhealthy overall.
        """
        self._checks[name] = check_fn
        self._critical[name] = critical

    async def check_all(self) -> Dict[str, Any]:
        """
        Run all registered health checks.

        Returns:
            Aggregated health status dict.
        """
        results: Dict[str, Any] = {}
        overall_healthy = True

        for name, check_fn in self._checks.items():
            try:
                result = await check_fn()
                results[name] = result
                if not result.get("healthy", False) and self._critical.get(name, True):
                    overall_healthy = False
            except Exception as e:
                logger.warning(f"Health check '{name}' raised: {e}")
                results[name] = {"healthy": False, "error": str(e)}
                if self._critical.get(name, True):
                    overall_healthy = False

        return {
            "healthy": overall_healthy,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": results,
        }


# =============================================================================
# FACTORY
# =============================================================================


def create_metrics_collector(
    config: Optional[Dict[str, Any]] = None,
) -> MetricsCollector:
    """
    Create a MetricsCollector from configuration.

    Args:
        config: ``metrics`` section of receiver.yaml.

    Returns:
        Configured MetricsCollector.
    """
    return MetricsCollector(config or {})


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "MetricsCollector",
    "create_metrics_collector",
    "HealthCheck",
]
