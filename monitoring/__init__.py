# =============================================================================
# GITHUB WEBHOOK RECEIVER - MONITORING PACKAGE
# =============================================================================
"""
Monitoring Package

This package provides logging, metrics and health infrastructure
for the GitHub webhook receiver.

Components:
    - Logger: Structured logging with structlog, request context, masking
    - Metrics: Prometheus counters/histograms for deliveries
    - Health: Aggregated component health checks

Usage:
    from monitoring import setup_logging, MetricsCollector, LogContext

    # Setup logging
    setup_logging(level="INFO", fmt="json")

    # Metrics
    metrics = MetricsCollector()
    metrics.record_request("push", 200)

    # Request context
    with LogContext(delivery_id="72d3162e", event_type="push"):
        ...
"""

# Logger
from monitoring.logger import (
    setup_logging,
    LogContext,
    mask_sensitive_data,
    mask_dict,
)

# Metrics
from monitoring.metrics import (
    MetricsCollector,
    create_metrics_collector,
    HealthCheck,
)


__all__ = [
    # Logger
    "setup_logging",
    "LogContext",
    "mask_sensitive_data",
    "mask_dict",
    # Metrics
    "MetricsCollector",
    "create_metrics_collector",
    # Health
    "HealthCheck",
]
