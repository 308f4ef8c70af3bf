# =============================================================================
# GITHUB WEBHOOK RECEIVER - MAIN ENTRY POINT
# =============================================================================
"""
Receiver Main Module

This is the entry point for the webhook receiver service. It loads the
configuration, sets up logging and metrics, and runs the HTTP server
until it receives SIGINT / SIGTERM.

Usage:
    python -m webhook_receiver.main
    python -m webhook_receiver.main --config config/receiver.yaml
    python -m webhook_receiver.main --debug
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Local imports
from monitoring.logger import setup_logging
from monitoring.metrics import MetricsCollector, create_metrics_collector
from webhook_receiver.github.webhook_handler import (
    DEFAULT_MAX_BODY_BYTES,
    WebhookServer,
    create_webhook_handler,
    create_webhook_server,
)

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

# Environment variable -> (section, key)
ENV_MAPPINGS = {
    # Webhook
    "GITHUB_WEBHOOK_SECRET": ("webhook", "secret"),
    "WEBHOOK_MAX_BODY_BYTES": ("webhook", "max_body_bytes"),
    # Server
    "WEBHOOK_HOST": ("server", "host"),
    "WEBHOOK_PORT": ("server", "port"),
    "WEBHOOK_PATH": ("server", "path"),
    # Logging
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "LOG_FILE": ("logging", "file"),
}

# Keys that must hold an integer after YAML and environment merging
NUMERIC_KEYS = {("server", "port"), ("webhook", "max_body_bytes")}

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "server": {
        "host": "0.0.0.0",
        "port": 8080,
        "path": "/webhooks/github",
    },
    "webhook": {
        "secret": "",
        "max_body_bytes": DEFAULT_MAX_BODY_BYTES,
    },
    "logging": {
        "level": "INFO",
        "format": "json",
        "file": None,
        "mask_sensitive": True,
    },
    "metrics": {
        "enabled": True,
        "namespace": "github_webhook",
    },
}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file and environment variables.

    Environment variables override YAML values; defaults fill the rest.

    Args:
        config_path: Path to receiver.yaml

    Returns:
        Merged configuration dictionary
    """
    config: Dict[str, Any] = {}

    # Load YAML config if exists
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded config from {config_path}")
    else:
        logger.warning(f"Config file not found: {config_path}, using defaults")

    # Environment variable overrides
    for env_var, (section, key) in ENV_MAPPINGS.items():
        value: Any = os.environ.get(env_var)
        if value is not None:
            if not isinstance(config.get(section), dict):
                config[section] = {}
            config[section][key] = value

    # Apply defaults
    for section, section_defaults in DEFAULTS.items():
        if not isinstance(config.get(section), dict):
            config[section] = {}
        for key, default_value in section_defaults.items():
            if key not in config[section]:
                config[section][key] = default_value

    # Non-numeric values fall back to the default
    for section, key in NUMERIC_KEYS:
        value = config[section][key]
        try:
            config[section][key] = int(value)
        except (TypeError, ValueError):
            default_value = DEFAULTS[section][key]
            logger.warning(
                f"Invalid {section}.{key} value {value!r}, using default {default_value}"
            )
            config[section][key] = default_value

    # YAML null secret means "not configured"
    if config["webhook"]["secret"] is None:
        config["webhook"]["secret"] = ""
    config["webhook"]["secret"] = str(config["webhook"]["secret"])

    return config


def configure_logging(config: Dict[str, Any], debug: bool = False) -> None:
    """Configure structured logging from the ``logging`` section."""
    log_config = config.get("logging", {})
    setup_logging(
        level="DEBUG" if debug else log_config.get("level", "INFO"),
        fmt=log_config.get("format", "json"),
        log_file=log_config.get("file"),
        mask_sensitive=log_config.get("mask_sensitive", True),
    )


def build_server(config: Dict[str, Any]) -> WebhookServer:
    """
    Wire handler, metrics and server from configuration.

    Args:
        config: Configuration from ``load_config``

    Returns:
        WebhookServer ready to start
    """
    metrics: Optional[MetricsCollector] = None
    if config["metrics"].get("enabled", True):
        metrics = create_metrics_collector(config["metrics"])

    handler = create_webhook_handler(
        secret=config["webhook"]["secret"],
        metrics=metrics,
        config=config["webhook"],
    )
    return create_webhook_server(handler, config["server"])


# =============================================================================
# CLI ARGUMENT PARSING
# =============================================================================


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="GitHub Webhook Receiver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        default="config/receiver.yaml",
        help="Path to configuration file (default: config/receiver.yaml)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


# =============================================================================
# SIGNAL HANDLING
# =============================================================================


def setup_signal_handlers(shutdown: asyncio.Event, loop: asyncio.AbstractEventLoop) -> None:
    """Setup signal handlers for graceful shutdown."""

    def signal_handler(sig: signal.Signals) -> None:
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        shutdown.set()

    # Only set signal handlers if running on Unix-like systems
    if sys.platform != "win32":
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, signal_handler, sig)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


async def async_main(config: Dict[str, Any]) -> None:
    """Async entry point for the receiver."""
    server = build_server(config)

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    setup_signal_handlers(shutdown, loop)

    try:
        await server.start()
        await shutdown.wait()
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        await server.stop()


def main() -> None:
    """Main entry point."""
    args = parse_args()

    config = load_config(args.config)
    configure_logging(config, debug=args.debug)

    logger.info("=" * 60)
    logger.info("GitHub Webhook Receiver")
    logger.info("=" * 60)

    # Run the async main
    try:
        asyncio.run(async_main(config))
    except KeyboardInterrupt:
        logger.info("Receiver stopped by user")
    except Exception as e:
        logger.critical(f"Receiver failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
