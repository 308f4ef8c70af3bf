# =============================================================================
# GITHUB WEBHOOK RECEIVER - TEST PACKAGE
# =============================================================================
"""
Test Package

This package contains tests for the GitHub webhook receiver.

Test Structure:
    tests/
    ├── __init__.py              # This file
    ├── conftest.py              # Fixtures, sample payloads, signing helpers
    ├── test_signature.py        # HMAC-SHA256 signing / verification
    ├── test_validation.py       # Size, signature header, audit validator
    ├── test_events.py           # Event variants and acknowledgements
    ├── test_processors.py       # Sinks and action descriptions
    ├── test_dispatcher.py       # Header-based dispatch
    ├── test_webhook_handler.py  # Request pipeline
    ├── test_server.py           # aiohttp endpoints
    ├── test_config.py           # YAML / environment configuration
    └── test_monitoring.py       # Logging, metrics, health

Running Tests:
    # Run all tests
    pytest

    # Run specific test file
    pytest tests/test_dispatcher.py -v

    # Run with coverage
    pytest tests/ --cov=webhook_receiver --cov=monitoring
"""
