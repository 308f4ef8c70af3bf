# =============================================================================
# GITHUB WEBHOOK RECEIVER - PACKAGE
# =============================================================================
"""
GitHub Webhook Receiver

Receives GitHub webhook deliveries over HTTP, verifies their HMAC-SHA256
signature, dispatches them by the ``X-GitHub-Event`` header to one of the
supported event variants and records accepted events with a pluggable
sink.

Package Structure:
    - main.py: Entry point, configuration loading and server lifecycle
    - github/: Webhook handling
        - signature.py: HMAC-SHA256 signing and verification
        - validation.py: Body size, signature and audit log checks
        - events.py: Typed event variants
        - processors.py: Event sinks
        - dispatcher.py: Header-based dispatch
        - webhook_handler.py: Request pipeline and aiohttp server

Usage:
    ```
    github-webhook-receiver --config config/receiver.yaml
    python -m webhook_receiver.main --debug
    ```

Environment Variables Required:
    - GITHUB_WEBHOOK_SECRET: Shared secret configured on the GitHub webhook

For detailed configuration, see config/receiver.yaml
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
]
