# =============================================================================
# GITHUB WEBHOOK RECEIVER - SIGNATURE VERIFICATION
# =============================================================================
"""
Webhook Signature Verification

GitHub signs every delivery with HMAC-SHA256 over the raw request body
using the webhook secret, and sends the result in ``X-Hub-Signature-256``
as ``sha256=<lowercase hex>``.

Verification is fail-closed: anything other than an exact match returns
False, including internal errors. The body must be the bytes exactly as
received; parsing and re-serializing JSON before verification changes
the signed input.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

SIGNATURE_PREFIX = "sha256="

# Length of a hex-encoded SHA-256 digest
_HEX_DIGEST_LENGTH = hashlib.sha256().digest_size * 2


# =============================================================================
# SIGNING
# =============================================================================


def _to_bytes(value: Union[str, bytes]) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_digest(body: Union[str, bytes], secret: str) -> str:
    """Return the lowercase hex HMAC-SHA256 of ``body`` keyed by ``secret``."""
    return hmac.new(
        secret.encode("utf-8"),
        _to_bytes(body),
        hashlib.sha256,
    ).hexdigest()


def generate_signature(body: Union[str, bytes], secret: str) -> str:
    """
    Build the ``X-Hub-Signature-256`` header value for a body.

    Args:
        body: Raw request body (str bodies are UTF-8 encoded)
        secret: Shared webhook secret

    Returns:
        ``"sha256=" + hex digest``
    """
    return SIGNATURE_PREFIX + compute_digest(body, secret)


# =============================================================================
# VERIFICATION
# =============================================================================


def _extract_digest(signature_header: str) -> Optional[str]:
    """
    Strip the algorithm prefix from a signature header.

    A bare hex digest is accepted as-is; any other ``algo=`` prefix
    (e.g. ``sha1=``) is rejected.
    """
    if signature_header.startswith(SIGNATURE_PREFIX):
        return signature_header[len(SIGNATURE_PREFIX):]
    if "=" in signature_header:
        algorithm = signature_header.split("=", 1)[0]
        logger.warning(f"Unsupported signature algorithm: {algorithm!r}")
        return None
    return signature_header


def verify_signature(
    body: bytes,
    signature_header: Optional[str],
    secret: str,
) -> bool:
    """
    Verify a GitHub webhook signature using HMAC-SHA256.

    Never raises: missing header, malformed hex, empty secret, length
    mismatch and unexpected errors all return False.

    Args:
        body: Raw request body bytes, exactly as received
        signature_header: X-Hub-Signature-256 header value
        secret: Shared webhook secret

    Returns:
        True if signature is valid, False otherwise
    """
    try:
        if not signature_header:
            logger.warning("Missing webhook signature")
            return False

        if not secret:
            logger.error("Signature verification attempted without a secret")
            return False

        claimed = _extract_digest(signature_header.strip())
        if claimed is None:
            return False

        if len(claimed) != _HEX_DIGEST_LENGTH:
            logger.warning(
                f"Signature length mismatch (got {len(claimed)}, "
                f"expected {_HEX_DIGEST_LENGTH})"
            )
            return False

        try:
            claimed_bytes = claimed.encode("ascii")
        except UnicodeEncodeError:
            logger.warning("Signature contains non-ASCII characters")
            return False

        computed = compute_digest(body, secret).encode("ascii")

        # Constant-time comparison to prevent timing attacks
        return hmac.compare_digest(computed, claimed_bytes)

    except Exception as e:
        logger.error(f"Error verifying webhook signature: {e}", exc_info=True)
        return False


__all__ = [
    "SIGNATURE_PREFIX",
    "compute_digest",
    "generate_signature",
    "verify_signature",
]
