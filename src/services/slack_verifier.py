"""Slack request signature computation and verification."""

import hmac
import hashlib
import logging
from typing import Optional, Union

from src.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"


def load_signing_key(secret: Optional[str]) -> bytes:
    """
    Resolve the signing key from the configured secret.

    Called once at startup; the key is then passed by reference to every
    verification. Changing the secret requires a restart.
    """
    secret = (secret or "").strip()
    if not secret:
        raise ConfigurationError("SLACK_SIGNING_SECRET not set")
    return secret.encode("utf-8")


def _as_bytes(value: Union[str, bytes]) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def compute_signature(key: bytes, timestamp: Union[str, bytes], body: Union[str, bytes]) -> str:
    """
    HMAC-SHA256 over ``v0:<timestamp>:<body>`` as lowercase hex.

    A new HMAC object is created for every call so concurrent requests
    never share digest state.
    """
    base = b"%s:%s:%s" % (SIGNATURE_VERSION.encode("ascii"), _as_bytes(timestamp), _as_bytes(body))
    return hmac.new(key, base, hashlib.sha256).hexdigest()


def verify_slack_signature(
    key: bytes,
    timestamp: Union[str, bytes],
    body: Union[str, bytes],
    signature: Optional[str]
) -> bool:
    """Check a ``v0=<hex>`` signature header using constant-time comparison."""
    if not signature:
        return False

    expected_signature = f"{SIGNATURE_VERSION}={compute_signature(key, timestamp, body)}"
    result = hmac.compare_digest(expected_signature.encode("utf-8"), _as_bytes(signature))
    if not result:
        logger.debug("Signature mismatch", extra={"body_length": len(body)})
    return result
