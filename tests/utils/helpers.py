"""Test helper functions."""

import json
import hmac
import hashlib
import time
from typing import Any, Dict, Optional, Union

from src.models.slack_event import SlackRequest

TEST_SECRET = "test-secret"
FROZEN_NOW = 1700000000


def generate_slack_signature(secret: str, timestamp: str, body: Union[str, bytes]) -> str:
    """Generate a valid Slack signature for testing."""
    if isinstance(body, str):
        body = body.encode('utf-8')
    sig_basestring = f"v0:{timestamp}:".encode('utf-8') + body
    signature = hmac.new(
        secret.encode('utf-8'),
        sig_basestring,
        hashlib.sha256
    ).hexdigest()
    return f"v0={signature}"


def encode_body(body: Union[Dict[str, Any], str, bytes]) -> bytes:
    if isinstance(body, dict):
        return json.dumps(body).encode('utf-8')
    if isinstance(body, str):
        return body.encode('utf-8')
    return body


def signed_headers(
    secret: str,
    body: bytes,
    timestamp: Optional[Union[int, str]] = None,
    content_type: str = "application/json"
) -> Dict[str, str]:
    """Headers Slack would send for ``body``."""
    if timestamp is None:
        timestamp = int(time.time())
    timestamp = str(timestamp)
    return {
        "X-Slack-Request-Timestamp": timestamp,
        "X-Slack-Signature": generate_slack_signature(secret, timestamp, body),
        "Content-Type": content_type,
    }


def create_signed_request(
    body: Union[Dict[str, Any], str, bytes],
    secret: str = TEST_SECRET,
    timestamp: Optional[Union[int, str]] = None,
    content_type: str = "application/json",
    signature: Optional[str] = None
) -> SlackRequest:
    """Create a signed request as it reaches the gate."""
    raw = encode_body(body)
    headers = signed_headers(secret, raw, timestamp=timestamp, content_type=content_type)
    if signature is not None:
        headers["X-Slack-Signature"] = signature
    return SlackRequest.from_headers(raw, headers)


def read_jsonl(path) -> list:
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]
