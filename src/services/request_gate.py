"""Admission checks run on every Slack request before the payload is interpreted."""

import json
import time
from typing import Optional

from src.models.slack_event import SlackRequest
from src.services.slack_verifier import verify_slack_signature
from src.utils.errors import (
    MalformedBodyError,
    SignatureMismatchError,
    TimestampMismatchError,
    UnsupportedContentTypeError,
)
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


def parse_timestamp(value: Optional[str]) -> int:
    """Parse the timestamp header as whole seconds."""
    if value is None:
        raise TimestampMismatchError("missing x-slack-request-timestamp header")
    try:
        return int(value.strip())
    except ValueError:
        raise TimestampMismatchError(f"unparseable timestamp: {value!r}")


def check_freshness(timestamp: int, tolerance_seconds: int, now: Optional[int] = None) -> None:
    """Reject timestamps further than ``tolerance_seconds`` from the local clock."""
    if now is None:
        now = int(time.time())
    skew = abs(now - timestamp)
    if skew > tolerance_seconds:
        logger.warning(
            "Slack request timestamp outside tolerance",
            skew_seconds=skew,
            tolerance_seconds=tolerance_seconds
        )
        raise TimestampMismatchError(f"timestamp skew {skew}s exceeds {tolerance_seconds}s")


def media_type(content_type: Optional[str]) -> Optional[str]:
    """Media type of a Content-Type header with parameters dropped."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def parse_body(body: bytes) -> dict:
    try:
        parsed = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedBodyError(f"request body is not valid JSON: {e}")
    if not isinstance(parsed, dict):
        raise MalformedBodyError("request body must be a JSON object")
    return parsed


def admit(
    request: SlackRequest,
    key: bytes,
    tolerance_seconds: int,
    now: Optional[int] = None
) -> dict:
    """
    Run the admission pipeline and return the parsed JSON body.

    Steps run in a fixed order and stop at the first failure:
    timestamp parse, freshness, signature, content type. Failures raise a
    ``SlackVerificationError`` subclass carrying the response to send.
    Both the timestamp window and the signature over the timestamp are
    needed to stop replays.
    """
    timestamp = parse_timestamp(request.timestamp)
    check_freshness(timestamp, tolerance_seconds, now=now)

    # Sign the header text verbatim, not the reparsed integer
    if not verify_slack_signature(key, request.timestamp.strip(), request.body, request.signature):
        logger.warning(
            "Slack signature verification failed",
            has_signature=bool(request.signature),
            body_length=len(request.body)
        )
        raise SignatureMismatchError()

    if media_type(request.content_type) != JSON_CONTENT_TYPE:
        logger.warning("Unsupported content type", content_type=request.content_type)
        raise UnsupportedContentTypeError()

    return parse_body(request.body)
