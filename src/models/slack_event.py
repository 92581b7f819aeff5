"""Slack request and event models."""

from typing import Any, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field

URL_VERIFICATION = "url_verification"
FILE_SHARED = "file_shared"


class SlackRequest(BaseModel):
    """Inbound webhook request as seen by the gate. Immutable once received."""
    model_config = ConfigDict(frozen=True)

    body: bytes = Field(..., description="Raw request body")
    headers: dict[str, str] = Field(default_factory=dict, description="Lower-cased header map")

    @classmethod
    def from_headers(cls, body: bytes, headers: Mapping[str, str]) -> "SlackRequest":
        """Build a request, normalising header names to lower case."""
        return cls(body=body, headers={k.lower(): v for k, v in headers.items()})

    @property
    def timestamp(self) -> Optional[str]:
        return self.headers.get("x-slack-request-timestamp")

    @property
    def signature(self) -> Optional[str]:
        return self.headers.get("x-slack-signature")

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")


def event_type(event: Optional[dict]) -> Optional[str]:
    """Type of a nested event, if any."""
    if not isinstance(event, dict):
        return None
    return event.get("type")


def event_ts(event: Optional[dict]) -> Optional[str]:
    """Slack timestamp carried by the event (``event_ts`` preferred over ``ts``)."""
    if not isinstance(event, dict):
        return None
    ts = event.get("event_ts") or event.get("ts")
    return str(ts) if ts else None


def event_channel_id(event: Optional[dict]) -> Optional[str]:
    """Channel the event belongs to, or None for workspace-level events."""
    if not isinstance(event, dict):
        return None

    channel = event.get("channel")
    if isinstance(channel, dict):
        channel = channel.get("id")
    if channel:
        return str(channel)

    if event.get("channel_id"):
        return str(event["channel_id"])

    item = event.get("item")
    if isinstance(item, dict) and item.get("channel"):
        return str(item["channel"])

    return None


def event_file_id(event: Optional[dict]) -> Optional[str]:
    """File id referenced by a ``file_shared`` event."""
    if not isinstance(event, dict):
        return None
    file_obj = event.get("file")
    if isinstance(file_obj, dict) and file_obj.get("id"):
        return str(file_obj["id"])
    if event.get("file_id"):
        return str(event["file_id"])
    return None


def payload_summary(body: Any) -> dict:
    """Fields worth logging for a payload, never its content."""
    if not isinstance(body, dict):
        return {}
    event = body.get("event")
    return {
        "payload_type": body.get("type"),
        "team_id": body.get("team_id"),
        "event_type": event_type(event),
        "event_ts": event_ts(event),
    }
