"""Error handling utilities."""

from typing import Optional


class EventSinkError(Exception):
    """Base exception for the Slack event sink."""
    pass


class ConfigurationError(EventSinkError):
    """Missing or invalid configuration value."""
    pass


class SlackVerificationError(EventSinkError):
    """
    Request rejected before any event processing.

    Carries the HTTP status and plain-text body sent back to Slack.
    """

    status_code: int = 403
    response_text: str = "forbidden"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.response_text)


class TimestampMismatchError(SlackVerificationError):
    """Timestamp header missing, unparseable or outside the allowed window."""
    status_code = 403
    response_text = "timestamp mismatch"


class SignatureMismatchError(SlackVerificationError):
    """Signature header does not match the computed digest."""
    status_code = 403
    response_text = "signature mismatch"


class UnsupportedContentTypeError(SlackVerificationError):
    """Content type is not application/json."""
    status_code = 415
    response_text = "content-type must be application/json"


class MalformedBodyError(EventSinkError):
    """Request body could not be parsed as a JSON object."""
    pass


class ArchiveError(EventSinkError):
    """Archive write error."""
    pass


class AttachmentFetchError(EventSinkError):
    """Attachment metadata or content could not be retrieved."""
    pass
