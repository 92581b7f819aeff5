"""Route admitted Slack payloads to the archive and the attachment fetcher."""

from functools import wraps
from typing import Callable, Optional

from src.models.responses import SinkResponse
from src.models.slack_event import (
    FILE_SHARED,
    URL_VERIFICATION,
    event_file_id,
    event_type,
    payload_summary,
)
from src.services.archive_paths import resolve_archive_path
from src.services.attachment_fetcher import AttachmentFetcher
from src.services.event_archiver import EventArchiver
from src.utils.logging import get_structured_logger, mask_sensitive_data

logger = get_structured_logger(__name__)


class EventRouter:
    """Top-level handler for payloads that passed the request gate."""

    def __init__(self, archiver: EventArchiver, fetcher: Optional[AttachmentFetcher] = None):
        self.archiver = archiver
        self.fetcher = fetcher

    def handle(self, body: dict) -> SinkResponse:
        """
        Answer the url_verification handshake or archive the nested event.

        Always 200 for event callbacks, even when nothing was archived:
        Slack retries non-2xx deliveries, which would only duplicate lines.
        """
        if body.get("type") == URL_VERIFICATION:
            logger.info("URL verification handshake")
            return SinkResponse.ok(str(body.get("challenge") or ""))

        team_id = body.get("team_id")
        event = body.get("event")

        path = resolve_archive_path(team_id, event)
        if path:
            self.archiver.append(path, event)
        else:
            logger.info("Event not archived, no team id", **payload_summary(body))

        if event_type(event) == FILE_SHARED:
            file_id = event_file_id(event)
            if self.fetcher is not None and team_id and file_id:
                self.fetcher.submit(team_id, file_id)
            else:
                logger.warning("file_shared event without team or file id", **payload_summary(body))

        return SinkResponse.ok()


def log_request(handle: Callable[[dict], SinkResponse]) -> Callable[[dict], SinkResponse]:
    """
    Log each handled payload and turn any failure into a 200.

    Errors are logged, never surfaced, so Slack does not start a
    redelivery storm for an event that would fail again.
    """
    @wraps(handle)
    def wrapper(body: dict) -> SinkResponse:
        summary = payload_summary(body)
        try:
            response = handle(body)
        except Exception as e:
            logger.error(
                "Error handling Slack event",
                error=mask_sensitive_data(str(e)),
                exc_info=True,
                **summary
            )
            return SinkResponse.ok()
        logger.info("Slack event handled", status=response.status, **summary)
        return response

    return wrapper
