"""Event sink application: configuration resolved once, wired into the pipeline."""

from functools import partial
from typing import Callable, Optional

from src.config import SinkSettings
from src.models.responses import SinkResponse
from src.models.slack_event import SlackRequest
from src.services.attachment_fetcher import AttachmentFetcher
from src.services.event_archiver import EventArchiver
from src.services.event_router import EventRouter, log_request
from src.services.request_gate import admit
from src.services.slack_files import SlackFilesClient
from src.services.slack_verifier import load_signing_key
from src.utils.errors import SlackVerificationError
from src.utils.logging import get_structured_logger, mask_sensitive_data

logger = get_structured_logger(__name__)


class EventSink:
    """Gate, router, archiver and fetcher bound to one signing key."""

    def __init__(
        self,
        signing_key: bytes,
        archiver: EventArchiver,
        fetcher: Optional[AttachmentFetcher] = None,
        tolerance_seconds: int = 2,
        clock: Optional[Callable[[], float]] = None
    ):
        self.signing_key = signing_key
        self.archiver = archiver
        self.fetcher = fetcher
        self.tolerance_seconds = tolerance_seconds
        self.clock = clock
        self.router = EventRouter(archiver, fetcher)
        self._handle = log_request(self.router.handle)

    @classmethod
    def from_settings(cls, settings: SinkSettings) -> "EventSink":
        """Resolve the signing key and build every component."""
        signing_key = load_signing_key(settings.require_signing_secret())
        archiver = EventArchiver(settings.archive_path)
        client_factory = partial(
            SlackFilesClient,
            settings.bot_token_value(),
            base_url=settings.slack_api_base_url
        )
        fetcher = AttachmentFetcher(archiver, client_factory, max_workers=settings.attachment_workers)
        logger.info(
            "Event sink initialized",
            archive_root=str(archiver.root),
            timestamp_tolerance_seconds=settings.timestamp_tolerance_seconds,
            attachment_workers=settings.attachment_workers
        )
        return cls(
            signing_key,
            archiver,
            fetcher,
            tolerance_seconds=settings.timestamp_tolerance_seconds
        )

    def process(self, request: SlackRequest) -> SinkResponse:
        """Admit the request, then route it. Only gate failures are non-200."""
        try:
            body = admit(
                request,
                self.signing_key,
                self.tolerance_seconds,
                now=int(self.clock()) if self.clock else None
            )
        except SlackVerificationError as e:
            logger.info("Request rejected", status=e.status_code, reason=str(e))
            return SinkResponse(status=e.status_code, body=e.response_text)
        except Exception as e:
            logger.error(
                "Error admitting Slack request",
                error=mask_sensitive_data(str(e)),
                exc_info=True
            )
            return SinkResponse.ok()

        return self._handle(body)

    def close(self) -> None:
        """Stop accepting attachment work; queued fetches are cancelled."""
        if self.fetcher is not None:
            self.fetcher.shutdown(wait=False)
