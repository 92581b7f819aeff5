"""Background retrieval of files shared in Slack."""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from src.services.archive_paths import attachment_paths
from src.services.event_archiver import EventArchiver
from src.services.slack_files import SlackFilesClient
from src.utils.errors import AttachmentFetchError
from src.utils.logging import (
    get_structured_logger,
    log_timing,
    mask_sensitive_data,
    correlation_context,
    get_correlation_id,
)

logger = get_structured_logger(__name__)


class AttachmentFetcher:
    """
    Fetch file metadata and content on a bounded worker pool.

    Fetches are best effort: failures are logged and dropped, never
    retried, and repeated requests for the same file are fetched again.
    Shutdown cancels queued fetches. Downloads already running are not
    interrupted, and the interpreter joins the pool threads at exit, so
    process exit waits for them to finish.
    """

    def __init__(
        self,
        archiver: EventArchiver,
        client_factory: Callable[[], SlackFilesClient],
        max_workers: int = 4
    ):
        self.archiver = archiver
        self.client_factory = client_factory
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="attachment-fetch"
        )

    def fetch(self, team_id: str, file_id: str) -> None:
        """Store ``files.info`` metadata and the file bytes under ``{team}/FILES``."""
        info_path, data_path = attachment_paths(team_id, file_id)

        with self.client_factory() as client:
            info = client.files_info(file_id)
            self.archiver.write_json(info_path, info)

            file_obj = info.get("file") or {}
            url = file_obj.get("url_private_download")
            if not url:
                raise AttachmentFetchError(f"no url_private_download for {file_id}")

            size = client.download(url, self.archiver.resolve(data_path))

        logger.info(
            "Attachment stored",
            team_id=team_id,
            file_id=file_id,
            size_bytes=size
        )

    def _run(self, team_id: str, file_id: str, correlation_id: Optional[str]) -> None:
        with correlation_context(correlation_id):
            try:
                with log_timing("fetch_attachment", logger=logger, team_id=team_id, file_id=file_id):
                    self.fetch(team_id, file_id)
            except Exception as e:
                logger.error(
                    "Attachment fetch failed",
                    team_id=team_id,
                    file_id=file_id,
                    error=mask_sensitive_data(str(e)),
                    exc_info=not isinstance(e, AttachmentFetchError)
                )

    def submit(self, team_id: str, file_id: str) -> Future:
        """Schedule a fetch; the returned future never raises."""
        logger.info("Attachment fetch scheduled", team_id=team_id, file_id=file_id)
        return self._executor.submit(self._run, team_id, file_id, get_correlation_id())

    def shutdown(self, wait: bool = False) -> None:
        """Stop taking work; without ``wait`` queued fetches are cancelled."""
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
