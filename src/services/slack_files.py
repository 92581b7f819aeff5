"""Minimal Slack Web API client for file metadata and downloads."""

from pathlib import Path
from typing import Optional

import httpx

from src.config import DEFAULT_SLACK_API_BASE_URL
from src.utils.errors import AttachmentFetchError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)
CHUNK_SIZE = 64 * 1024


class SlackFilesClient:
    """Wrapper around ``httpx.Client`` authenticated with the bot token."""

    def __init__(
        self,
        token: Optional[str],
        base_url: str = DEFAULT_SLACK_API_BASE_URL,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None
    ):
        if not token:
            raise AttachmentFetchError("SLACK_BOT_TOKEN not set")
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def __enter__(self) -> "SlackFilesClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        self._client.close()

    def files_info(self, file_id: str) -> dict:
        """Call ``files.info`` and return the full response document."""
        try:
            response = self._client.get(f"{self.base_url}/files.info", params={"file": file_id})
            response.raise_for_status()
            info = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AttachmentFetchError(f"files.info failed for {file_id}: {e}")

        if not isinstance(info, dict) or not info.get("ok"):
            error = info.get("error") if isinstance(info, dict) else "invalid_response"
            raise AttachmentFetchError(f"files.info returned error for {file_id}: {error}")
        return info

    def download(self, url: str, destination: Path) -> int:
        """Stream ``url`` into ``destination`` and return the number of bytes written."""
        written = 0
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                destination.parent.mkdir(parents=True, exist_ok=True)
                with open(destination, "wb") as f:
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        f.write(chunk)
                        written += len(chunk)
        except httpx.HTTPError as e:
            raise AttachmentFetchError(f"download failed: {e}")
        return written
