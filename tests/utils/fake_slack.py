"""In-process stand-in for the Slack Web API and file host."""

import httpx

from tests.fixtures.slack_events import FILE_BYTES, slack_files_info_response


class FakeSlackApi:
    """Routes Slack Web API and file download calls made through httpx."""

    def __init__(self, content: bytes = FILE_BYTES, info_ok: bool = True, download_status: int = 200):
        self.content = content
        self.info_ok = info_ok
        self.download_status = download_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/files.info"):
            file_id = request.url.params["file"]
            if not self.info_ok:
                return httpx.Response(200, json={"ok": False, "error": "file_not_found"})
            return httpx.Response(200, json=slack_files_info_response(file_id))
        if request.url.host == "files.slack.com":
            return httpx.Response(self.download_status, content=self.content)
        return httpx.Response(404)
