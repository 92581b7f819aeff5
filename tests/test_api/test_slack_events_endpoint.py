"""Tests for Slack events endpoint."""

import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from http.server import BaseHTTPRequestHandler
from io import BytesIO
from unittest.mock import Mock

import httpx
import pytest

from api.slack.events import handler, init_event_sink, make_server
from src.services.event_sink import EventSink
from tests.fixtures.slack_events import (
    FILE_BYTES,
    slack_file_shared_event,
    slack_message_event,
    slack_url_verification_challenge,
)
from tests.utils.helpers import TEST_SECRET, encode_body, read_jsonl, signed_headers


@pytest.fixture
def live_sink(signing_key, archiver, fetcher):
    """Sink checking timestamps against the real clock."""
    return EventSink(signing_key, archiver, fetcher, tolerance_seconds=2)


@pytest.fixture
def server_url(live_sink):
    server = make_server(live_sink, 0, host="127.0.0.1")
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}/slack/events"
    finally:
        server.shutdown()
        server.server_close()
        init_event_sink(None)


def post_signed(url, body, secret=TEST_SECRET, **kwargs):
    raw = encode_body(body)
    return httpx.post(url, content=raw, headers=signed_headers(secret, raw, **kwargs), timeout=10, trust_env=False)


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@pytest.mark.integration
def test_url_verification_handshake(server_url):
    response = post_signed(server_url, slack_url_verification_challenge("abc123"))

    assert response.status_code == 200
    assert response.text == "abc123"
    assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.integration
def test_message_event_archived(server_url, archive_root):
    body = slack_message_event(team_id="T1", channel="C1", event_ts="1700000000.000100")

    response = post_signed(server_url, body)

    assert response.status_code == 200
    assert response.text == ""
    path = archive_root / "T1" / "C1" / "2023-11-14.jsonl"
    assert path.read_text(encoding="utf-8").count("\n") == 1
    assert read_jsonl(path) == [body["event"]]


@pytest.mark.integration
def test_event_without_channel_archived_under_meta(server_url, archive_root):
    body = slack_message_event(channel=None)

    assert post_signed(server_url, body).status_code == 200
    assert read_jsonl(archive_root / "T1" / "META" / "2023-11-14.jsonl") == [body["event"]]


@pytest.mark.integration
def test_file_shared_downloads_attachment(server_url, archive_root):
    response = post_signed(server_url, slack_file_shared_event("F1"))

    assert response.status_code == 200
    data_file = archive_root / "T1" / "FILES" / "F1"
    info_file = archive_root / "T1" / "FILES" / "F1.json"
    assert wait_for(lambda: data_file.exists() and data_file.stat().st_size == len(FILE_BYTES))
    assert json.loads(info_file.read_text())["file"]["id"] == "F1"
    assert data_file.read_bytes() == FILE_BYTES


@pytest.mark.integration
def test_invalid_signature_rejected(server_url, archive_root):
    raw = encode_body(slack_message_event())
    headers = signed_headers(TEST_SECRET, raw)
    headers["X-Slack-Signature"] = "v0=invalid"

    response = httpx.post(server_url, content=raw, headers=headers, trust_env=False)

    assert response.status_code == 403
    assert response.text == "signature mismatch"
    assert list(archive_root.iterdir()) == []


@pytest.mark.integration
def test_stale_timestamp_rejected(server_url, archive_root):
    response = post_signed(server_url, slack_message_event(), timestamp=int(time.time()) - 60)

    assert response.status_code == 403
    assert response.text == "timestamp mismatch"
    assert list(archive_root.iterdir()) == []


@pytest.mark.integration
def test_wrong_content_type_rejected(server_url):
    response = post_signed(
        server_url, slack_message_event(), content_type="application/x-www-form-urlencoded"
    )

    assert response.status_code == 415
    assert response.text == "content-type must be application/json"


@pytest.mark.integration
def test_malformed_body_answered_with_200(server_url, archive_root):
    response = post_signed(server_url, b"{not json")

    assert response.status_code == 200
    assert list(archive_root.iterdir()) == []


@pytest.mark.integration
def test_redelivery_is_archived_twice(server_url, archive_root):
    body = slack_message_event()

    post_signed(server_url, body)
    post_signed(server_url, body)

    assert read_jsonl(archive_root / "T1" / "C1" / "2023-11-14.jsonl") == [body["event"]] * 2


@pytest.mark.integration
def test_concurrent_requests_same_path(server_url, archive_root):
    count = 25
    bodies = [slack_message_event(text=f"message {i} " + "x" * 4000) for i in range(count)]

    with ThreadPoolExecutor(max_workers=10) as pool:
        statuses = list(pool.map(lambda b: post_signed(server_url, b).status_code, bodies))

    assert statuses == [200] * count
    lines = read_jsonl(archive_root / "T1" / "C1" / "2023-11-14.jsonl")
    assert len(lines) == count
    assert sorted(line["text"] for line in lines) == sorted(b["event"]["text"] for b in bodies)


@pytest.mark.integration
def test_health_check(server_url):
    response = httpx.get(server_url, trust_env=False)

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "endpoint": "slack/events"}


@pytest.mark.unit
def test_handler_class():
    """Test that handler is a BaseHTTPRequestHandler subclass."""
    assert issubclass(handler, BaseHTTPRequestHandler)


@pytest.mark.unit
def test_uninitialized_sink_answers_200():
    init_event_sink(None)
    h = handler.__new__(handler)
    h.headers = {"Content-Length": "2"}
    h.rfile = BytesIO(b"{}")
    h.wfile = BytesIO()
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()

    h.do_POST()

    assert h.send_response.call_args[0][0] == 200
