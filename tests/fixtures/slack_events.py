"""Slack event fixtures."""

from typing import Any, Dict, Optional

FILE_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake image data" * 64


def slack_url_verification_challenge(challenge: str = "abc123") -> Dict[str, Any]:
    """Slack URL verification challenge payload."""
    return {
        "type": "url_verification",
        "challenge": challenge,
        "token": "test-token"
    }


def slack_message_event(
    team_id: Optional[str] = "T1",
    channel: Optional[str] = "C1",
    event_ts: str = "1700000000.000100",
    text: str = "Test message"
) -> Dict[str, Any]:
    """Slack message event callback."""
    event = {
        "type": "message",
        "event_ts": event_ts,
        "ts": event_ts,
        "user": "U123456",
        "text": text,
    }
    if channel is not None:
        event["channel"] = channel
    body = {
        "type": "event_callback",
        "token": "test-token",
        "event_id": "Ev123456",
        "event": event,
    }
    if team_id is not None:
        body["team_id"] = team_id
    return body


def slack_file_shared_event(file_id: str = "F1", team_id: str = "T1") -> Dict[str, Any]:
    """Slack file_shared event callback."""
    return {
        "type": "event_callback",
        "token": "test-token",
        "team_id": team_id,
        "event_id": "Ev654321",
        "event": {
            "type": "file_shared",
            "channel_id": "C1",
            "file_id": file_id,
            "user_id": "U123456",
            "file": {"id": file_id},
            "event_ts": "1700000000.000200"
        }
    }


def slack_files_info_response(file_id: str) -> Dict[str, Any]:
    """Body returned by files.info."""
    return {
        "ok": True,
        "file": {
            "id": file_id,
            "name": "screenshot.png",
            "mimetype": "image/png",
            "size": len(FILE_BYTES),
            "url_private_download": f"https://files.slack.com/files-pri/T1-{file_id}/download/screenshot.png"
        }
    }
