"""Slack events webhook endpoint."""

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
from typing import Optional

from src.models.responses import SinkResponse
from src.models.slack_event import SlackRequest
from src.services.event_sink import EventSink
from src.utils.logging import correlation_context, get_structured_logger

_logger = get_structured_logger(__name__)

_event_sink: Optional[EventSink] = None


def init_event_sink(sink: Optional[EventSink]) -> None:
    """Install the event sink served by ``handler``. Called once at startup."""
    global _event_sink
    _event_sink = sink


def get_event_sink() -> Optional[EventSink]:
    return _event_sink


class handler(BaseHTTPRequestHandler):
    """HTTP handler for Slack Events API deliveries."""

    protocol_version = "HTTP/1.1"

    def _write(self, response: SinkResponse) -> None:
        payload = response.body.encode('utf-8')
        self.send_response(response.status)
        self.send_header('Content-Type', response.content_type)
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def do_POST(self):
        """Handle POST request from Slack."""
        with correlation_context():
            try:
                content_length = int(self.headers.get('Content-Length', 0))
                raw_body = self.rfile.read(content_length) if content_length > 0 else b""

                sink = get_event_sink()
                if sink is None:
                    _logger.error("Event sink not initialized, dropping request")
                    self._write(SinkResponse.ok())
                    return

                request = SlackRequest.from_headers(raw_body, dict(self.headers.items()))
                self._write(sink.process(request))
            except Exception as e:
                _logger.error("Error processing Slack event", error=str(e), exc_info=True)
                self._write(SinkResponse.ok())

    def do_GET(self):
        """Handle GET request (health check)."""
        self._write(SinkResponse(
            status=200,
            body=json.dumps({"status": "ok", "endpoint": "slack/events"}),
            content_type="application/json"
        ))

    def log_message(self, format, *args):
        _logger.debug("HTTP access", client=self.address_string(), line=format % args)


def make_server(sink: EventSink, port: int, host: str = "") -> ThreadingHTTPServer:
    """Bind a threading HTTP server serving ``sink`` on ``host:port``."""
    init_event_sink(sink)
    server = ThreadingHTTPServer((host, port), handler)
    server.daemon_threads = True
    return server
