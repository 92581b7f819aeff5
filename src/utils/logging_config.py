"""Logging setup for the event sink process, driven by environment variables."""

import os
import logging
import sys
from typing import Optional, TextIO
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "slack-event-sink"

# Chatty per-request loggers: httpx logs every files.info call, and the
# listener's access log repeats what the request log already records.
QUIET_LOGGERS = ("httpx", "httpcore", "api.slack.events")


class LoggingConfig:
    """Process-wide logging settings for the sink."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    # Attachment fetches slower than this are logged as a warning
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "5000"))

    @classmethod
    def build_formatter(cls, fmt: Optional[str] = None) -> logging.Formatter:
        """JSON lines tagged with the service name, or plain text for a terminal."""
        if (fmt or cls.LOG_FORMAT) == "text":
            return logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        return jsonlogger.JsonFormatter(
            "%(timestamp)s %(levelname)s %(name)s %(threadName)s %(message)s",
            timestamp=True,
            static_fields={"service": SERVICE_NAME}
        )

    @classmethod
    def setup_logging(
        cls,
        level: Optional[str] = None,
        fmt: Optional[str] = None,
        stream: Optional[TextIO] = None
    ) -> logging.Handler:
        """
        Install a single stdout handler on the root logger.

        ``level`` and ``fmt`` override ``LOG_LEVEL`` and ``LOG_FORMAT``.
        Returns the installed handler.
        """
        resolved_level = getattr(logging, (level or cls.LOG_LEVEL).upper(), logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(resolved_level)
        root_logger.handlers.clear()

        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(cls.build_formatter(fmt))
        root_logger.addHandler(handler)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))

        return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
