"""CLI entry point using Typer."""

import json
from typing import Optional

import typer
from pydantic import ValidationError

from src.config import SinkSettings
from src.services.event_sink import EventSink
from src.utils.errors import ConfigurationError
from src.utils.logging import get_structured_logger
from src.utils.logging_config import LoggingConfig

app = typer.Typer(
    name="slack-event-sink",
    help=(
        "Listen for events from Slack coming in through the Events API and capture them.\n\n"
        "Events are stored in JSONL files in a team/channel/date hierarchy."
    ),
)

logger = get_structured_logger(__name__)

SecretArg = typer.Argument(None, help="Slack signing secret", show_default=False)
PortOpt = typer.Option(None, "--port", help="HTTP port to listen on")
PathOpt = typer.Option(None, "--path", help="Location where to write the archive (directory)")
BotTokenOpt = typer.Option(None, "--bot-token", help="Slack bot token")
SigningSecretOpt = typer.Option(None, "--signing-secret", help="Slack signing secret")
ToleranceOpt = typer.Option(
    None, "--timestamp-tolerance", help="Allowed request timestamp skew in seconds"
)
WorkersOpt = typer.Option(None, "--workers", help="Concurrent attachment downloads")
LogLevelOpt = typer.Option(None, "--log-level", help="Log level (overrides LOG_LEVEL)")
LogFormatOpt = typer.Option(None, "--log-format", help="json or text (overrides LOG_FORMAT)")


def _settings(
    signing_secret_arg: Optional[str],
    port: Optional[int],
    path: Optional[str],
    bot_token: Optional[str],
    signing_secret: Optional[str],
    timestamp_tolerance: Optional[int],
    workers: Optional[int],
) -> SinkSettings:
    return SinkSettings.from_env(
        port=port,
        archive_path=path,
        bot_token=bot_token,
        signing_secret=signing_secret or signing_secret_arg,
        timestamp_tolerance_seconds=timestamp_tolerance,
        attachment_workers=workers,
    )


def _fail(error: Exception) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(code=2)


@app.command()
def start(
    secret: Optional[str] = SecretArg,
    port: Optional[int] = PortOpt,
    path: Optional[str] = PathOpt,
    bot_token: Optional[str] = BotTokenOpt,
    signing_secret: Optional[str] = SigningSecretOpt,
    timestamp_tolerance: Optional[int] = ToleranceOpt,
    workers: Optional[int] = WorkersOpt,
    log_level: Optional[str] = LogLevelOpt,
    log_format: Optional[str] = LogFormatOpt,
) -> None:
    """Start the HTTP listener."""
    from api.slack.events import make_server

    LoggingConfig.setup_logging(level=log_level, fmt=log_format)

    try:
        settings = _settings(secret, port, path, bot_token, signing_secret, timestamp_tolerance, workers)
        sink = EventSink.from_settings(settings)
    except (ConfigurationError, ValidationError) as e:
        raise _fail(e)

    logger.info("HTTP starting", port=settings.port, archive_path=settings.archive_path)
    logger.info("Bot token source", source=settings.sources.get("bot_token"))
    logger.info("Signing secret source", source=settings.sources.get("signing_secret"))
    if settings.bot_token is None:
        logger.warning("No bot token configured, shared files will not be downloaded")

    server = make_server(sink, settings.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
        sink.close()


@app.command()
def inspect(
    secret: Optional[str] = SecretArg,
    port: Optional[int] = PortOpt,
    path: Optional[str] = PathOpt,
    bot_token: Optional[str] = BotTokenOpt,
    signing_secret: Optional[str] = SigningSecretOpt,
    timestamp_tolerance: Optional[int] = ToleranceOpt,
    workers: Optional[int] = WorkersOpt,
) -> None:
    """Print the resolved configuration with secrets masked."""
    try:
        settings = _settings(secret, port, path, bot_token, signing_secret, timestamp_tolerance, workers)
    except ValidationError as e:
        raise _fail(e)
    typer.echo(json.dumps(settings.describe(), indent=2, sort_keys=True))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
