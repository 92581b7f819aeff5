"""Event sink configuration loaded from environment variables."""

import os
from typing import Any, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator

from src.utils.errors import ConfigurationError

DEFAULT_PORT = 8080
DEFAULT_ARCHIVE_PATH = "./archive"
# Slack's own guidance is five minutes; two seconds is the historical default here.
DEFAULT_TIMESTAMP_TOLERANCE_SECONDS = 2
DEFAULT_ATTACHMENT_WORKERS = 4
DEFAULT_SLACK_API_BASE_URL = "https://slack.com/api"

# field name -> environment variable
ENV_VARS = {
    "port": "HTTP_PORT",
    "archive_path": "ARCHIVE_PATH",
    "bot_token": "SLACK_BOT_TOKEN",
    "signing_secret": "SLACK_SIGNING_SECRET",
    "timestamp_tolerance_seconds": "SLACK_TIMESTAMP_TOLERANCE_SECONDS",
    "attachment_workers": "ATTACHMENT_WORKERS",
    "slack_api_base_url": "SLACK_API_BASE_URL",
}


class SinkSettings(BaseModel):
    """Runtime settings for the event sink."""
    port: int = Field(DEFAULT_PORT, ge=0, le=65535, description="HTTP port to listen on")
    archive_path: str = Field(DEFAULT_ARCHIVE_PATH, description="Archive root directory")
    bot_token: Optional[SecretStr] = Field(None, description="Slack bot token")
    signing_secret: Optional[SecretStr] = Field(None, description="Slack signing secret")
    timestamp_tolerance_seconds: int = Field(DEFAULT_TIMESTAMP_TOLERANCE_SECONDS, ge=0)
    attachment_workers: int = Field(DEFAULT_ATTACHMENT_WORKERS, ge=1)
    slack_api_base_url: str = DEFAULT_SLACK_API_BASE_URL
    sources: dict[str, str] = Field(default_factory=dict, description="Where each value came from")

    @field_validator("bot_token", "signing_secret", mode="before")
    @classmethod
    def _strip_secret(cls, value: Any) -> Any:
        # Env vars copied from dashboards often carry a trailing newline
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @classmethod
    def from_env(cls, **overrides: Any) -> "SinkSettings":
        """
        Build settings from the environment.

        Keyword overrides (typically CLI flags) win over environment
        variables; ``None`` overrides are ignored.
        """
        values: dict[str, Any] = {}
        sources: dict[str, str] = {}
        for field_name, env_var in ENV_VARS.items():
            override = overrides.get(field_name)
            if override is not None:
                values[field_name] = override
                sources[field_name] = "flag"
            elif os.environ.get(env_var, "").strip():
                values[field_name] = os.environ[env_var]
                sources[field_name] = f"env:{env_var}"
            else:
                sources[field_name] = "default"
        return cls(**values, sources=sources)

    def require_signing_secret(self) -> str:
        """Return the signing secret or fail loudly."""
        if self.signing_secret is None:
            raise ConfigurationError("SLACK_SIGNING_SECRET not set")
        return self.signing_secret.get_secret_value()

    def bot_token_value(self) -> Optional[str]:
        if self.bot_token is None:
            return None
        return self.bot_token.get_secret_value()

    def describe(self) -> dict[str, Any]:
        """Settings with secrets masked, suitable for logging."""
        return {
            "port": self.port,
            "archive_path": self.archive_path,
            "bot_token": "***" if self.bot_token else None,
            "signing_secret": "***" if self.signing_secret else None,
            "timestamp_tolerance_seconds": self.timestamp_tolerance_seconds,
            "attachment_workers": self.attachment_workers,
            "slack_api_base_url": self.slack_api_base_url,
            "sources": dict(self.sources),
        }
