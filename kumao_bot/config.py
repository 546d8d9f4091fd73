"""Application configuration resolved from environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from kumao_bot.errors import ConfigError

logger = logging.getLogger(__name__)

# Each setting accepts several variable names; the first non-empty one wins.
_ACCESS_TOKEN_VARS = ("CHANNEL_ACCESS_TOKEN", "LINE_CHANNEL_ACCESS_TOKEN")
_CHANNEL_SECRET_VARS = ("CHANNEL_SECRET", "LINE_CHANNEL_SECRET")
_OPENAI_KEY_VARS = ("OPENAI_API_KEY", "OPENAI_KEY", "OPENAI_API")


class LineConfig(BaseModel):
    """Credentials for the LINE Messaging API channel."""

    channel_access_token: str = ""
    channel_secret: str = ""


class OpenAIConfig(BaseModel):
    """Settings for the tutor chat model."""

    api_key: str = ""
    model: str = "gpt-4o"
    temperature: float = 0.3
    timeout_seconds: float = 60.0
    max_retries: int = 2


class ServerConfig(BaseModel):
    """Settings for the webhook HTTP server."""

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    max_body_bytes: int = 10 * 1024 * 1024
    rate_limit_per_minute: int = 120
    public_base_url: str = ""
    public_dir: str = "public"
    dedup_ttl_seconds: float = 600.0


class BoardConfig(BaseModel):
    """Settings for chalkboard formula images."""

    enabled: bool = True
    background: tuple[int, int, int] = (18, 48, 40)
    foreground: str = "#FFFFFF"
    font_size: float = 28.0
    dpi: int = 150
    margin: int = 100
    min_width: int = 900
    min_height: int = 360
    line_spacing: int = 24
    max_age_hours: int = 24
    cleanup_interval_minutes: int = 60


class BotConfig(BaseModel):
    """Top-level configuration for the webhook process."""

    log_level: str = "INFO"
    log_dir: str = ""
    line: LineConfig = Field(default_factory=LineConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    board: BoardConfig = Field(default_factory=BoardConfig)

    @property
    def public_path(self) -> Path:
        return Path(self.server.public_dir).expanduser().resolve()

    @property
    def boards_path(self) -> Path:
        return self.public_path / "boards"

    @property
    def log_path(self) -> Path | None:
        return Path(self.log_dir).expanduser() if self.log_dir else None

    def missing_credentials(self) -> list[str]:
        """Names of required variables that resolved to nothing."""
        missing: list[str] = []
        if not self.line.channel_access_token:
            missing.append(_ACCESS_TOKEN_VARS[0])
        if not self.line.channel_secret:
            missing.append(_CHANNEL_SECRET_VARS[0])
        if not self.openai.api_key:
            missing.append(_OPENAI_KEY_VARS[0])
        return missing


def first_env(environ: Mapping[str, str], *names: str, default: str = "") -> str:
    """Return the first non-empty value among *names*, stripped."""
    for name in names:
        value = environ.get(name, "").strip()
        if value:
            return value
    return default


def _int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ConfigError(msg) from exc


def load_config(environ: Mapping[str, str] | None = None) -> BotConfig:
    """Build a `BotConfig` from *environ* (defaults to ``os.environ``).

    Only variables that are set override the pydantic defaults, so an empty
    environment yields a config whose `missing_credentials()` names every
    required variable.
    """
    env = os.environ if environ is None else environ

    server_defaults = ServerConfig()
    openai_defaults = OpenAIConfig()

    config = BotConfig(
        log_level=first_env(env, "LOG_LEVEL", default="INFO").upper(),
        log_dir=first_env(env, "LOG_DIR"),
        line=LineConfig(
            channel_access_token=first_env(env, *_ACCESS_TOKEN_VARS),
            channel_secret=first_env(env, *_CHANNEL_SECRET_VARS),
        ),
        openai=OpenAIConfig(
            api_key=first_env(env, *_OPENAI_KEY_VARS),
            model=first_env(env, "OPENAI_MODEL", default=openai_defaults.model),
        ),
        server=ServerConfig(
            host=first_env(env, "HOST", default=server_defaults.host),
            port=_int_env(env, "PORT", server_defaults.port),
            public_base_url=first_env(env, "PUBLIC_BASE_URL").rstrip("/"),
            public_dir=first_env(env, "PUBLIC_DIR", default=server_defaults.public_dir),
        ),
        board=BoardConfig(
            enabled=first_env(env, "BOARD_ENABLED", default="true").lower()
            not in ("0", "false", "no", "off"),
        ),
    )
    logger.debug(
        "Config loaded port=%d model=%s public_base_url=%s",
        config.server.port,
        config.openai.model,
        config.server.public_base_url or "<per-request>",
    )
    return config
