"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from kumao_bot.config import BotConfig, LineConfig, OpenAIConfig, ServerConfig


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """Temporary public directory served under /public."""
    path = tmp_path / "public"
    path.mkdir()
    return path


@pytest.fixture
def bot_config(public_dir: Path) -> BotConfig:
    """Fully credentialed config pointing at the temporary public dir."""
    return BotConfig(
        line=LineConfig(channel_access_token="line-token", channel_secret="line-secret"),
        openai=OpenAIConfig(api_key="sk-test"),
        server=ServerConfig(host="127.0.0.1", port=0, public_dir=str(public_dir)),
    )
