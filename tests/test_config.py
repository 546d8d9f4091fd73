"""Tests for environment-based configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from kumao_bot.config import BotConfig, first_env, load_config
from kumao_bot.errors import ConfigError

_FULL_ENV = {
    "CHANNEL_ACCESS_TOKEN": "tok",
    "CHANNEL_SECRET": "sec",
    "OPENAI_API_KEY": "sk-1",
}


# -- defaults --


def test_bot_config_defaults() -> None:
    cfg = BotConfig()
    assert cfg.server.port == 3000
    assert cfg.server.host == "0.0.0.0"
    assert cfg.openai.model == "gpt-4o"
    assert cfg.openai.temperature == 0.3
    assert cfg.board.background == (18, 48, 40)
    assert cfg.board.min_width == 900
    assert cfg.board.min_height == 360


def test_boards_path_under_public(tmp_path: Path) -> None:
    cfg = BotConfig(server={"public_dir": str(tmp_path / "pub")})
    assert cfg.boards_path == (tmp_path / "pub" / "boards").resolve()


def test_log_path_empty_means_none() -> None:
    assert BotConfig().log_path is None
    assert BotConfig(log_dir="/tmp/kumao-logs").log_path == Path("/tmp/kumao-logs")


# -- load_config --


def test_load_full_env() -> None:
    cfg = load_config(_FULL_ENV)
    assert cfg.line.channel_access_token == "tok"
    assert cfg.line.channel_secret == "sec"
    assert cfg.openai.api_key == "sk-1"
    assert cfg.missing_credentials() == []


def test_line_prefixed_aliases() -> None:
    cfg = load_config(
        {
            "LINE_CHANNEL_ACCESS_TOKEN": "tok2",
            "LINE_CHANNEL_SECRET": "sec2",
            "OPENAI_KEY": "sk-2",
        }
    )
    assert cfg.line.channel_access_token == "tok2"
    assert cfg.line.channel_secret == "sec2"
    assert cfg.openai.api_key == "sk-2"


def test_openai_api_alias() -> None:
    assert load_config({"OPENAI_API": "sk-3"}).openai.api_key == "sk-3"


def test_primary_name_wins_over_alias() -> None:
    cfg = load_config({"CHANNEL_SECRET": "primary", "LINE_CHANNEL_SECRET": "alias"})
    assert cfg.line.channel_secret == "primary"


def test_blank_primary_falls_through_to_alias() -> None:
    cfg = load_config({"CHANNEL_SECRET": "  ", "LINE_CHANNEL_SECRET": "alias"})
    assert cfg.line.channel_secret == "alias"


def test_missing_credentials_lists_primary_names() -> None:
    assert load_config({}).missing_credentials() == [
        "CHANNEL_ACCESS_TOKEN",
        "CHANNEL_SECRET",
        "OPENAI_API_KEY",
    ]


def test_port_and_public_url() -> None:
    cfg = load_config({**_FULL_ENV, "PORT": "8080", "PUBLIC_BASE_URL": "https://bot.example.com//"})
    assert cfg.server.port == 8080
    assert cfg.server.public_base_url == "https://bot.example.com"


def test_invalid_port_raises() -> None:
    with pytest.raises(ConfigError, match="PORT"):
        load_config({"PORT": "eighty"})


def test_log_level_uppercased() -> None:
    assert load_config({"LOG_LEVEL": "debug"}).log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["0", "false", "off", "No"])
def test_board_can_be_disabled(raw: str) -> None:
    assert load_config({"BOARD_ENABLED": raw}).board.enabled is False


def test_board_enabled_by_default() -> None:
    assert load_config({}).board.enabled is True


def test_first_env_default() -> None:
    assert first_env({}, "A", "B", default="x") == "x"
    assert first_env({"B": " b "}, "A", "B") == "b"
