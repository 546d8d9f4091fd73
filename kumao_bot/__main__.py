"""Entry point: python -m kumao_bot."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kumao_bot import __version__
from kumao_bot.config import BotConfig, load_config
from kumao_bot.errors import ConfigError
from kumao_bot.logging_config import level_from_name, setup_logging

logger = logging.getLogger(__name__)

_console = Console()


def _mask(secret: str) -> str:
    if not secret:
        return "[bold red]missing[/bold red]"
    return f"[green]set[/green] [dim](…{secret[-4:]})[/dim]" if len(secret) > 8 else "[green]set[/green]"


def _resolve_config() -> BotConfig:
    """Load ``.env`` then the environment; exit with a hint when unusable."""
    load_dotenv()
    try:
        return load_config()
    except ConfigError as exc:
        _console.print(f"[bold red]Invalid configuration:[/bold red] {exc}")
        sys.exit(1)


def _print_usage() -> None:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold green", min_width=18)
    table.add_column()
    table.add_row("kumao", "Start the webhook server")
    table.add_row("kumao check", "Show the resolved configuration")
    table.add_row("kumao help", "Show this message")
    table.add_row("-v, --verbose", "Verbose logging output")
    _console.print(
        Panel(table, title=f"[bold]kumao-bot {__version__}[/bold]", border_style="blue"),
    )


def _print_status(config: BotConfig) -> None:
    lines = [
        f"LINE token:   {_mask(config.line.channel_access_token)}",
        f"LINE secret:  {_mask(config.line.channel_secret)}",
        f"OpenAI key:   {_mask(config.openai.api_key)}",
        f"Model:        [cyan]{config.openai.model}[/cyan]",
        f"Listen:       [cyan]{config.server.host}:{config.server.port}[/cyan]",
        f"Public URL:   [cyan]{config.server.public_base_url or '(from request headers)'}[/cyan]",
        f"Public dir:   [cyan]{config.public_path}[/cyan]",
        f"Boards:       {'[green]enabled[/green]' if config.board.enabled else '[dim]disabled[/dim]'}",
    ]
    missing = config.missing_credentials()
    border = "red" if missing else "green"
    if missing:
        lines.append("")
        lines.append(f"[bold red]Missing:[/bold red] {', '.join(missing)}")
    _console.print(Panel("\n".join(lines), title="[bold]Status[/bold]", border_style=border))


async def run_bot(config: BotConfig) -> int:
    from kumao_bot.app import KumaoBot

    bot = KumaoBot(config)
    return await bot.run()


def _start_bot(verbose: bool) -> None:
    config = _resolve_config()
    level = level_from_name(config.log_level)
    setup_logging(level=level, verbose=verbose, log_dir=config.log_path)

    missing = config.missing_credentials()
    if missing:
        _console.print(
            f"[bold red]Missing environment variables:[/bold red] {', '.join(missing)}",
        )
        sys.exit(1)

    exit_code = asyncio.run(run_bot(config))
    if exit_code:
        sys.exit(exit_code)


def main() -> None:
    """CLI entry point."""
    args = sys.argv[1:]
    commands = [a for a in args if not a.startswith("-")]
    verbose = "--verbose" in args or "-v" in args

    if "--help" in args or "-h" in args or "help" in commands:
        _print_usage()
        return
    if "check" in commands:
        _print_status(_resolve_config())
        return
    _start_bot(verbose)


if __name__ == "__main__":
    main()
