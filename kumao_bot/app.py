"""KumaoBot: wires config into the webhook server and tutor components."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import TYPE_CHECKING

from linebot.v3 import WebhookParser

from kumao_bot.board.cleanup import BoardCleanupObserver
from kumao_bot.board.renderer import BoardRenderer
from kumao_bot.line.messenger import LineMessenger
from kumao_bot.tutor.handler import TutorHandler
from kumao_bot.tutor.llm import TutorClient
from kumao_bot.webhook.server import WebhookServer

if TYPE_CHECKING:
    from kumao_bot.config import BotConfig

logger = logging.getLogger(__name__)


class KumaoBot:
    """Owns the long-lived components and their start/stop order."""

    def __init__(self, config: BotConfig) -> None:
        self._config = config
        self._stop_event = asyncio.Event()

        self.messenger = LineMessenger(config.line.channel_access_token)
        self.tutor = TutorClient(config.openai)
        self.renderer = (
            BoardRenderer(config.board, config.boards_path) if config.board.enabled else None
        )
        self.handler = TutorHandler(self.messenger, self.tutor, self.renderer)
        self.server = WebhookServer(
            config.server,
            WebhookParser(config.line.channel_secret),
            config.public_path,
        )
        self.server.set_dispatch_handler(self.handler.handle_events)
        self.cleanup = BoardCleanupObserver(config.board, config.boards_path)

    async def start(self) -> None:
        await self.server.start()
        await self.cleanup.start()
        logger.info("Kumao-sensei bot ready on port %d", self._config.server.port)

    async def shutdown(self) -> None:
        await self.cleanup.stop()
        await self.server.stop()
        await self.messenger.close()
        await self.tutor.close()
        logger.info("Kumao-sensei bot shut down")

    def request_stop(self) -> None:
        self._stop_event.set()

    async def run(self) -> int:
        """Serve until SIGINT/SIGTERM or `request_stop()`. Returns the exit code."""
        loop = asyncio.get_running_loop()
        if sys.platform != "win32":
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self.request_stop)

        try:
            await self.start()
            await self._stop_event.wait()
            logger.info("Stop requested")
        finally:
            await self.shutdown()
        return 0
