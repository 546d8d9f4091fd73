"""Tutor handler: turns incoming LINE messages into answered replies."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from kumao_bot.errors import BoardRenderError, LineApiError, TutorError
from kumao_bot.line.events import KIND_IMAGE, KIND_TEXT
from kumao_bot.line.messages import build_reply, text_message
from kumao_bot.log_context import set_log_context
from kumao_bot.text.sanitizer import extract_latex_block, sanitize_text, strip_latex_block
from kumao_bot.tutor.prompts import (
    BUSY_TEXT,
    EMPTY_ANSWER_TEXT,
    IMAGE_UNREADABLE_TEXT,
    UNSUPPORTED_TEXT,
)

if TYPE_CHECKING:
    from linebot.v3.messaging import Message

    from kumao_bot.board.renderer import BoardRenderer
    from kumao_bot.line.events import IncomingMessage
    from kumao_bot.line.messenger import LineMessenger
    from kumao_bot.tutor.llm import TutorClient

logger = logging.getLogger(__name__)

BOARDS_URL_PATH = "/public/boards"


def board_url(base_url: str, board_id: str) -> str:
    return f"{base_url.rstrip('/')}{BOARDS_URL_PATH}/{board_id}.png"


class TutorHandler:
    """Answers text and image questions and replies through LINE.

    Every message gets exactly one reply attempt: the answer, or a short
    fallback text when the model or the content download fails.
    """

    def __init__(
        self,
        messenger: LineMessenger,
        tutor: TutorClient,
        renderer: BoardRenderer | None = None,
    ) -> None:
        self._messenger = messenger
        self._tutor = tutor
        self._renderer = renderer

    async def handle_events(self, messages: Sequence[IncomingMessage], base_url: str) -> None:
        """Handle the messages of one webhook delivery, in order."""
        for message in messages:
            try:
                await self.handle_message(message, base_url)
            except Exception:
                logger.exception("Unhandled error for event=%s", message.event_id)

    async def handle_message(self, message: IncomingMessage, base_url: str) -> None:
        set_log_context(operation="msg", user_id=message.user_id, event_id=message.event_id)
        logger.info("Handling %s message id=%s", message.kind, message.message_id)

        if message.kind == KIND_TEXT:
            await self.handle_text(message.reply_token, message.text, base_url)
        elif message.kind == KIND_IMAGE:
            await self.handle_image(message.reply_token, message.message_id, base_url)
        else:
            await self._reply(message.reply_token, [text_message(UNSUPPORTED_TEXT)])

    async def handle_text(self, reply_token: str, text: str, base_url: str) -> None:
        try:
            content = await self._tutor.ask_text(text)
        except TutorError:
            logger.exception("Text answer failed")
            await self._reply(reply_token, [text_message(BUSY_TEXT)])
            return
        await self.handle_content(reply_token, content, base_url)

    async def handle_image(self, reply_token: str, message_id: str, base_url: str) -> None:
        try:
            image = await self._messenger.fetch_content(message_id)
            content = await self._tutor.ask_image(image)
        except (LineApiError, TutorError):
            logger.exception("Image answer failed message=%s", message_id)
            await self._reply(reply_token, [text_message(IMAGE_UNREADABLE_TEXT)])
            return
        await self.handle_content(reply_token, content, base_url)

    async def handle_content(self, reply_token: str, content: str, base_url: str) -> None:
        """Reply with the sanitized answer and, when present, its formula board."""
        latex = extract_latex_block(content)
        text = sanitize_text(strip_latex_block(content))

        image_url: str | None = None
        if latex:
            image_url = await self._render(latex, base_url)

        messages = build_reply(text, image_url)
        if not messages:
            messages = [text_message(EMPTY_ANSWER_TEXT)]
        await self._reply(reply_token, messages)

    async def _render(self, latex: str, base_url: str) -> str | None:
        if self._renderer is None:
            return None
        try:
            board_id = await self._renderer.render_board(latex)
        except BoardRenderError as exc:
            logger.warning("Board render failed, replying with text only: %s", exc)
            return None
        except Exception:
            logger.exception("Unexpected board render error, replying with text only")
            return None
        return board_url(base_url, board_id)

    async def _reply(self, reply_token: str, messages: list[Message]) -> None:
        try:
            await self._messenger.reply(reply_token, messages)
        except LineApiError:
            logger.exception("LINE reply failed")
