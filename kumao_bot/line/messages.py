"""Reply message construction within LINE's per-reply limits."""

from __future__ import annotations

from linebot.v3.messaging import ImageMessage, Message, TextMessage

from kumao_bot.text.sanitizer import LINE_TEXT_LIMIT, split_text

MAX_REPLY_MESSAGES = 5
"""LINE accepts at most five message objects per reply."""


def text_message(text: str) -> TextMessage:
    return TextMessage(text=text)


def image_message(url: str) -> ImageMessage:
    return ImageMessage(original_content_url=url, preview_image_url=url)


def build_reply(text: str, image_url: str | None = None) -> list[Message]:
    """Build the reply for an answer: text chunks, then the optional board image.

    Text longer than one message is split; when the split would exceed the
    reply limit the tail is dropped and the last kept chunk is marked with an
    ellipsis.
    """
    messages: list[Message] = []
    if text:
        text_slots = MAX_REPLY_MESSAGES - (1 if image_url else 0)
        chunks = split_text(text, LINE_TEXT_LIMIT)
        if len(chunks) > text_slots:
            chunks = chunks[:text_slots]
            chunks[-1] = chunks[-1][: LINE_TEXT_LIMIT - 1] + "…"
        messages.extend(text_message(chunk) for chunk in chunks)
    if image_url:
        messages.append(image_message(image_url))
    return messages
