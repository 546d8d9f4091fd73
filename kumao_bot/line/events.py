"""Conversion of LINE SDK webhook events into handler input."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from linebot.v3.webhooks import ImageMessageContent, MessageEvent, TextMessageContent

logger = logging.getLogger(__name__)

KIND_TEXT = "text"
KIND_IMAGE = "image"


@dataclass(frozen=True)
class IncomingMessage:
    """A user message that can be answered with a reply token."""

    event_id: str
    reply_token: str
    kind: str  # "text" | "image" | any other LINE message type
    message_id: str
    text: str = ""
    user_id: str | None = None
    redelivery: bool = False


def _message_kind(message: Any) -> str:
    if isinstance(message, TextMessageContent):
        return KIND_TEXT
    if isinstance(message, ImageMessageContent):
        return KIND_IMAGE
    return str(getattr(message, "type", "") or "unknown")


def to_incoming(event: Any) -> IncomingMessage | None:
    """Return an `IncomingMessage` for *event*, or None when it needs no reply.

    Only message events that carry a reply token are kept; follows, joins,
    postbacks and the empty verification delivery are dropped.
    """
    if not isinstance(event, MessageEvent):
        logger.debug("Skipping event type=%s", getattr(event, "type", "?"))
        return None
    if not event.reply_token:
        logger.debug("Skipping message event without reply token")
        return None

    message = event.message
    kind = _message_kind(message)
    delivery = getattr(event, "delivery_context", None)
    return IncomingMessage(
        event_id=event.webhook_event_id,
        reply_token=event.reply_token,
        kind=kind,
        message_id=str(getattr(message, "id", "")),
        text=message.text if kind == KIND_TEXT else "",
        user_id=getattr(event.source, "user_id", None),
        redelivery=bool(getattr(delivery, "is_redelivery", False)),
    )


def collect_messages(events: Iterable[Any]) -> list[IncomingMessage]:
    """Convert *events* in order, dropping those that need no reply."""
    messages: list[IncomingMessage] = []
    for event in events:
        incoming = to_incoming(event)
        if incoming is not None:
            messages.append(incoming)
    return messages
