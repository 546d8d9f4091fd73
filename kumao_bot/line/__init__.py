"""LINE Messaging API interface."""

from kumao_bot.line.events import IncomingMessage, collect_messages, to_incoming
from kumao_bot.line.messages import MAX_REPLY_MESSAGES, build_reply
from kumao_bot.line.messenger import LineMessenger

__all__ = [
    "MAX_REPLY_MESSAGES",
    "IncomingMessage",
    "LineMessenger",
    "build_reply",
    "collect_messages",
    "to_incoming",
]
