"""Webhook system: HTTP ingress for LINE callbacks."""

from kumao_bot.webhook.auth import SIGNATURE_HEADER, RateLimiter
from kumao_bot.webhook.dedup import DedupeCache
from kumao_bot.webhook.server import WebhookServer, build_public_base_url

__all__ = [
    "SIGNATURE_HEADER",
    "DedupeCache",
    "RateLimiter",
    "WebhookServer",
    "build_public_base_url",
]
