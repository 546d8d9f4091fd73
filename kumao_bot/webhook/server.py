"""Webhook HTTP server: aiohttp ingress for LINE Messaging API callbacks."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from aiohttp import web
from linebot.v3.exceptions import InvalidSignatureError

from kumao_bot.line.events import IncomingMessage, collect_messages
from kumao_bot.log_context import set_log_context
from kumao_bot.webhook.auth import RateLimiter, signature_from_headers
from kumao_bot.webhook.dedup import DedupeCache

if TYPE_CHECKING:
    from kumao_bot.config import ServerConfig

logger = logging.getLogger(__name__)

MessageDispatchCallback = Callable[[Sequence[IncomingMessage], str], Awaitable[None]]


class EventParser(Protocol):
    """What the server needs from ``linebot.v3.WebhookParser``."""

    def parse(self, body: str, signature: str) -> list[Any]: ...


def build_public_base_url(request: web.Request, configured: str = "") -> str:
    """Base URL under which this process is reachable from LINE clients.

    A configured URL wins; otherwise the proxy headers (``X-Forwarded-Proto``,
    ``X-Forwarded-Host``) or the ``Host`` header are used, assuming https.
    """
    if configured:
        return configured.rstrip("/")
    proto = request.headers.get("X-Forwarded-Proto", "").split(",")[0].strip() or "https"
    host = request.headers.get("X-Forwarded-Host", "").split(",")[0].strip() or request.host
    return f"{proto}://{host}"


class WebhookServer:
    """HTTP server accepting LINE webhook deliveries.

    Routes:
    - ``POST /webhook``   -- LINE callback endpoint (signed deliveries).
    - ``GET  /healthz``   -- Liveness probe with process uptime.
    - ``GET  /public/*``  -- Static files, including rendered boards.
    """

    def __init__(
        self,
        config: ServerConfig,
        parser: EventParser,
        public_dir: Path,
    ) -> None:
        self._config = config
        self._parser = parser
        self._public_dir = public_dir
        self._rate_limiter = RateLimiter(config.rate_limit_per_minute)
        self._dedup = DedupeCache(ttl_seconds=config.dedup_ttl_seconds)
        self._dispatch: MessageDispatchCallback | None = None
        self._runner: web.AppRunner | None = None
        self._started_at = time.monotonic()
        self._background_tasks: set[asyncio.Task[None]] = set()

    def set_dispatch_handler(self, handler: MessageDispatchCallback) -> None:
        """Set the callback invoked with the messages of each accepted delivery."""
        self._dispatch = handler

    def build_app(self) -> web.Application:
        self._public_dir.mkdir(parents=True, exist_ok=True)
        app = web.Application(client_max_size=self._config.max_body_bytes)
        app.router.add_get("/healthz", self._handle_health)
        app.router.add_post("/webhook", self._handle_webhook)
        app.router.add_static("/public", self._public_dir)
        return app

    async def start(self) -> None:
        """Create the aiohttp app and start listening."""
        self._started_at = time.monotonic()
        self._runner = web.AppRunner(self.build_app(), access_log=None)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await site.start()
        logger.info("Webhook server listening on %s:%d", self._config.host, self._config.port)

    async def stop(self) -> None:
        """Stop accepting requests, then cancel in-flight deliveries."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        tasks = list(self._background_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Webhook server stopped")

    async def wait_idle(self) -> None:
        """Wait until every dispatched delivery has been handled."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    # -- Handlers --

    async def _handle_health(self, _request: web.Request) -> web.Response:
        uptime = round(time.monotonic() - self._started_at, 3)
        return web.json_response({"ok": True, "uptime": uptime})

    async def _handle_webhook(self, request: web.Request) -> web.Response:
        set_log_context(operation="wh")

        if not self._rate_limiter.check():
            logger.warning("Webhook rejected: rate limited")
            return web.json_response({"error": "rate_limited"}, status=429)

        signature = signature_from_headers(request.headers)
        if not signature:
            logger.warning("Webhook rejected: missing signature")
            return web.json_response({"error": "missing_signature"}, status=400)

        raw_body = await request.read()
        try:
            body = raw_body.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Webhook rejected: body is not UTF-8")
            return web.json_response({"error": "invalid_body"}, status=400)

        try:
            events = self._parser.parse(body, signature)
        except InvalidSignatureError:
            logger.warning("Webhook rejected: invalid signature")
            return web.json_response({"error": "invalid_signature"}, status=401)
        except (ValueError, KeyError, TypeError):
            logger.warning("Webhook rejected: malformed body", exc_info=True)
            return web.json_response({"error": "invalid_body"}, status=400)

        messages = [m for m in collect_messages(events) if not self._dedup.seen(m.event_id)]
        logger.info("Webhook accepted events=%d messages=%d", len(events), len(messages))

        if messages and self._dispatch:
            base_url = build_public_base_url(request, self._config.public_base_url)
            task = asyncio.create_task(self._safe_dispatch(messages, base_url))
            self._background_tasks.add(task)
            task.add_done_callback(self._background_tasks.discard)

        return web.json_response({"status": "ok", "accepted": len(messages)})

    async def _safe_dispatch(self, messages: list[IncomingMessage], base_url: str) -> None:
        """Run dispatch in a task with exception protection."""
        if self._dispatch is None:
            return
        try:
            await self._dispatch(messages, base_url)
        except Exception:
            logger.exception("Webhook dispatch error (%d message(s))", len(messages))
