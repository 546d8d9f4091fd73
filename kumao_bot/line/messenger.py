"""LINE Messaging API client: replies and message content downloads."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import aiohttp
from linebot.v3.messaging import (
    AsyncApiClient,
    AsyncMessagingApi,
    AsyncMessagingApiBlob,
    Configuration,
    Message,
    ReplyMessageRequest,
)
from linebot.v3.messaging.exceptions import ApiException

from kumao_bot.errors import LineApiError

logger = logging.getLogger(__name__)

# Transport failures raised by the SDK's aiohttp session.
_TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class LineMessenger:
    """Thin async wrapper over the SDK's messaging and blob APIs.

    The SDK client owns an aiohttp session, so it is created lazily on first
    use from inside the running event loop and released by `close()`.
    """

    def __init__(self, channel_access_token: str) -> None:
        self._configuration = Configuration(access_token=channel_access_token)
        self._client: AsyncApiClient | None = None
        self._api: AsyncMessagingApi | None = None
        self._blob: AsyncMessagingApiBlob | None = None

    def _ensure_client(self) -> AsyncApiClient:
        if self._client is None:
            self._client = AsyncApiClient(self._configuration)
            self._api = AsyncMessagingApi(self._client)
            self._blob = AsyncMessagingApiBlob(self._client)
        return self._client

    async def reply(self, reply_token: str, messages: Sequence[Message]) -> None:
        """Send *messages* as the reply to the event owning *reply_token*."""
        self._ensure_client()
        assert self._api is not None
        request = ReplyMessageRequest(reply_token=reply_token, messages=list(messages))
        try:
            await self._api.reply_message(request)
        except ApiException as exc:
            msg = f"reply failed: status={exc.status} body={exc.body}"
            raise LineApiError(msg) from exc
        except _TRANSPORT_ERRORS as exc:
            msg = f"reply failed: {exc!r}"
            raise LineApiError(msg) from exc
        logger.debug("Replied with %d message(s)", len(messages))

    async def fetch_content(self, message_id: str) -> bytes:
        """Download the binary content of an image (or other media) message."""
        self._ensure_client()
        assert self._blob is not None
        try:
            data = await self._blob.get_message_content(message_id)
        except ApiException as exc:
            msg = f"content download failed for message={message_id}: status={exc.status}"
            raise LineApiError(msg) from exc
        except _TRANSPORT_ERRORS as exc:
            msg = f"content download failed for message={message_id}: {exc!r}"
            raise LineApiError(msg) from exc
        logger.debug("Fetched content message=%s bytes=%d", message_id, len(data))
        return bytes(data)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._api = None
            self._blob = None
