"""Tests for the LINE Messaging API wrapper."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest
from linebot.v3.messaging import ReplyMessageRequest, TextMessage
from linebot.v3.messaging.exceptions import ApiException

from kumao_bot.errors import LineApiError
from kumao_bot.line.messenger import LineMessenger

_MODULE = "kumao_bot.line.messenger"


@pytest.fixture
def sdk() -> MagicMock:
    """Patch the SDK client classes; yields a namespace of the instances."""
    api = MagicMock()
    api.reply_message = AsyncMock()
    blob = MagicMock()
    blob.get_message_content = AsyncMock(return_value=bytearray(b"\xff\xd8jpeg"))
    client = MagicMock()
    client.close = AsyncMock()
    with (
        patch(f"{_MODULE}.AsyncApiClient", return_value=client) as client_cls,
        patch(f"{_MODULE}.AsyncMessagingApi", return_value=api),
        patch(f"{_MODULE}.AsyncMessagingApiBlob", return_value=blob),
    ):
        yield MagicMock(api=api, blob=blob, client=client, client_cls=client_cls)


async def test_reply_sends_request(sdk: MagicMock) -> None:
    messenger = LineMessenger("token")
    await messenger.reply("reply-tok", [TextMessage(text="hi")])

    sdk.api.reply_message.assert_awaited_once()
    request = sdk.api.reply_message.await_args.args[0]
    assert isinstance(request, ReplyMessageRequest)
    assert request.reply_token == "reply-tok"
    assert request.messages[0].text == "hi"


async def test_client_created_once(sdk: MagicMock) -> None:
    messenger = LineMessenger("token")
    await messenger.reply("a", [TextMessage(text="1")])
    await messenger.fetch_content("m1")
    assert sdk.client_cls.call_count == 1


async def test_reply_api_error_wrapped(sdk: MagicMock) -> None:
    sdk.api.reply_message.side_effect = ApiException(status=400, reason="Bad Request")
    messenger = LineMessenger("token")
    with pytest.raises(LineApiError, match="status=400"):
        await messenger.reply("tok", [TextMessage(text="hi")])


async def test_fetch_content_returns_bytes(sdk: MagicMock) -> None:
    messenger = LineMessenger("token")
    data = await messenger.fetch_content("msg-1")
    assert data == b"\xff\xd8jpeg"
    assert isinstance(data, bytes)
    sdk.blob.get_message_content.assert_awaited_once_with("msg-1")


async def test_fetch_content_error_wrapped(sdk: MagicMock) -> None:
    sdk.blob.get_message_content.side_effect = ApiException(status=404, reason="Not Found")
    messenger = LineMessenger("token")
    with pytest.raises(LineApiError, match="msg-9"):
        await messenger.fetch_content("msg-9")


async def test_close_releases_client(sdk: MagicMock) -> None:
    messenger = LineMessenger("token")
    await messenger.fetch_content("m")
    await messenger.close()
    sdk.client.close.assert_awaited_once()
    await messenger.close()
    sdk.client.close.assert_awaited_once()


async def test_close_without_use_is_noop(sdk: MagicMock) -> None:
    await LineMessenger("token").close()
    sdk.client.close.assert_not_awaited()


async def test_reply_transport_error_wrapped(sdk: MagicMock) -> None:
    sdk.api.reply_message.side_effect = asyncio.TimeoutError()
    messenger = LineMessenger("token")
    with pytest.raises(LineApiError, match="reply failed"):
        await messenger.reply("tok", [TextMessage(text="hi")])


async def test_fetch_content_connection_error_wrapped(sdk: MagicMock) -> None:
    sdk.blob.get_message_content.side_effect = aiohttp.ClientConnectionError("reset")
    messenger = LineMessenger("token")
    with pytest.raises(LineApiError, match="msg-3"):
        await messenger.fetch_content("msg-3")
