"""Tests for the Green API outbound sender."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.commands.replies import Button
from src.transport.greenapi import (
    ButtonsPayload,
    GreenApiSender,
    MockSender,
    TransportError,
)
from tests.conftest import CHAT_ID


def _make_sender(**kwargs: Any) -> GreenApiSender:
    defaults: dict[str, Any] = {"instance_id": "1101", "token": "green-token"}
    defaults.update(kwargs)
    return GreenApiSender(**defaults)


def _mock_async_client(mock_client_cls: MagicMock, response: Any) -> AsyncMock:
    mock_client = AsyncMock()
    if isinstance(response, Exception):
        mock_client.post.side_effect = response
    else:
        mock_client.post.return_value = response
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


class TestGreenApiSender:
    @pytest.mark.asyncio
    async def test_send_text(self) -> None:
        with patch("src.transport.greenapi.httpx.AsyncClient") as mock_client_cls:
            mock_client = _mock_async_client(
                mock_client_cls, httpx.Response(200, json={"idMessage": "ABC"}),
            )
            receipt = await _make_sender().send_text(CHAT_ID, "hello")

        assert receipt.id_message == "ABC"
        mock_client_cls.assert_called_once_with(verify=True)
        args, kwargs = mock_client.post.call_args
        assert args[0] == "https://api.green-api.com/waInstance1101/sendMessage/green-token"
        assert kwargs["json"] == {"chatId": CHAT_ID, "message": "hello"}

    @pytest.mark.asyncio
    async def test_send_buttons(self) -> None:
        payload = ButtonsPayload(
            chat_id=CHAT_ID,
            body="Pick one",
            buttons=(Button("list", "List products"), Button("add", "Add product")),
            footer="Shop Inventory Bot",
        )
        with patch("src.transport.greenapi.httpx.AsyncClient") as mock_client_cls:
            mock_client = _mock_async_client(
                mock_client_cls, httpx.Response(200, json={"idMessage": "BTN"}),
            )
            receipt = await _make_sender().send_buttons(payload)

        assert receipt.id_message == "BTN"
        args, kwargs = mock_client.post.call_args
        assert args[0].endswith("/sendInteractiveButtonsReply/green-token")
        assert kwargs["json"] == {
            "chatId": CHAT_ID,
            "body": "Pick one",
            "buttons": [
                {"buttonId": "list", "buttonText": "List products"},
                {"buttonId": "add", "buttonText": "Add product"},
            ],
            "footer": "Shop Inventory Bot",
        }

    @pytest.mark.asyncio
    async def test_custom_base_url(self) -> None:
        with patch("src.transport.greenapi.httpx.AsyncClient") as mock_client_cls:
            mock_client = _mock_async_client(
                mock_client_cls, httpx.Response(200, json={"idMessage": "X"}),
            )
            await _make_sender(base_url="https://gw.example/").send_text(CHAT_ID, "hi")
        assert mock_client.post.call_args[0][0].startswith("https://gw.example/waInstance1101/")

    @pytest.mark.asyncio
    async def test_api_error_raises(self) -> None:
        with patch("src.transport.greenapi.httpx.AsyncClient") as mock_client_cls:
            _mock_async_client(mock_client_cls, httpx.Response(466, text="quota"))
            with pytest.raises(TransportError) as exc_info:
                await _make_sender().send_text(CHAT_ID, "hello")
        assert exc_info.value.status_code == 466
        assert str(exc_info.value) == "Green API error: 466"

    @pytest.mark.asyncio
    async def test_network_error_raises(self) -> None:
        with patch("src.transport.greenapi.httpx.AsyncClient") as mock_client_cls:
            _mock_async_client(mock_client_cls, httpx.ConnectError("down"))
            with pytest.raises(TransportError, match="Network error sending message"):
                await _make_sender().send_text(CHAT_ID, "hello")

    @pytest.mark.asyncio
    async def test_non_json_success_body(self) -> None:
        with patch("src.transport.greenapi.httpx.AsyncClient") as mock_client_cls:
            _mock_async_client(mock_client_cls, httpx.Response(200, content=b"ok"))
            receipt = await _make_sender().send_text(CHAT_ID, "hello")
        assert receipt.id_message == ""


class TestMockSender:
    @pytest.mark.asyncio
    async def test_records_messages(self) -> None:
        sender = MockSender()
        first = await sender.send_text(CHAT_ID, "one")
        payload = ButtonsPayload(chat_id=CHAT_ID, body="b", buttons=(Button("x", "X"),))
        second = await sender.send_buttons(payload)

        assert first.id_message == "mock-msg-1"
        assert second.id_message == "mock-btn-2"
        assert sender.sent == [(CHAT_ID, "one"), (CHAT_ID, payload)]

    def test_counter_not_a_constructor_argument(self) -> None:
        with pytest.raises(TypeError):
            MockSender(_counter=5)  # type: ignore[call-arg]
        assert "_counter" not in repr(MockSender())
