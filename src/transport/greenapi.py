"""Outbound WhatsApp messaging through the Green API gateway."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from src.commands.replies import Button

logger = logging.getLogger(__name__)

_GREEN_API_BASE = "https://api.green-api.com"


class TransportError(Exception):
    """Raised when an outbound message cannot be delivered to the gateway."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class SendReceipt:
    id_message: str


@dataclass(frozen=True)
class ButtonsPayload:
    chat_id: str
    body: str
    buttons: tuple[Button, ...]
    header: str | None = None
    footer: str | None = None


class MessageSender(Protocol):
    async def send_text(self, chat_id: str, text: str) -> SendReceipt: ...

    async def send_buttons(self, payload: ButtonsPayload) -> SendReceipt: ...


class GreenApiSender:
    """Sends text and button messages via a Green API instance."""

    def __init__(
        self,
        instance_id: str,
        token: str,
        base_url: str = _GREEN_API_BASE,
    ) -> None:
        self._instance_id = instance_id
        self._token = token
        self._base_url = base_url.rstrip("/")

    def _url(self, method: str) -> str:
        return f"{self._base_url}/waInstance{self._instance_id}/{method}/{self._token}"

    async def send_text(self, chat_id: str, text: str) -> SendReceipt:
        logger.info("greenapi_send_start chat_id=%s", chat_id)
        receipt = await self._post(
            self._url("sendMessage"), {"chatId": chat_id, "message": text}, chat_id,
        )
        logger.info(
            "greenapi_send_success chat_id=%s id_message=%s", chat_id, receipt.id_message,
        )
        return receipt

    async def send_buttons(self, payload: ButtonsPayload) -> SendReceipt:
        logger.info(
            "greenapi_send_buttons_start chat_id=%s button_count=%d",
            payload.chat_id, len(payload.buttons),
        )
        body: dict[str, Any] = {
            "chatId": payload.chat_id,
            "body": payload.body,
            "buttons": [
                {"buttonId": b.id, "buttonText": b.label} for b in payload.buttons
            ],
        }
        if payload.header:
            body["header"] = payload.header
        if payload.footer:
            body["footer"] = payload.footer

        receipt = await self._post(
            self._url("sendInteractiveButtonsReply"), body, payload.chat_id,
        )
        logger.info(
            "greenapi_send_buttons_success chat_id=%s id_message=%s",
            payload.chat_id, receipt.id_message,
        )
        return receipt

    async def _post(
        self, url: str, body: dict[str, Any], chat_id: str,
    ) -> SendReceipt:
        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(url, json=body)
        except httpx.TransportError as exc:
            logger.error("greenapi_network_error chat_id=%s error=%s", chat_id, exc)
            raise TransportError("Network error sending message") from exc

        if resp.status_code >= 400:
            logger.error(
                "greenapi_api_error chat_id=%s status=%d body=%s",
                chat_id, resp.status_code, resp.text,
            )
            raise TransportError(
                f"Green API error: {resp.status_code}", resp.status_code,
            )

        try:
            data = resp.json()
        except json.JSONDecodeError:
            data = None
        if not isinstance(data, dict):
            data = {}
        return SendReceipt(id_message=str(data.get("idMessage", "")))


@dataclass
class MockSender:
    """Logs outbound messages instead of sending them (MOCK_MODE)."""

    sent: list[tuple[str, object]] = field(default_factory=list)
    _counter: int = field(default=0, init=False, repr=False)

    async def send_text(self, chat_id: str, text: str) -> SendReceipt:
        self._counter += 1
        receipt = SendReceipt(id_message=f"mock-msg-{self._counter}")
        self.sent.append((chat_id, text))
        logger.info(
            "mock_send chat_id=%s id_message=%s text=%r", chat_id, receipt.id_message, text,
        )
        return receipt

    async def send_buttons(self, payload: ButtonsPayload) -> SendReceipt:
        self._counter += 1
        receipt = SendReceipt(id_message=f"mock-btn-{self._counter}")
        self.sent.append((payload.chat_id, payload))
        logger.info(
            "mock_send_buttons chat_id=%s id_message=%s buttons=%s",
            payload.chat_id, receipt.id_message, [b.id for b in payload.buttons],
        )
        return receipt
