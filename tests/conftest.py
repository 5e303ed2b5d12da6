"""Shared test fixtures for the shop inventory router."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from src.activity.logger import ActivityLogger
from src.catalog.client import CatalogApiError
from src.config import Settings
from src.models import CreatedProduct, CreateProductInput, Product
from src.session.store import SessionStore
from src.transport.greenapi import MockSender

PHONE = "972501234567"
CHAT_ID = f"{PHONE}@c.us"
OTHER_CHAT_ID = "15550001111@c.us"


class FakeCatalog:
    """In-memory catalog API recording calls."""

    def __init__(
        self,
        products: list[Product] | None = None,
        error: CatalogApiError | None = None,
    ) -> None:
        self.products = list(products or [])
        self.error = error
        self.list_calls = 0
        self.created: list[CreateProductInput] = []

    async def list_products(self) -> list[Product]:
        self.list_calls += 1
        if self.error:
            raise self.error
        return list(self.products)

    async def create_product(self, data: CreateProductInput) -> CreatedProduct:
        self.created.append(data)
        if self.error:
            raise self.error
        return CreatedProduct(
            id=100 + len(self.created),
            name=data.name,
            sku="",
            price=data.regular_price,
            stock_quantity=data.stock_quantity,
            status="publish",
        )


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore(timeout_seconds=300)


@pytest.fixture
def sender() -> MockSender:
    return MockSender()


@pytest.fixture
def mock_activity_logger() -> MagicMock:
    return MagicMock(spec=ActivityLogger)


# --- Factory functions for test data ---


def make_settings(**kwargs: Any) -> Settings:
    """Factory for Settings with sensible defaults."""
    defaults: dict[str, Any] = {
        "phone_number": PHONE,
        "shop_url": "https://test-shop.example",
        "auth_token": "test-token",
        "green_api_instance_id": "1101",
        "green_api_token": "green-token",
        "db_path": ":memory:",
        "mock_mode": True,
        "session_sweep_seconds": 0,
    }
    defaults.update(kwargs)
    return Settings(**defaults)


def make_product(**kwargs: Any) -> Product:
    """Factory for Product with sensible defaults."""
    defaults: dict[str, Any] = {
        "id": 1,
        "name": "Widget",
        "sku": "WID-1",
        "price": "29.99",
        "regular_price": "29.99",
        "sale_price": "",
        "stock_quantity": 10,
        "stock_status": "instock",
        "status": "publish",
        "categories": [],
    }
    defaults.update(kwargs)
    return Product(**defaults)


def make_text_event(text: str, chat_id: str = CHAT_ID, **kwargs: Any) -> dict[str, Any]:
    """Inbound textMessage event."""
    event: dict[str, Any] = {
        "typeWebhook": "incomingMessageReceived",
        "instanceData": {"idInstance": 123, "wid": "bot@c.us"},
        "senderData": {"chatId": chat_id, "sender": chat_id},
        "messageData": {
            "typeMessage": "textMessage",
            "textMessageData": {"textMessage": text},
        },
        "idMessage": "MSG-1",
    }
    event.update(kwargs)
    return event


def make_extended_text_event(text: str, chat_id: str = CHAT_ID) -> dict[str, Any]:
    event = make_text_event(text, chat_id)
    event["messageData"] = {
        "typeMessage": "extendedTextMessage",
        "extendedTextMessageData": {"text": text},
    }
    return event


def make_button_event(
    selected_id: str,
    chat_id: str = CHAT_ID,
    type_message: str = "templateButtonsReplyMessage",
) -> dict[str, Any]:
    event = make_text_event("", chat_id)
    event["messageData"] = {
        "typeMessage": type_message,
        "templateButtonReplyMessage": {
            "stanzaId": "STANZA-123",
            "selectedIndex": 0,
            "selectedId": selected_id,
            "selectedDisplayText": f"Button {selected_id}",
        },
    }
    return event
