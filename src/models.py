"""Shared Pydantic data models for the shop inventory router."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class ActivityEventType(str, Enum):
    WEBHOOK_REJECTED = "webhook_rejected"
    WEBHOOK_IGNORED = "webhook_ignored"
    UNREGISTERED_SENDER = "unregistered_sender"
    COMMAND_PROCESSED = "command_processed"
    PRODUCT_CREATED = "product_created"
    PRODUCT_CREATE_FAILED = "product_create_failed"


# --- Catalog Models ---


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    sku: str = ""
    price: str
    regular_price: str = ""
    sale_price: str = ""
    stock_quantity: int | None = None
    stock_status: str = ""
    status: str = ""
    categories: list[str] = Field(default_factory=list)


class CreateProductInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    regular_price: str  # decimal string, two places
    stock_quantity: int = Field(ge=0)
    description: str | None = None
    sku: str | None = None


class CreatedProduct(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    sku: str = ""
    price: str
    stock_quantity: int | None = None
    status: str = ""


# --- Activity Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class ActivityEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: ActivityEventType
    chat_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "ignored"
    details: dict[str, object] | None = None
