"""Add-product wizard: name -> price -> stock -> create.

`transition` is the pure step function; `AddProductFlow` applies its result
to the session store and performs the catalog call on submit.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from src.catalog.client import CatalogApiError
from src.commands import formatter
from src.models import ActivityEvent, ActivityEventType, CreateProductInput
from src.session.store import AddProductData, AddProductStep, Session

if TYPE_CHECKING:
    from src.activity.logger import ActivityLogger
    from src.catalog.client import CatalogApi
    from src.session.store import SessionStore

logger = logging.getLogger(__name__)

CANCEL_WORDS = frozenset({"cancel", "stop"})

_CENT = Decimal("0.01")
MAX_STOCK = 2_147_483_647


@dataclass(frozen=True)
class Transition:
    """Outcome of feeding one input to the wizard.

    next_step None ends the flow (session is deleted). When `changed` is
    False the session is left untouched, expiry included.
    """

    reply: str
    next_step: AddProductStep | None
    data: AddProductData
    changed: bool = False
    submit: CreateProductInput | None = None


def parse_price(text: str) -> str | None:
    """Positive decimal rounded to two places, or None if invalid."""
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    try:
        value = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
    if value <= 0:
        return None
    return str(value)


def parse_stock(text: str) -> int | None:
    """Whole number in 0..MAX_STOCK, or None if invalid. "3.0" counts as 3."""
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0 or value > MAX_STOCK:
        return None
    if value != value.to_integral_value():
        return None
    return int(value)


def transition(step: AddProductStep, data: AddProductData, text: str) -> Transition:
    if text.strip().lower() in CANCEL_WORDS:
        return Transition(formatter.format_cancelled(), None, data)

    if step == AddProductStep.NAME:
        name = text.strip()
        if not name:
            return Transition(formatter.format_ask_name(), step, data)
        return Transition(
            formatter.format_ask_price(),
            AddProductStep.PRICE,
            dataclasses.replace(data, name=name),
            changed=True,
        )

    if step == AddProductStep.PRICE:
        price = parse_price(text)
        if price is None:
            return Transition(formatter.format_invalid_price(), step, data)
        return Transition(
            formatter.format_ask_stock(),
            AddProductStep.STOCK,
            dataclasses.replace(data, price=price),
            changed=True,
        )

    if step == AddProductStep.STOCK:
        stock = parse_stock(text)
        if stock is None:
            return Transition(formatter.format_invalid_stock(), step, data)
        final = dataclasses.replace(data, stock=stock)
        return Transition(
            "",
            None,
            final,
            changed=True,
            submit=CreateProductInput(
                name=final.name or "",
                regular_price=final.price or "",
                stock_quantity=stock,
            ),
        )

    # Unknown step: end the flow.
    return Transition(formatter.format_cancelled(), None, data)


class AddProductFlow:
    """Drives the wizard for one chat against the session store."""

    def __init__(
        self,
        catalog: CatalogApi,
        sessions: SessionStore,
        activity_logger: ActivityLogger | None = None,
    ) -> None:
        self._catalog = catalog
        self._sessions = sessions
        self._activity = activity_logger

    def start(self, chat_id: str) -> str:
        session = self._sessions.create_session(chat_id)
        self._sessions.set(chat_id, session)
        logger.info("add_product_started chat_id=%s", chat_id)
        return formatter.format_ask_name()

    async def handle_step(self, chat_id: str, text: str, session: Session) -> str:
        result = transition(session.step, session.data, text)

        if result.next_step is None:
            self._sessions.delete(chat_id)
            if result.submit is None:
                logger.info(
                    "add_product_cancelled chat_id=%s step=%s", chat_id, session.step.value,
                )
                return result.reply
            return await self._submit(chat_id, result.submit)

        if result.changed:
            session.step = result.next_step
            session.data = result.data
            self._sessions.set(chat_id, session)
            logger.info("add_product_step chat_id=%s step=%s", chat_id, session.step.value)

        return result.reply

    async def _submit(self, chat_id: str, data: CreateProductInput) -> str:
        logger.info(
            "add_product_submitting chat_id=%s name=%s price=%s stock=%d",
            chat_id, data.name, data.regular_price, data.stock_quantity,
        )
        try:
            product = await self._catalog.create_product(data)
        except CatalogApiError as exc:
            logger.error(
                "add_product_error chat_id=%s code=%s error=%s", chat_id, exc.code.value, exc,
            )
            self._record(chat_id, ActivityEventType.PRODUCT_CREATE_FAILED, "failure", {
                "name": data.name,
                "code": exc.code.value,
                "status_code": exc.status_code,
            })
            return formatter.format_product_create_error(str(exc))

        logger.info("add_product_success chat_id=%s product_id=%d", chat_id, product.id)
        self._record(chat_id, ActivityEventType.PRODUCT_CREATED, "success", {
            "product_id": product.id,
            "name": product.name,
        })
        return formatter.format_product_created(product)

    def _record(
        self,
        chat_id: str,
        event_type: ActivityEventType,
        result: str,
        details: dict[str, object],
    ) -> None:
        if self._activity:
            self._activity.log(ActivityEvent(
                event_type=event_type,
                chat_id=chat_id,
                action="create_product",
                result=result,
                details=details,
            ))
