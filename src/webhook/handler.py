"""Inbound webhook handling.

Pipeline stages:
1. Validate payload (raises WebhookValidationError)
2. Webhook type filter
3. Registered-number check (courtesy reply to anyone else)
4. Content extraction (text, extended text, button reply)
5. Command routing
6. Outbound send of the reply
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.commands import formatter
from src.commands.replies import ButtonsReply, Reply, TextReply
from src.models import ActivityEvent, ActivityEventType
from src.transport.greenapi import ButtonsPayload
from src.webhook.models import WebhookAction, WebhookOutcome
from src.webhook.payload import (
    INCOMING_MESSAGE_WEBHOOK,
    WebhookValidationError,
    extract_message_content,
    parse_payload,
)

if TYPE_CHECKING:
    from src.activity.logger import ActivityLogger
    from src.commands.router import CommandRouter
    from src.transport.greenapi import MessageSender, SendReceipt

logger = logging.getLogger(__name__)


class WebhookHandler:
    """Entry point for one inbound webhook event.

    Sends at most one outbound message per event. Transport errors are not
    caught here; they propagate to the caller.
    """

    def __init__(
        self,
        router: CommandRouter,
        sender: MessageSender,
        registered_chat_id: str,
        reply_to_unregistered: bool = True,
        activity_logger: ActivityLogger | None = None,
    ) -> None:
        self._router = router
        self._sender = sender
        self._registered_chat_id = registered_chat_id
        self._reply_to_unregistered = reply_to_unregistered
        self._activity = activity_logger

    async def handle(self, body: object) -> WebhookOutcome:
        try:
            payload = parse_payload(body)
        except WebhookValidationError as exc:
            self._record(None, ActivityEventType.WEBHOOK_REJECTED, "validate", "failure", {
                "field": exc.field,
            })
            raise

        chat_id = payload.sender_data.chat_id
        logger.info(
            "webhook_received chat_id=%s message_id=%s type_webhook=%s type_message=%s",
            chat_id,
            payload.id_message,
            payload.type_webhook,
            payload.message_data.type_message,
        )

        if payload.type_webhook != INCOMING_MESSAGE_WEBHOOK:
            logger.warning("ignored_webhook_type type_webhook=%s", payload.type_webhook)
            return self._ignored(chat_id, WebhookAction.IGNORED_WEBHOOK_TYPE)

        if chat_id != self._registered_chat_id:
            return await self._handle_unregistered(chat_id)

        content = extract_message_content(payload)
        if content is None:
            logger.warning(
                "ignored_unsupported chat_id=%s type_message=%s",
                chat_id, payload.message_data.type_message,
            )
            return self._ignored(chat_id, WebhookAction.IGNORED_UNSUPPORTED)

        reply = await self._router.process(chat_id, content)
        receipt = await self.send_reply(chat_id, reply)

        logger.info(
            "command_processed chat_id=%s message_id=%s reply_id=%s",
            chat_id, payload.id_message, receipt.id_message,
        )
        self._record(chat_id, ActivityEventType.COMMAND_PROCESSED, "command", "success", {
            "message_id": payload.id_message,
            "reply": "buttons" if isinstance(reply, ButtonsReply) else "text",
        })
        return WebhookOutcome(handled=True, action=WebhookAction.COMMAND_PROCESSED)

    async def send_reply(self, chat_id: str, reply: Reply) -> SendReceipt:
        if isinstance(reply, TextReply):
            return await self._sender.send_text(chat_id, reply.text)
        if isinstance(reply, ButtonsReply):
            return await self._sender.send_buttons(ButtonsPayload(
                chat_id=chat_id,
                body=reply.body,
                buttons=reply.buttons,
                header=reply.header,
                footer=reply.footer,
            ))
        raise TypeError(f"Unsupported reply type: {type(reply).__name__}")

    async def _handle_unregistered(self, chat_id: str) -> WebhookOutcome:
        if not self._reply_to_unregistered:
            logger.warning(
                "ignored_wrong_number chat_id=%s expected=%s",
                chat_id, self._registered_chat_id,
            )
            return self._ignored(chat_id, WebhookAction.IGNORED_WRONG_NUMBER)

        logger.warning("unregistered_sender chat_id=%s", chat_id)
        await self._sender.send_text(chat_id, formatter.format_unregistered_sender())
        self._record(chat_id, ActivityEventType.UNREGISTERED_SENDER, "courtesy_reply", "success")
        return WebhookOutcome(handled=True, action=WebhookAction.UNREGISTERED_REPLIED)

    def _ignored(self, chat_id: str, action: WebhookAction) -> WebhookOutcome:
        self._record(chat_id, ActivityEventType.WEBHOOK_IGNORED, action.value, "ignored")
        return WebhookOutcome(handled=False, action=action)

    def _record(
        self,
        chat_id: str | None,
        event_type: ActivityEventType,
        action: str,
        result: str,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._activity:
            self._activity.log(ActivityEvent(
                event_type=event_type,
                chat_id=chat_id,
                action=action,
                result=result,
                details=details,
            ))
