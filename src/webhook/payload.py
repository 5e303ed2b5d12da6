"""Inbound Green API webhook payload validation and content extraction."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

INCOMING_MESSAGE_WEBHOOK = "incomingMessageReceived"

TEXT_MESSAGE = "textMessage"
EXTENDED_TEXT_MESSAGE = "extendedTextMessage"
BUTTON_REPLY_MESSAGES = frozenset({
    "templateButtonsReplyMessage",
    "templateButtonReplyMessage",
})


class WebhookValidationError(Exception):
    """Raised when an inbound payload does not match the webhook schema."""

    def __init__(self, message: str, field: str = "unknown") -> None:
        super().__init__(message)
        self.field = field


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class InstanceData(_Payload):
    id_instance: int = Field(alias="idInstance")
    wid: str


class SenderData(_Payload):
    chat_id: str = Field(alias="chatId")
    sender: str | None = None


class TextMessageData(_Payload):
    text_message: str = Field(alias="textMessage")


class ExtendedTextMessageData(_Payload):
    text: str


class ButtonReplyData(_Payload):
    selected_id: str = Field(alias="selectedId")
    selected_display_text: str | None = Field(default=None, alias="selectedDisplayText")
    stanza_id: str | None = Field(default=None, alias="stanzaId")
    selected_index: int | None = Field(default=None, alias="selectedIndex")


class MessageData(_Payload):
    type_message: str = Field(alias="typeMessage")
    text_message_data: TextMessageData | None = Field(
        default=None, alias="textMessageData",
    )
    extended_text_message_data: ExtendedTextMessageData | None = Field(
        default=None, alias="extendedTextMessageData",
    )
    template_button_reply_message: ButtonReplyData | None = Field(
        default=None, alias="templateButtonReplyMessage",
    )


class IncomingWebhook(_Payload):
    """Validated inbound webhook event."""

    type_webhook: str = Field(alias="typeWebhook")
    instance_data: InstanceData | None = Field(default=None, alias="instanceData")
    sender_data: SenderData = Field(alias="senderData")
    message_data: MessageData = Field(alias="messageData")
    id_message: str = Field(alias="idMessage")


def parse_payload(body: object) -> IncomingWebhook:
    """Validate a raw webhook body.

    Raises:
        WebhookValidationError: carrying the dotted path of the first error.
    """
    try:
        return IncomingWebhook.model_validate(body)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "unknown"
        logger.error("webhook_parse_error field=%s error=%s", field, first["msg"])
        raise WebhookValidationError(
            f"Invalid webhook payload: {field}: {first['msg']}", field,
        ) from exc


def extract_message_content(event: IncomingWebhook) -> str | None:
    """Return the text or selected button id, or None for unsupported messages."""
    message = event.message_data
    kind = message.type_message

    if kind == TEXT_MESSAGE:
        data = message.text_message_data
        return data.text_message if data and data.text_message else None

    if kind == EXTENDED_TEXT_MESSAGE:
        data_ext = message.extended_text_message_data
        return data_ext.text if data_ext and data_ext.text else None

    if kind in BUTTON_REPLY_MESSAGES:
        reply = message.template_button_reply_message
        return reply.selected_id if reply and reply.selected_id else None

    return None
