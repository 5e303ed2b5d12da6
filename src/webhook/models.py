"""Outcome models for inbound webhook handling."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class WebhookAction(str, Enum):
    COMMAND_PROCESSED = "command_processed"
    UNREGISTERED_REPLIED = "unregistered_replied"
    IGNORED_WEBHOOK_TYPE = "ignored_webhook_type"
    IGNORED_UNSUPPORTED = "ignored_unsupported"
    IGNORED_WRONG_NUMBER = "ignored_wrong_number"


@dataclass(frozen=True)
class WebhookOutcome:
    """What the handler did with one inbound event."""

    handled: bool
    action: WebhookAction

    def to_dict(self) -> dict[str, object]:
        return {"handled": self.handled, "action": self.action.value}
