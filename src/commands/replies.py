"""Outbound reply variants produced by command handling."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Button:
    id: str
    label: str


@dataclass(frozen=True)
class TextReply:
    """Plain text message."""

    text: str


@dataclass(frozen=True)
class ButtonsReply:
    """Interactive message with quick-reply buttons."""

    body: str
    buttons: tuple[Button, ...]
    header: str | None = None
    footer: str | None = None


Reply = TextReply | ButtonsReply
