"""Click CLI for running and poking the shop inventory router."""

from __future__ import annotations

import json
import time
import uuid

import click
import httpx

from src.config import ConfigError, load_settings
from src.webhook.payload import INCOMING_MESSAGE_WEBHOOK


def build_event(chat_id: str, text: str, button: bool = False) -> dict[str, object]:
    """Well-formed inbound event, as the Green API gateway would post it."""
    if button:
        message_data: dict[str, object] = {
            "typeMessage": "templateButtonsReplyMessage",
            "templateButtonReplyMessage": {
                "stanzaId": f"SIM-{uuid.uuid4().hex[:8]}",
                "selectedIndex": 0,
                "selectedId": text,
                "selectedDisplayText": text,
            },
        }
    else:
        message_data = {
            "typeMessage": "textMessage",
            "textMessageData": {"textMessage": text},
        }
    return {
        "typeWebhook": INCOMING_MESSAGE_WEBHOOK,
        "instanceData": {"idInstance": 0, "wid": "simulator@c.us"},
        "timestamp": int(time.time()),
        "senderData": {"chatId": chat_id, "sender": chat_id},
        "messageData": message_data,
        "idMessage": f"SIM-{uuid.uuid4().hex}",
    }


@click.group()
def cli() -> None:
    """Shop inventory WhatsApp router."""


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port (defaults to PORT).")
def serve(host: str, port: int | None) -> None:
    """Run the webhook server."""
    import uvicorn

    try:
        settings = load_settings()
    except ConfigError as exc:
        raise click.ClickException(f"{exc} (field: {exc.field})") from exc

    uvicorn.run(
        "src.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port or settings.port,
        log_level=settings.log_level,
    )


@cli.command("check-config")
def check_config() -> None:
    """Validate environment configuration and print it without secrets."""
    try:
        settings = load_settings()
    except ConfigError as exc:
        raise click.ClickException(f"{exc} (field: {exc.field})") from exc
    output = {**settings.public_dict(), "chat_id": settings.chat_id}
    click.echo(json.dumps(output, indent=2))


@cli.command()
@click.argument("text")
@click.option("--url", default="http://localhost:3000/webhook", help="Router webhook URL.")
@click.option("--chat-id", default=None, help="Sender chat id (defaults to the registered one).")
@click.option("--button", is_flag=True, help="Send TEXT as a button reply id.")
def simulate(text: str, url: str, chat_id: str | None, button: bool) -> None:
    """Post a simulated inbound message to a running router."""
    if chat_id is None:
        try:
            chat_id = load_settings().chat_id
        except ConfigError as exc:
            raise click.ClickException(
                f"{exc}; pass --chat-id or set PHONE_NUMBER",
            ) from exc

    try:
        resp = httpx.post(url, json=build_event(chat_id, text, button), timeout=30.0)
    except httpx.TransportError as exc:
        raise click.ClickException(f"Router unreachable at {url}: {exc}") from exc

    click.echo(f"HTTP {resp.status_code}")
    click.echo(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    cli()
