"""Command routing: active session first, then alias matching."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.commands import formatter
from src.commands.add_product import AddProductFlow
from src.commands.list_products import ListProductsFlow
from src.commands.replies import Reply, TextReply

if TYPE_CHECKING:
    from src.activity.logger import ActivityLogger
    from src.catalog.client import CatalogApi
    from src.session.store import SessionStore

logger = logging.getLogger(__name__)

LIST_ALIASES = frozenset({"1", "list", "products"})
ADD_ALIASES = frozenset({"2", "add", "new"})
MENU_ALIASES = frozenset({"3", "help", "menu"})


class CommandRouter:
    """Turns one chat input into a reply.

    A live session always wins, so alias words typed mid-wizard are wizard
    input. Button ids share the alias sets with typed words.
    """

    def __init__(
        self,
        catalog: CatalogApi,
        sessions: SessionStore,
        activity_logger: ActivityLogger | None = None,
    ) -> None:
        self._sessions = sessions
        self._list = ListProductsFlow(catalog)
        self._add = AddProductFlow(catalog, sessions, activity_logger)

    async def process(self, chat_id: str, text: str) -> Reply:
        async with self._sessions.lock(chat_id):
            return await self._route(chat_id, text)

    async def _route(self, chat_id: str, text: str) -> Reply:
        session = self._sessions.get(chat_id)
        if session is not None:
            logger.info("session_active chat_id=%s step=%s", chat_id, session.step.value)
            return TextReply(await self._add.handle_step(chat_id, text, session))

        normalized = text.strip().lower()

        if normalized in LIST_ALIASES:
            logger.info("command_list chat_id=%s", chat_id)
            return TextReply(await self._list.execute())

        if normalized in ADD_ALIASES:
            logger.info("command_add chat_id=%s", chat_id)
            return TextReply(self._add.start(chat_id))

        if normalized in MENU_ALIASES:
            logger.info("command_menu chat_id=%s", chat_id)
            return formatter.format_menu()

        logger.info("command_unknown chat_id=%s text=%r", chat_id, normalized)
        return formatter.format_unknown_command()
