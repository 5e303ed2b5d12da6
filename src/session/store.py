"""In-memory conversation session store.

This module provides the SessionStore class for:
- Holding one in-flight multi-step flow per chat id
- Sliding expiry (every write pushes expiry forward)
- Lazy eviction on read plus an explicit sweep
- Per-chat locks so overlapping webhooks for one chat run in order
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum


class FlowType(str, Enum):
    """Named multi-step interactions."""

    ADD_PRODUCT = "addProduct"


class AddProductStep(str, Enum):
    """Steps of the add-product wizard, in order."""

    NAME = "name"
    PRICE = "price"
    STOCK = "stock"


@dataclass
class AddProductData:
    name: str | None = None
    price: str | None = None  # two-decimal string once accepted
    stock: int | None = None


@dataclass
class Session:
    """State of one chat's in-flight flow. Times are epoch seconds."""

    chat_id: str
    created_at: float
    updated_at: float
    expires_at: float
    action: FlowType = FlowType.ADD_PRODUCT
    step: AddProductStep = AddProductStep.NAME
    data: AddProductData = field(default_factory=AddProductData)


class SessionStore:
    """Owns the chat id -> Session map for one running server.

    Sweep cadence is up to the caller; the app lifespan runs cleanup()
    periodically when configured to.
    """

    DEFAULT_TIMEOUT_SECONDS = 300

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._timeout = (
            self.DEFAULT_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, chat_id: str) -> Session | None:
        """Return the live session, evicting it first if it has expired."""
        session = self._sessions.get(chat_id)
        if session is None:
            return None
        if time.time() > session.expires_at:
            del self._sessions[chat_id]
            return None
        return session

    def set(self, chat_id: str, session: Session) -> None:
        """Store the session and extend its life by the timeout from now."""
        now = time.time()
        session.updated_at = now
        session.expires_at = now + self._timeout
        self._sessions[chat_id] = session

    def delete(self, chat_id: str) -> None:
        self._sessions.pop(chat_id, None)

    def cleanup(self) -> int:
        """Remove every expired session.

        Returns:
            Number of sessions removed.
        """
        now = time.time()
        expired = [cid for cid, s in self._sessions.items() if s.expires_at < now]
        for chat_id in expired:
            del self._sessions[chat_id]

        idle = [
            cid for cid, lock in self._locks.items()
            if not lock.locked() and cid not in self._sessions
        ]
        for chat_id in idle:
            del self._locks[chat_id]

        return len(expired)

    def create_session(self, chat_id: str) -> Session:
        """Build a fresh add-product session at the first step. Not stored."""
        now = time.time()
        return Session(
            chat_id=chat_id,
            created_at=now,
            updated_at=now,
            expires_at=now + self._timeout,
        )

    def lock(self, chat_id: str) -> asyncio.Lock:
        """Lock serializing read-modify-write of one chat's session."""
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        return lock
