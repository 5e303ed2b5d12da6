"""SQLite storage for the shop connection this deployment serves."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShopConfig:
    phone_number: str
    shop_url: str
    auth_token: str
    created_at: str


class ShopConfigDB:
    """Single-row table holding the registered phone and shop credentials."""

    def __init__(self, db_path: str) -> None:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._create_tables()
        logger.info("shop_db_initialized path=%s", db_path)

    def _create_tables(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS shop_config (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                phone_number TEXT NOT NULL,
                shop_url TEXT NOT NULL,
                auth_token TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self.conn.commit()

    def seed(self, phone_number: str, shop_url: str, auth_token: str) -> bool:
        """Insert the connection row unless one exists.

        Returns:
            True if a row was inserted.
        """
        cursor = self.conn.execute(
            """INSERT OR IGNORE INTO shop_config (id, phone_number, shop_url, auth_token)
               VALUES (1, ?, ?, ?)""",
            (phone_number, shop_url, auth_token),
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            logger.info("shop_config_exists skipping seed")
            return False
        logger.info("shop_config_seeded phone=%s shop_url=%s", phone_number, shop_url)
        return True

    def get(self) -> ShopConfig | None:
        row = self.conn.execute(
            "SELECT phone_number, shop_url, auth_token, created_at FROM shop_config WHERE id = 1"
        ).fetchone()
        return ShopConfig(**dict(row)) if row else None

    def close(self) -> None:
        self.conn.close()
