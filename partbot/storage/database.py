"""SQLite connection management and schema bootstrap."""

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id INTEGER PRIMARY KEY,
        username TEXT,
        balance_cents INTEGER NOT NULL DEFAULT 0,
        search_config_key TEXT NOT NULL DEFAULT 'SOLD'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS coupons (
        code TEXT PRIMARY KEY,
        value_cents INTEGER NOT NULL,
        is_activated BOOLEAN NOT NULL DEFAULT 0,
        activated_by_user_id INTEGER,
        activated_at DATETIME,
        FOREIGN KEY (activated_by_user_id) REFERENCES users(user_id)
    )
    """,
)


class Database:
    """Owns the aiosqlite connection shared by the repositories.

    Attributes:
        db_path: Path to SQLite database file.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create missing tables."""
        if self.connection is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        connection = await aiosqlite.connect(self.db_path)
        connection.row_factory = aiosqlite.Row
        for statement in SCHEMA:
            await connection.execute(statement)
        await connection.commit()

        self.connection = connection
        logger.info("Connected to SQLite database: %s", self.db_path)

    async def disconnect(self) -> None:
        connection = self.connection
        if connection:
            await connection.close()
            self.connection = None
            logger.info("Database connection closed")

    def get_connection(self) -> aiosqlite.Connection:
        """Return the open connection.

        Raises:
            RuntimeError: If connect() has not been awaited yet.
        """
        if self.connection is None:
            raise RuntimeError("Database not connected")
        return self.connection
