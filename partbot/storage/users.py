"""User balance store backed by SQLite."""

import logging

import aiosqlite

from ..models import SearchMode, User
from .database import Database

logger = logging.getLogger(__name__)


class UserRepository:
    """Per-user credit balance and search settings.

    Offers only get-or-create, read and unconditional overwrite; callers
    compute the new balance themselves.
    """

    def __init__(self, database: Database):
        self.database = database

    async def get(self, user_id: int) -> User | None:
        """Load a user, None if it was never created."""
        db = self.database.get_connection()
        async with db.execute(
            "SELECT user_id, username, balance_cents, search_config_key "
            "FROM users WHERE user_id = ?",
            (user_id,),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_user(row)

    async def get_or_create(
        self, user_id: int, username: str | None, trial_balance_cents: int
    ) -> User:
        """Load a user, creating it with the trial balance on first contact."""
        existing = await self.get(user_id)
        if existing is not None:
            return existing

        user = User(
            user_id=user_id,
            username=username,
            balance_cents=trial_balance_cents,
            search_mode=SearchMode.default(),
        )
        db = self.database.get_connection()
        await db.execute(
            "INSERT OR IGNORE INTO users (user_id, username, balance_cents, search_config_key) "
            "VALUES (?, ?, ?, ?)",
            (user.user_id, user.username, user.balance_cents, user.search_mode.value),
        )
        await db.commit()
        logger.info("Created user %s with trial balance %s", user_id, trial_balance_cents)

        # A concurrent first contact may have inserted the row first
        return await self.get(user_id) or user

    async def set_balance(self, user_id: int, balance_cents: int) -> None:
        """Overwrite the stored balance."""
        db = self.database.get_connection()
        await db.execute(
            "UPDATE users SET balance_cents = ? WHERE user_id = ?", (balance_cents, user_id)
        )
        await db.commit()
        logger.debug("Balance of user %s set to %s", user_id, balance_cents)

    async def set_search_mode(self, user_id: int, mode: SearchMode) -> None:
        db = self.database.get_connection()
        await db.execute(
            "UPDATE users SET search_config_key = ? WHERE user_id = ?", (mode.value, user_id)
        )
        await db.commit()

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        return User(
            user_id=row["user_id"],
            username=row["username"],
            balance_cents=row["balance_cents"],
            search_mode=SearchMode.parse(row["search_config_key"]),
        )
