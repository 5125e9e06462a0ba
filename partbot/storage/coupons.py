"""Coupon store backed by SQLite."""

import logging
from datetime import datetime, timezone

import aiosqlite

from ..models import Coupon
from .database import Database

logger = logging.getLogger(__name__)


class CouponRepository:
    """Prepaid coupon codes and their activation state."""

    def __init__(self, database: Database):
        self.database = database

    async def create(self, coupon: Coupon) -> Coupon:
        db = self.database.get_connection()
        await db.execute(
            "INSERT INTO coupons (code, value_cents, is_activated) VALUES (?, ?, 0)",
            (coupon.code, coupon.value_cents),
        )
        await db.commit()
        logger.info("Coupon created: %s (%s cents)", coupon.code, coupon.value_cents)
        return coupon

    async def find_by_code(self, code: str) -> Coupon | None:
        db = self.database.get_connection()
        async with db.execute(
            "SELECT code, value_cents, is_activated, activated_by_user_id, activated_at "
            "FROM coupons WHERE code = ?",
            (code,),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_coupon(row)

    async def activate(self, code: str, user_id: int) -> bool:
        """Mark a coupon as spent by a user.

        Returns:
            True if this call activated the coupon, False if it was already
            activated (or does not exist).
        """
        db = self.database.get_connection()
        cursor = await db.execute(
            "UPDATE coupons SET is_activated = 1, activated_by_user_id = ?, activated_at = ? "
            "WHERE code = ? AND is_activated = 0",
            (user_id, datetime.now(timezone.utc).isoformat(), code),
        )
        await db.commit()
        activated = cursor.rowcount == 1
        await cursor.close()

        if activated:
            logger.info("Coupon %s activated by user %s", code, user_id)
        return activated

    @staticmethod
    def _row_to_coupon(row: aiosqlite.Row) -> Coupon:
        activated_at = row["activated_at"]
        return Coupon(
            code=row["code"],
            value_cents=row["value_cents"],
            is_activated=bool(row["is_activated"]),
            activated_by=row["activated_by_user_id"],
            activated_at=datetime.fromisoformat(activated_at) if activated_at else None,
        )
