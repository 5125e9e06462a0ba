"""SQLite persistence for users and coupons.

Repositories share one aiosqlite connection owned by ``Database``. They expose
plain read/overwrite operations; balance arithmetic happens in the services.
"""

from .coupons import CouponRepository
from .database import Database
from .users import UserRepository

__all__ = ["CouponRepository", "Database", "UserRepository"]
