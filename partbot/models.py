"""Data models for the part search bot.

Defines Pydantic models for the data structures shared across the
application: users and their credit balance, coupons, marketplace matches and
the per-keyword search results that feed both the chat summary and the
spreadsheet report.
"""

import secrets
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .exceptions import InvalidCouponValueError, InvalidSearchModeError

NOT_FOUND_TITLE = "Not Found"
NOT_FOUND_PRICE = "N/A"


class SearchMode(str, Enum):
    """Marketplace query strategy selected per user."""

    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    ENDED = "ENDED"

    @classmethod
    def parse(cls, value: str) -> "SearchMode":
        """Parse a mode name case-insensitively.

        Raises:
            InvalidSearchModeError: If the value names no known mode.
        """
        try:
            return cls(value.strip().upper())
        except ValueError as e:
            raise InvalidSearchModeError(value) from e

    @classmethod
    def default(cls) -> "SearchMode":
        return cls.SOLD


class User(BaseModel):
    """Bot user with a credit balance.

    Attributes:
        user_id: Telegram user id.
        username: Telegram username, if the user has one.
        balance_cents: Credit balance in cents.
        search_mode: Persisted marketplace query strategy.
    """

    user_id: int = Field(gt=0)
    username: str | None = None
    balance_cents: int = Field(default=0, ge=0)
    search_mode: SearchMode = SearchMode.SOLD


class Coupon(BaseModel):
    """Prepaid credit code.

    Attributes:
        code: Normalized coupon code.
        value_cents: Credit added on redemption.
        is_activated: Whether the code was already spent.
        activated_by: User id that redeemed the coupon.
        activated_at: Redemption time.
    """

    code: str
    value_cents: int = Field(gt=0)
    is_activated: bool = False
    activated_by: int | None = None
    activated_at: datetime | None = None

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return normalize_coupon_code(value)


class ListingMatch(BaseModel):
    """Best marketplace listing found for a keyword."""

    item_id: str = "N/A"
    title: str = "No Title"
    price_value: str = "0"
    price_currency: str = "USD"

    @property
    def price(self) -> str:
        return f"{self.price_value} {self.price_currency}"


class KeywordResult(BaseModel):
    """Search result for one part number, with an explicit absent marker.

    Attributes:
        keyword: Part number as typed by the user.
        match: Best listing, None when nothing was found.
    """

    keyword: str
    match: ListingMatch | None = None

    @property
    def found(self) -> bool:
        return self.match is not None

    @property
    def title(self) -> str:
        return self.match.title if self.match else NOT_FOUND_TITLE

    @property
    def price(self) -> str:
        return self.match.price if self.match else NOT_FOUND_PRICE


class ReportRow(BaseModel):
    """One line of the spreadsheet report."""

    part_number: str
    title: str
    price: str


def annotated_rows(results: list[KeywordResult]) -> list[ReportRow]:
    """Every keyword in request order, absent ones with placeholder text."""
    return [ReportRow(part_number=r.keyword, title=r.title, price=r.price) for r in results]


def matched_rows(results: list[KeywordResult]) -> list[ReportRow]:
    """Only the keywords that matched a listing, in request order."""
    return [
        ReportRow(part_number=r.keyword, title=r.title, price=r.price) for r in results if r.found
    ]


def normalize_coupon_code(raw: str) -> str:
    """Trim and upper-case a coupon code.

    Raises:
        ValueError: If nothing is left after trimming.
    """
    code = raw.strip().upper()
    if not code:
        raise ValueError("Coupon code cannot be empty")
    return code


def generate_coupon_code() -> str:
    """Create a random code of the form C-XXXXXXXX."""
    return f"C-{secrets.token_hex(4).upper()}"


def dollars_to_cents(value: str | float | Decimal) -> int:
    """Convert a dollar amount to whole cents, rounding half up.

    Raises:
        InvalidCouponValueError: If the amount is not a positive number.
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise InvalidCouponValueError(str(value)) from e

    if not amount.is_finite() or amount <= 0:
        raise InvalidCouponValueError(str(value))

    cents = int((amount * 100).quantize(Decimal("1"), ROUND_HALF_UP))
    if cents <= 0:
        raise InvalidCouponValueError(str(value))
    return cents


def format_cents(cents: int) -> str:
    """Render cents as a dollar amount with two decimals, e.g. 1234 -> '12.34'."""
    return str((Decimal(cents) / 100).quantize(Decimal("0.01"), ROUND_HALF_UP))
