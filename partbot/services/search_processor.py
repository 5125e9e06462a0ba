"""Charge, search and reconcile a part-number request.

A request is charged up front, searched with a single gateway call and then
reconciled: the charge is kept when at least one part number matched and is
returned in full when nothing matched or the search failed. The balance store
only offers overwrites, so every write carries the complete new balance.
"""

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Literal, Protocol

from ..models import (
    KeywordResult,
    ReportRow,
    SearchMode,
    User,
    annotated_rows,
    matched_rows,
)
from .report import REPORT_FILE_PREFIX

logger = logging.getLogger(__name__)

PART_NUMBER_DELIMITER = re.compile(r"[\s,]+")


class BalanceStore(Protocol):
    async def set_balance(self, user_id: int, balance_cents: int) -> None: ...


class SearchGateway(Protocol):
    async def search(self, keywords: list[str], mode: SearchMode) -> list[KeywordResult]: ...


class ReportGenerator(Protocol):
    def generate(self, rows: list[ReportRow]) -> bytes: ...


@dataclass(frozen=True)
class NoPartNumbers:
    """The message held no usable part numbers; nothing was charged."""

    kind: Literal["no_part_numbers"] = field(default="no_part_numbers", init=False)


@dataclass(frozen=True)
class InsufficientFunds:
    """The balance does not cover the charge; nothing was charged."""

    required_cents: int
    available_cents: int
    kind: Literal["insufficient_funds"] = field(default="insufficient_funds", init=False)


@dataclass(frozen=True)
class SearchFailed:
    """The search raised; the charge was returned unless `refunded` is False."""

    balance_cents: int
    refunded: bool
    kind: Literal["search_failed"] = field(default="search_failed", init=False)


@dataclass(frozen=True)
class NoItemsFound:
    """No part number matched; the charge was returned."""

    balance_cents: int
    refunded: bool
    rows: list[ReportRow]
    kind: Literal["no_items_found"] = field(default="no_items_found", init=False)


@dataclass(frozen=True)
class SearchSucceeded:
    """At least one part number matched; the charge was kept.

    Attributes:
        charge_cents: Amount deducted for the request.
        balance_cents: Balance after the deduction.
        rows: Every part number, unmatched ones with placeholder text.
        found_count: Number of part numbers that matched.
        report: xlsx document built from the matched rows only.
        filename: Suggested file name for the report.
    """

    charge_cents: int
    balance_cents: int
    rows: list[ReportRow]
    found_count: int
    report: bytes
    filename: str
    kind: Literal["search_succeeded"] = field(default="search_succeeded", init=False)


SearchOutcome = NoPartNumbers | InsufficientFunds | SearchFailed | NoItemsFound | SearchSucceeded


def parse_part_numbers(raw_text: str | None) -> list[str]:
    """Split free text on whitespace, newlines and commas, dropping blanks."""
    if not raw_text:
        return []
    return [token for token in PART_NUMBER_DELIMITER.split(raw_text) if token]


class SearchProcessor:
    """Runs one paid search request from tokenization to reconciliation.

    Holds no state between requests; balances live in the balance store.
    """

    def __init__(
        self,
        balance_store: BalanceStore,
        gateway: SearchGateway,
        report_generator: ReportGenerator,
        cost_per_request_cents: int,
        search_timeout: float | None = None,
    ):
        self.balance_store = balance_store
        self.gateway = gateway
        self.report_generator = report_generator
        self.cost_per_request_cents = cost_per_request_cents
        self.search_timeout = search_timeout or None

    def calculate_charge(self, part_count: int, is_admin: bool) -> int:
        """Price a request; the administrator is never charged."""
        if is_admin:
            return 0
        return part_count * self.cost_per_request_cents

    async def process_request(self, user: User, is_admin: bool, raw_text: str) -> SearchOutcome:
        """Charge, search and reconcile one request.

        Never raises for search failures; every result is reported as one of
        the SearchOutcome variants.

        Args:
            user: Current user record, including balance and search mode.
            is_admin: Whether the requester is the administrator.
            raw_text: Message text holding the part numbers.

        Returns:
            The outcome of the request.
        """
        part_numbers = parse_part_numbers(raw_text)
        if not part_numbers:
            return NoPartNumbers()

        charge = self.calculate_charge(len(part_numbers), is_admin)
        initial_balance = user.balance_cents

        logger.info(
            "Processing search request: user %s, %d part numbers, admin=%s",
            user.user_id,
            len(part_numbers),
            is_admin,
        )

        if not is_admin and initial_balance < charge:
            logger.warning(
                "Insufficient funds for user %s: required %s, available %s",
                user.user_id,
                charge,
                initial_balance,
            )
            return InsufficientFunds(required_cents=charge, available_cents=initial_balance)

        charged_balance = initial_balance - charge
        if charge > 0:
            try:
                await self.balance_store.set_balance(user.user_id, charged_balance)
            except Exception:
                logger.exception(
                    "Charge of %s to user %s failed, search skipped", charge, user.user_id
                )
                return SearchFailed(balance_cents=initial_balance, refunded=False)

        try:
            results = await self._search(part_numbers, user.search_mode)
        except Exception:
            logger.exception("Search failed for user %s", user.user_id)
            return await self._fail(user.user_id, charge, initial_balance)

        rows = annotated_rows(results)
        found_rows = matched_rows(results)

        if not found_rows:
            logger.info("Search completed with no results for user %s", user.user_id)
            if not await self._refund(user.user_id, charge, initial_balance):
                return SearchFailed(balance_cents=charged_balance, refunded=False)
            return NoItemsFound(balance_cents=initial_balance, refunded=charge > 0, rows=rows)

        try:
            report = await asyncio.to_thread(self.report_generator.generate, found_rows)
        except Exception:
            logger.exception("Report generation failed for user %s", user.user_id)
            return await self._fail(user.user_id, charge, initial_balance)

        filename = f"{REPORT_FILE_PREFIX}{int(time.time() * 1000)}.xlsx"

        logger.info(
            "Search completed for user %s: %d/%d found, charged %s",
            user.user_id,
            len(found_rows),
            len(rows),
            charge,
        )
        return SearchSucceeded(
            charge_cents=charge,
            balance_cents=charged_balance,
            rows=rows,
            found_count=len(found_rows),
            report=report,
            filename=filename,
        )

    async def _search(self, part_numbers: list[str], mode: SearchMode) -> list[KeywordResult]:
        search = self.gateway.search(part_numbers, mode)
        if self.search_timeout is None:
            return await search
        return await asyncio.wait_for(search, timeout=self.search_timeout)

    async def _fail(self, user_id: int, charge: int, initial_balance: int) -> SearchFailed:
        if not await self._refund(user_id, charge, initial_balance):
            return SearchFailed(balance_cents=initial_balance - charge, refunded=False)
        return SearchFailed(balance_cents=initial_balance, refunded=charge > 0)

    async def _refund(self, user_id: int, charge: int, initial_balance: int) -> bool:
        """Restore the pre-charge balance.

        Returns:
            False if the refund write failed and the user is still charged.
        """
        if charge <= 0:
            return True
        try:
            await self.balance_store.set_balance(user_id, initial_balance)
        except Exception:
            logger.exception("Refund of %s to user %s failed, user stays charged", charge, user_id)
            return False
        logger.info("Refunded %s to user %s", charge, user_id)
        return True
