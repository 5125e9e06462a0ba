"""Response formatting for search outcomes.

Maps every SearchOutcome variant to the text sent back to the user. The
match is exhaustive, so a new outcome kind fails type checking until it is
handled here.
"""

import logging
from typing import assert_never

from ..models import ReportRow, format_cents
from ..services.search_processor import (
    InsufficientFunds,
    NoItemsFound,
    NoPartNumbers,
    SearchFailed,
    SearchOutcome,
    SearchSucceeded,
)
from .messages import (
    FOUND_SUMMARY,
    GENERIC_ERROR,
    INSUFFICIENT_FUNDS,
    INSUFFICIENT_FUNDS_DETAILS,
    NO_ITEMS_FOUND,
    NO_ITEMS_FOUND_REFUND,
    NO_PART_NUMBERS,
    REFUND_ON_ERROR,
    REQUEST_COMPLETE,
    REQUEST_COMPLETE_FREE,
)

logger = logging.getLogger(__name__)

MAX_PREVIEW_ROWS = 20


class ResponseFormatter:
    """Formats search outcomes into chat messages."""

    def format_search_outcome(self, outcome: SearchOutcome) -> str:
        """Build the reply for a processed search request.

        Args:
            outcome: Result of SearchProcessor.process_request.

        Returns:
            Message text for the user.
        """
        match outcome:
            case NoPartNumbers():
                return NO_PART_NUMBERS
            case InsufficientFunds(required_cents=required, available_cents=available):
                details = INSUFFICIENT_FUNDS_DETAILS.format(
                    required=format_cents(required), available=format_cents(available)
                )
                return f"{INSUFFICIENT_FUNDS}\n{details}"
            case SearchFailed(balance_cents=balance, refunded=refunded):
                if refunded:
                    return REFUND_ON_ERROR.format(balance=format_cents(balance))
                return GENERIC_ERROR
            case NoItemsFound(balance_cents=balance, refunded=refunded):
                if refunded:
                    return NO_ITEMS_FOUND_REFUND.format(balance=format_cents(balance))
                return NO_ITEMS_FOUND
            case SearchSucceeded():
                return self._format_success(outcome)
            case _:
                assert_never(outcome)

    def _format_success(self, outcome: SearchSucceeded) -> str:
        if outcome.charge_cents > 0:
            header = REQUEST_COMPLETE.format(
                cost=format_cents(outcome.charge_cents),
                balance=format_cents(outcome.balance_cents),
            )
        else:
            header = REQUEST_COMPLETE_FREE

        summary = FOUND_SUMMARY.format(found=outcome.found_count, total=len(outcome.rows))
        return "\n\n".join([header, summary, self.format_rows_preview(outcome.rows)])

    @staticmethod
    def format_rows_preview(rows: list[ReportRow]) -> str:
        """List every part number with its title and price, placeholders included."""
        lines = [f"• {row.part_number}: {row.title} ({row.price})" for row in rows[:MAX_PREVIEW_ROWS]]
        hidden = len(rows) - MAX_PREVIEW_ROWS
        if hidden > 0:
            lines.append(f"… and {hidden} more in the report")
        return "\n".join(lines)


response_formatter = ResponseFormatter()
