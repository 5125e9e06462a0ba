"""Contract tests for the charge, search and reconcile flow.

Every request either ends with the charge kept (at least one part number
matched) or with the balance restored to its value before the request.
"""

import asyncio
from unittest.mock import call

import pytest

from partbot.exceptions import EbayApiError, EbayRateLimitError
from partbot.models import NOT_FOUND_PRICE, NOT_FOUND_TITLE, ReportRow, SearchMode
from partbot.services.search_processor import (
    InsufficientFunds,
    NoItemsFound,
    NoPartNumbers,
    SearchFailed,
    SearchProcessor,
    SearchSucceeded,
)
from tests.conftest import TEST_USER_ID, absent, found

COST = 10


@pytest.fixture
def processor(balance_store, gateway, report_generator):
    return SearchProcessor(
        balance_store=balance_store,
        gateway=gateway,
        report_generator=report_generator,
        cost_per_request_cents=COST,
    )


class TestChargeCalculation:
    def test_charge_is_cost_times_part_count(self, processor):
        assert processor.calculate_charge(3, is_admin=False) == 30

    def test_admin_is_never_charged(self, processor):
        assert processor.calculate_charge(50, is_admin=True) == 0


class TestAdmission:
    @pytest.mark.asyncio
    async def test_blank_message_is_rejected_without_side_effects(
        self, processor, make_user, balance_store, gateway
    ):
        outcome = await processor.process_request(make_user(), False, "  ,\n ,, ")

        assert outcome == NoPartNumbers()
        assert outcome.kind == "no_part_numbers"
        balance_store.set_balance.assert_not_awaited()
        gateway.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insufficient_funds_reports_required_and_available(
        self, processor, make_user, balance_store, gateway
    ):
        outcome = await processor.process_request(make_user(balance_cents=25), False, "A B C")

        assert outcome == InsufficientFunds(required_cents=30, available_cents=25)
        balance_store.set_balance.assert_not_awaited()
        gateway.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exact_balance_is_admitted(self, processor, make_user, balance_store, gateway):
        gateway.search.return_value = [found("A"), found("B")]

        outcome = await processor.process_request(make_user(balance_cents=20), False, "A B")

        assert isinstance(outcome, SearchSucceeded)
        assert outcome.balance_cents == 0
        assert balance_store.set_balance.await_args_list == [call(TEST_USER_ID, 0)]

    @pytest.mark.asyncio
    async def test_admin_with_zero_balance_is_admitted(self, processor, make_user, gateway):
        gateway.search.return_value = [found("A")]

        outcome = await processor.process_request(make_user(balance_cents=0), True, "A")

        assert isinstance(outcome, SearchSucceeded)


class TestReconciliation:
    @pytest.mark.asyncio
    async def test_partial_match_keeps_charge(
        self, processor, make_user, balance_store, gateway, report_generator
    ):
        gateway.search.return_value = [
            found("PN1", title="Pump", price="12.50"),
            absent("PN2"),
            found("PN3", title="Valve", price="3.00"),
        ]

        outcome = await processor.process_request(make_user(balance_cents=1000), False, "PN1 PN2 PN3")

        assert isinstance(outcome, SearchSucceeded)
        assert outcome.charge_cents == 30
        assert outcome.balance_cents == 970
        assert outcome.found_count == 2
        assert outcome.report == b"xlsx-bytes"
        assert balance_store.set_balance.await_args_list == [call(TEST_USER_ID, 970)]

        # Chat view lists every part number, the report only the matches
        assert [row.part_number for row in outcome.rows] == ["PN1", "PN2", "PN3"]
        assert outcome.rows[1] == ReportRow(
            part_number="PN2", title=NOT_FOUND_TITLE, price=NOT_FOUND_PRICE
        )
        report_generator.generate.assert_called_once_with(
            [
                ReportRow(part_number="PN1", title="Pump", price="12.50 USD"),
                ReportRow(part_number="PN3", title="Valve", price="3.00 USD"),
            ]
        )

    @pytest.mark.asyncio
    async def test_no_matches_restores_balance(self, processor, make_user, balance_store, gateway):
        gateway.search.return_value = [absent("PN1"), absent("PN2")]

        outcome = await processor.process_request(make_user(balance_cents=500), False, "PN1,PN2")

        assert isinstance(outcome, NoItemsFound)
        assert outcome.balance_cents == 500
        assert outcome.refunded is True
        assert [row.title for row in outcome.rows] == [NOT_FOUND_TITLE, NOT_FOUND_TITLE]
        assert balance_store.set_balance.await_args_list == [
            call(TEST_USER_ID, 480),
            call(TEST_USER_ID, 500),
        ]

    @pytest.mark.asyncio
    async def test_gateway_failure_restores_balance(
        self, processor, make_user, balance_store, gateway, report_generator
    ):
        gateway.search.side_effect = EbayRateLimitError("throttled")

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1")

        assert outcome == SearchFailed(balance_cents=100, refunded=True)
        assert balance_store.set_balance.await_args_list == [
            call(TEST_USER_ID, 90),
            call(TEST_USER_ID, 100),
        ]
        report_generator.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_error_restores_balance(
        self, processor, make_user, balance_store, gateway
    ):
        gateway.search.side_effect = RuntimeError("boom")

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1")

        assert isinstance(outcome, SearchFailed)
        assert balance_store.set_balance.await_args_list[-1] == call(TEST_USER_ID, 100)

    @pytest.mark.asyncio
    async def test_report_failure_restores_balance(
        self, processor, make_user, balance_store, gateway, report_generator
    ):
        gateway.search.return_value = [found("PN1")]
        report_generator.generate.side_effect = ValueError("cannot render")

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1")

        assert outcome == SearchFailed(balance_cents=100, refunded=True)
        assert balance_store.set_balance.await_args_list == [
            call(TEST_USER_ID, 90),
            call(TEST_USER_ID, 100),
        ]

    @pytest.mark.asyncio
    async def test_admin_request_never_touches_balance(
        self, processor, make_user, balance_store, gateway
    ):
        gateway.search.side_effect = EbayApiError("down")
        failed = await processor.process_request(make_user(balance_cents=0), True, "PN1")

        gateway.search.side_effect = None
        gateway.search.return_value = [absent("PN1")]
        nothing = await processor.process_request(make_user(balance_cents=0), True, "PN1")

        gateway.search.return_value = [found("PN1")]
        succeeded = await processor.process_request(make_user(balance_cents=0), True, "PN1")

        assert failed == SearchFailed(balance_cents=0, refunded=False)
        assert isinstance(nothing, NoItemsFound) and nothing.refunded is False
        assert isinstance(succeeded, SearchSucceeded) and succeeded.charge_cents == 0
        balance_store.set_balance.assert_not_awaited()


class TestBalanceWriteFailures:
    @pytest.mark.asyncio
    async def test_failed_refund_after_search_error_reports_charge_kept(
        self, processor, make_user, balance_store, gateway
    ):
        gateway.search.side_effect = EbayApiError("down")
        balance_store.set_balance.side_effect = [None, RuntimeError("db locked")]

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1")

        assert outcome == SearchFailed(balance_cents=90, refunded=False)
        assert balance_store.set_balance.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_refund_after_no_matches_reports_charge_kept(
        self, processor, make_user, balance_store, gateway
    ):
        gateway.search.return_value = [absent("PN1"), absent("PN2")]
        balance_store.set_balance.side_effect = [None, RuntimeError("db locked")]

        outcome = await processor.process_request(make_user(balance_cents=500), False, "PN1,PN2")

        assert outcome == SearchFailed(balance_cents=480, refunded=False)

    @pytest.mark.asyncio
    async def test_failed_refund_after_report_error_reports_charge_kept(
        self, processor, make_user, balance_store, gateway, report_generator
    ):
        gateway.search.return_value = [found("PN1")]
        report_generator.generate.side_effect = ValueError("cannot render")
        balance_store.set_balance.side_effect = [None, RuntimeError("db locked")]

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1")

        assert outcome == SearchFailed(balance_cents=90, refunded=False)

    @pytest.mark.asyncio
    async def test_failed_charge_skips_search(self, processor, make_user, balance_store, gateway):
        balance_store.set_balance.side_effect = RuntimeError("db locked")

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1")

        assert outcome == SearchFailed(balance_cents=100, refunded=False)
        gateway.search.assert_not_awaited()
        balance_store.set_balance.assert_awaited_once_with(TEST_USER_ID, 90)


class TestGatewayCall:
    @pytest.mark.asyncio
    async def test_single_batched_call_in_user_mode(self, processor, make_user, gateway):
        gateway.search.return_value = [found("A"), found("A"), absent("B")]
        user = make_user(search_mode=SearchMode.ACTIVE)

        outcome = await processor.process_request(user, False, " A , A\nB ")

        gateway.search.assert_awaited_once_with(["A", "A", "B"], SearchMode.ACTIVE)
        # Repeated part numbers are charged individually
        assert isinstance(outcome, SearchSucceeded)
        assert outcome.charge_cents == 30

    @pytest.mark.asyncio
    async def test_report_filename(self, processor, make_user, gateway):
        gateway.search.return_value = [found("A")]

        outcome = await processor.process_request(make_user(), False, "A")

        assert isinstance(outcome, SearchSucceeded)
        assert outcome.filename.startswith("eBay_Report_")
        assert outcome.filename.endswith(".xlsx")

    @pytest.mark.asyncio
    async def test_search_timeout_restores_balance(
        self, balance_store, gateway, report_generator, make_user
    ):
        async def slow_search(keywords, mode):
            await asyncio.sleep(5)
            return []

        gateway.search.side_effect = slow_search
        processor = SearchProcessor(
            balance_store=balance_store,
            gateway=gateway,
            report_generator=report_generator,
            cost_per_request_cents=COST,
            search_timeout=0.01,
        )

        outcome = await processor.process_request(make_user(balance_cents=50), False, "A")

        assert outcome == SearchFailed(balance_cents=50, refunded=True)
        assert balance_store.set_balance.await_args_list == [
            call(TEST_USER_ID, 40),
            call(TEST_USER_ID, 50),
        ]


class TestScenarios:
    """End-to-end balance scenarios with a unit cost of 2 cents."""

    @pytest.fixture
    def processor(self, balance_store, gateway, report_generator):
        return SearchProcessor(
            balance_store=balance_store,
            gateway=gateway,
            report_generator=report_generator,
            cost_per_request_cents=2,
        )

    @pytest.mark.asyncio
    async def test_all_found(self, processor, make_user, balance_store, gateway, report_generator):
        gateway.search.return_value = [found("PN1"), found("PN2"), found("PN3")]

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1, PN2, PN3")

        assert isinstance(outcome, SearchSucceeded)
        assert (outcome.charge_cents, outcome.balance_cents) == (6, 94)
        assert len(report_generator.generate.call_args.args[0]) == 3
        assert balance_store.set_balance.await_args_list == [call(TEST_USER_ID, 94)]

    @pytest.mark.asyncio
    async def test_four_tokens_over_budget(self, processor, make_user, balance_store):
        outcome = await processor.process_request(make_user(balance_cents=5), False, "PN1 PN2 PN3 PN4")

        assert outcome == InsufficientFunds(required_cents=8, available_cents=5)
        balance_store.set_balance.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nothing_found(self, processor, make_user, balance_store, gateway, report_generator):
        gateway.search.return_value = [absent("PN1"), absent("PN2")]

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1, PN2")

        assert isinstance(outcome, NoItemsFound) and outcome.balance_cents == 100
        assert balance_store.set_balance.await_args_list == [
            call(TEST_USER_ID, 96),
            call(TEST_USER_ID, 100),
        ]
        report_generator.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_gateway_raises(self, processor, make_user, balance_store, gateway):
        gateway.search.side_effect = EbayApiError("outage")

        outcome = await processor.process_request(make_user(balance_cents=100), False, "PN1")

        assert outcome == SearchFailed(balance_cents=100, refunded=True)
        assert balance_store.set_balance.await_args_list == [
            call(TEST_USER_ID, 98),
            call(TEST_USER_ID, 100),
        ]
