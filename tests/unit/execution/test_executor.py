"""Tests for PayoutExecutor execution passes."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from wirebatch.core.config import AppSettings, ExecutionConfig, RoutingConfig
from wirebatch.execution.executor import (
    PayoutExecutor,
    execute_payouts,
    generate_batch_id,
    split_payee_name,
)
from wirebatch.models.execution import BatchPayoutRequest, PaymentRail, PayoutStatus
from tests.fakes import MockRailProvider, make_item

FIXED_NOW = datetime(2026, 1, 2, tzinfo=timezone.utc)


@pytest.fixture
def provider() -> MockRailProvider:
    return MockRailProvider()


@pytest.fixture
def executor(provider) -> PayoutExecutor:
    return PayoutExecutor(provider, AppSettings(), clock=lambda: FIXED_NOW)


def _request(items, **kwargs) -> BatchPayoutRequest:
    return BatchPayoutRequest(batch_id="B1", funding_source_id="wallet_1", items=items, **kwargs)


class TestHelpers:
    def test_batch_id_format(self):
        assert generate_batch_id(FIXED_NOW) == "WB-2026-12000000"
        assert re.fullmatch(r"WB-\d{4}-\d{8}", generate_batch_id())

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("John Smith", ("John", "Smith")),
            ("Mary Ann van Dyke", ("Mary", "Ann van Dyke")),
            ("Acme", ("Acme", "Payee")),
            ("   ", ("Unknown", "Payee")),
        ],
    )
    def test_split_payee_name(self, name, expected):
        assert split_payee_name(name) == expected


class TestExecute:
    def test_all_success(self, executor, provider):
        items = [make_item(1, amount_cents=123456), make_item(2, amount_cents=150_000_00)]
        result = executor.execute(_request(items))

        assert result.success
        assert not result.can_retry
        assert result.total_processed == 2
        assert result.total_success == 2
        assert result.total_amount == Decimal("151234.56")
        assert result.processed_at == FIXED_NOW

        first, second = result.results
        assert first.status == PayoutStatus.SUCCESS
        assert first.payment_rail == PaymentRail.ACH
        assert first.transfer_id in provider.transfers
        assert first.external_account_id is not None
        assert first.provider_status == "payment_submitted"
        assert second.payment_rail == PaymentRail.WIRE

        rails = [kw["payment_rail"] for op, kw in provider.calls if op == "create_transfer"]
        assert rails == ["ach", "wire"]

    def test_one_tokenization_failure_is_isolated(self, executor, provider):
        provider.fail_account_for("Bob Jones")
        items = [
            make_item(1, payee_name="Alice Smith"),
            make_item(2, payee_name="Bob Jones"),
            make_item(3, payee_name="Carol White"),
        ]
        result = executor.execute(_request(items))

        assert len(result.results) == 3
        assert result.total_failed == 1
        assert result.total_success == 2
        assert result.can_retry
        assert not result.success
        failed = result.failed_results[0]
        assert failed.line_number == 2
        assert failed.error_message == "Failed to create external account: account rejected"
        assert failed.transfer_id is None

    def test_transfer_failure_is_isolated(self, executor, provider):
        provider.fail_transfer_for("Bob Jones", "insufficient funds")
        items = [make_item(1, payee_name="Bob Jones"), make_item(2)]
        result = executor.execute(_request(items))
        assert result.results[0].status == PayoutStatus.FAILED
        assert result.results[0].error_message == "Failed to create transfer: insufficient funds"
        assert result.results[1].status == PayoutStatus.SUCCESS

    def test_unexpected_exception_recorded(self):
        class Exploding(MockRailProvider):
            def create_transfer(self, request, idempotency_key):
                raise RuntimeError("connection reset")

        result = PayoutExecutor(Exploding()).execute(_request([make_item(1)]))
        assert result.results[0].status == PayoutStatus.FAILED
        assert result.results[0].error_message == "connection reset"

    def test_missing_bank_details_skipped_without_calls(self, executor, provider):
        items = [make_item(1, routing_number="", account_number=""), make_item(2)]
        result = executor.execute(_request(items))

        skipped = result.results[0]
        assert skipped.status == PayoutStatus.SKIPPED
        assert skipped.error_message == "Missing bank account details"
        assert result.total_skipped == 1
        assert result.success
        assert len([c for c in provider.calls if c[0] == "create_external_account"]) == 1

    def test_all_skipped_is_not_success(self, executor):
        result = executor.execute(_request([make_item(1, routing_number="")]))
        assert not result.success
        assert not result.can_retry

    def test_dry_run_makes_no_provider_calls(self, executor, provider):
        items = [make_item(1), make_item(2, amount_cents=200_000_00)]
        result = executor.execute(_request(items, dry_run=True))

        assert provider.calls == []
        assert result.total_pending == 2
        assert result.total_success == 0
        assert result.success
        assert all(r.status == PayoutStatus.PENDING for r in result.results)
        assert all(r.transfer_id.startswith("dry-run-") for r in result.results)
        assert result.results[1].payment_rail == PaymentRail.WIRE
        assert result.total_amount == Decimal("200100.00")

    def test_rtp_rail_when_enabled(self, provider):
        settings = AppSettings(routing=RoutingConfig(rtp_enabled=True))
        result = PayoutExecutor(provider, settings).execute(_request([make_item(1)]))
        assert result.results[0].payment_rail == PaymentRail.RTP

    def test_empty_batch(self, executor):
        result = executor.execute(_request([]))
        assert result.total_processed == 0
        assert result.results == ()
        assert not result.success

    def test_results_ordered_by_line_with_fan_out(self, provider):
        settings = AppSettings(execution=ExecutionConfig(max_workers=4))
        items = [make_item(n, payee_name=f"Payee {n}") for n in range(20, 0, -1)]
        provider.fail_account_for("Payee 7")
        result = PayoutExecutor(provider, settings).execute(_request(items))

        assert [r.line_number for r in result.results] == list(range(1, 21))
        assert result.total_success == 19
        assert result.total_failed == 1
        assert result.failed_results[0].line_number == 7

    def test_results_hold_no_bank_details(self, executor):
        result = executor.execute(_request([make_item(1, account_number="99998888")]))
        dumped = result.model_dump_json()
        assert "021000021" not in dumped
        assert "99998888" not in dumped

    def test_module_entry_point(self, provider):
        result = execute_payouts(_request([make_item(1)]), provider)
        assert result.total_success == 1


class TestIdempotencyKeys:
    def test_account_key_is_stable(self, executor):
        item = make_item(3, reference_id="DEAL-9")
        assert executor.account_key("B1", item) == "wirebatch-B1-ext-DEAL-9-3"
        assert executor.account_key("B1", item) == executor.account_key("B1", item)

    def test_transfer_key_is_unique_per_attempt(self, executor):
        item = make_item(3, reference_id="DEAL-9")
        first = executor.transfer_key("B1", item)
        second = executor.transfer_key("B1", item)
        assert first.startswith("wirebatch-B1-txfr-DEAL-9-")
        assert first != second

    def test_rerun_reuses_external_account(self, executor, provider):
        items = [make_item(1)]
        first = executor.execute(_request(items))
        second = executor.execute(_request(items))
        assert first.results[0].external_account_id == second.results[0].external_account_id
        assert first.results[0].transfer_id != second.results[0].transfer_id
        assert len(provider.accounts) == 1
        assert len(provider.transfers) == 2


class TestTransferStatus:
    def test_reports_current_state(self, executor, provider):
        result = executor.execute(_request([make_item(1), make_item(2, routing_number="")]))
        transfer_id = result.results[0].transfer_id
        provider.set_transfer_state(transfer_id, "payment_processed")

        assert executor.check_transfer_statuses(result) == {transfer_id: "payment_processed"}

    def test_unknown_when_lookup_fails(self, executor):
        result = executor.execute(_request([make_item(1)]))
        other = PayoutExecutor(MockRailProvider())
        assert other.check_transfer_statuses(result) == {result.results[0].transfer_id: "unknown"}
