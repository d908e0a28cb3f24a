"""Upload through reconciliation, the way an operator runs a batch."""

from __future__ import annotations

from decimal import Decimal

from wirebatch.core.config import AppSettings
from wirebatch.execution.executor import PayoutExecutor, retry_failed_payouts
from wirebatch.ingest.csv_text import split_csv_line
from wirebatch.ingest.parser import parse_export
from wirebatch.models.execution import BatchPayoutRequest, PaymentRail, PayoutStatus
from wirebatch.reconciliation.generator import ReconciliationGenerator
from wirebatch.validation.validator import validate_batch
from tests.fakes import MockRailProvider

CSV_EXPORT = (
    "Payee,Routing,Account,Amount,Reference\n"
    'John Smith,021000021,123456789,"$1,234.56",DEAL-1\n'
)


def test_single_row_csv_to_reconciliation():
    parsed = parse_export(CSV_EXPORT, "payoffs.csv")
    assert parsed.success
    (item,) = parsed.items
    assert item.amount_dollars == Decimal("1234.56")
    assert item.routing_number == "021000021"

    summary = validate_batch(parsed.items)
    assert summary.valid
    assert summary.small_value_count == 1

    provider = MockRailProvider()
    result = PayoutExecutor(provider, AppSettings()).execute(
        BatchPayoutRequest(batch_id="WB-E2E", funding_source_id="wallet_1", items=parsed.items)
    )
    (payout,) = result.results
    assert payout.status == PayoutStatus.SUCCESS
    assert payout.payment_rail == PaymentRail.ACH

    generator = ReconciliationGenerator()
    positive_pay = split_csv_line(generator.positive_pay(result.results, "WB-E2E").content.split("\n")[1])
    assert positive_pay[4] == "CLEARED"
    assert positive_pay[3] == "1234.56"

    bank_row = split_csv_line(generator.bank_reconciliation(result.results, "WB-E2E").content.split("\n")[1])
    assert bank_row[5] == "-1234.56"


def test_partial_failure_then_retry():
    content = CSV_EXPORT + "Acme Title LLC,011000015,987654321,150000.00,DEAL-2\n"
    parsed = parse_export(content, "payoffs.csv")

    provider = MockRailProvider()
    provider.fail_transfer_for("Acme Title LLC", "wallet underfunded")
    first = PayoutExecutor(provider).execute(
        BatchPayoutRequest(batch_id="WB-E2E", funding_source_id="wallet_1", items=parsed.items)
    )
    assert first.total_success == 1
    assert first.can_retry

    provider.clear_failures()
    second = retry_failed_payouts(first, parsed.items, provider, "wallet_1")
    assert second.total_processed == 1
    assert second.results[0].payment_rail == PaymentRail.WIRE
    assert second.results[0].status == PayoutStatus.SUCCESS
