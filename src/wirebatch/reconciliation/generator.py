"""Reconciliation exports for re-import into the title/escrow ledger.

Three independent CSV encodings over the same ``PayoutResult`` list:

* positive pay: cleared disbursements only, for ledger matching
* bank reconciliation: running balance plus cleared/voided totals
* detailed report: every captured field, for audit

Every field goes through ``escape_csv_field`` so the files re-ingest
cleanly through the tabular parser's splitter.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from wirebatch.core.config import AppSettings, ReconciliationConfig
from wirebatch.core.protocols import IFileStore
from wirebatch.ingest.csv_text import join_csv_row
from wirebatch.models.execution import PayoutResult, PayoutStatus
from wirebatch.models.outputs import BatchMetadata, ReconciliationFile, ReconciliationFormat

logger = logging.getLogger(__name__)

CSV_MIME_TYPE = "text/csv"

POSITIVE_PAY_HEADERS = [
    "Date",
    "Check/Wire Number",
    "Payee",
    "Amount",
    "Status",
    "Payment Type",
    "Reference ID",
    "Confirmation Number",
]

BANK_RECON_HEADERS = [
    "Transaction Date",
    "Posting Date",
    "Description",
    "Debit",
    "Credit",
    "Balance",
    "Reference ID",
    "Payment Type",
    "Status",
    "Confirmation Number",
    "Error Notes",
]

DETAILED_HEADERS = [
    "Batch ID",
    "Line Number",
    "Transaction Date",
    "Payee Name",
    "Amount",
    "Reference ID",
    "Payment Rail",
    "Status",
    "Provider Status",
    "Transfer ID",
    "External Account ID",
    "Error Message",
    "Funding Source",
    "Original File",
    "Processed By",
    "Escrow ID",
]

LEDGER_STATUS = {
    PayoutStatus.SUCCESS: "CLEARED",
    PayoutStatus.PENDING: "PENDING",
    PayoutStatus.FAILED: "VOID",
    PayoutStatus.SKIPPED: "SKIPPED",
}


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def _ledger_date(ts: datetime) -> str:
    return ts.strftime("%m/%d/%Y")


def _sum(results: Iterable[PayoutResult], status: PayoutStatus) -> Decimal:
    return sum((r.amount for r in results if r.status == status), Decimal("0"))


def _render(headers: list[str], rows: list[list[object]]) -> str:
    return "\n".join([join_csv_row(headers), *(join_csv_row(row) for row in rows)])


def _file_name(config: ReconciliationConfig, kind: str, batch_id: str, generated_at: datetime) -> str:
    return f"{config.file_prefix}_{kind}_{batch_id}_{generated_at.date().isoformat()}.csv"


class ReconciliationGenerator:
    """Renders the reconciliation exports for one batch."""

    def __init__(self, config: ReconciliationConfig | None = None) -> None:
        self._config = config or ReconciliationConfig()

    def positive_pay(
        self,
        results: Sequence[PayoutResult],
        batch_id: str,
        generated_at: datetime | None = None,
    ) -> ReconciliationFile:
        generated_at = generated_at or datetime.now(timezone.utc)
        cleared = [r for r in results if r.status == PayoutStatus.SUCCESS]
        width = self._config.wire_number_width

        rows: list[list[object]] = [
            [
                _ledger_date(r.processed_at),
                (r.transfer_id or "")[:width],
                r.payee_name,
                _money(r.amount),
                "CLEARED",
                r.payment_rail.upper(),
                r.reference_id,
                r.transfer_id or "",
            ]
            for r in cleared
        ]

        return ReconciliationFile(
            file_name=_file_name(self._config, "PositivePay", batch_id, generated_at),
            content=_render(POSITIVE_PAY_HEADERS, rows),
            mime_type=CSV_MIME_TYPE,
            generated_at=generated_at,
            record_count=len(cleared),
            total_amount=_sum(cleared, PayoutStatus.SUCCESS),
            format=ReconciliationFormat.POSITIVE_PAY,
        )

    def bank_reconciliation(
        self,
        results: Sequence[PayoutResult],
        batch_id: str,
        include_voided: bool = True,
        include_pending: bool = True,
        generated_at: datetime | None = None,
    ) -> ReconciliationFile:
        generated_at = generated_at or datetime.now(timezone.utc)
        included = [
            r for r in results
            if not (r.status == PayoutStatus.FAILED and not include_voided)
            and not (r.status == PayoutStatus.PENDING and not include_pending)
        ]

        balance = Decimal("0")
        rows: list[list[object]] = []
        for r in included:
            if r.status == PayoutStatus.SUCCESS:
                balance -= r.amount
            date = _ledger_date(r.processed_at)
            rows.append([
                date,
                date,  # ACH/wire post same day
                f"{r.payee_name} - {r.reference_id}",
                _money(r.amount) if r.status == PayoutStatus.SUCCESS else "",
                "",
                _money(balance),
                r.reference_id,
                r.payment_rail.upper(),
                LEDGER_STATUS[r.status],
                r.transfer_id or "",
                r.error_message or "",
            ])

        total_cleared = _sum(included, PayoutStatus.SUCCESS)
        total_voided = _sum(included, PayoutStatus.FAILED)

        blank = len(BANK_RECON_HEADERS) * [""]
        summary = [["", "", "TOTAL CLEARED", _money(total_cleared), *blank[4:]]]
        if total_voided > 0:
            summary.append(["", "", "TOTAL VOIDED/FAILED", "", "", _money(total_voided), *blank[6:]])

        content = _render(BANK_RECON_HEADERS, rows) + "\n\n" + "\n".join(join_csv_row(s) for s in summary)

        return ReconciliationFile(
            file_name=_file_name(self._config, "BankRecon", batch_id, generated_at),
            content=content,
            mime_type=CSV_MIME_TYPE,
            generated_at=generated_at,
            record_count=len(included),
            total_amount=total_cleared,
            format=ReconciliationFormat.BANK_RECONCILIATION,
        )

    def detailed_report(
        self,
        results: Sequence[PayoutResult],
        batch_id: str,
        metadata: BatchMetadata | None = None,
        generated_at: datetime | None = None,
    ) -> ReconciliationFile:
        generated_at = generated_at or datetime.now(timezone.utc)
        metadata = metadata or BatchMetadata()

        rows: list[list[object]] = [
            [
                batch_id,
                r.line_number,
                r.processed_at.isoformat(),
                r.payee_name,
                _money(r.amount),
                r.reference_id,
                r.payment_rail.upper(),
                r.status.upper(),
                r.provider_status or "",
                r.transfer_id or "",
                r.external_account_id or "",
                r.error_message or "",
                metadata.funding_source_id or "",
                metadata.original_file_name or "",
                metadata.processed_by or "",
                metadata.escrow_id or "",
            ]
            for r in results
        ]

        return ReconciliationFile(
            file_name=_file_name(self._config, "DetailedReport", batch_id, generated_at),
            content=_render(DETAILED_HEADERS, rows),
            mime_type=CSV_MIME_TYPE,
            generated_at=generated_at,
            record_count=len(results),
            total_amount=_sum(results, PayoutStatus.SUCCESS),
            format=ReconciliationFormat.DETAILED,
        )

    def all_files(
        self,
        results: Sequence[PayoutResult],
        batch_id: str,
        metadata: BatchMetadata | None = None,
        generated_at: datetime | None = None,
    ) -> list[ReconciliationFile]:
        generated_at = generated_at or datetime.now(timezone.utc)
        return [
            self.positive_pay(results, batch_id, generated_at=generated_at),
            self.bank_reconciliation(results, batch_id, generated_at=generated_at),
            self.detailed_report(results, batch_id, metadata, generated_at=generated_at),
        ]

    def publish(
        self, files: Iterable[ReconciliationFile], store: IFileStore, batch_id: str
    ) -> list[str]:
        """Write rendered exports under ``<key_prefix>/<batch_id>/``."""
        paths = []
        for f in files:
            path = store.write(
                f"{self._config.key_prefix}/{batch_id}/{f.file_name}",
                f.content.encode("utf-8"),
                content_type=f.mime_type,
            )
            paths.append(path)
        logger.info("published reconciliation files", extra={"batch_id": batch_id, "file_count": len(paths)})
        return paths


# ---------------------------------------------------------------------------
# Module-level conveniences
# ---------------------------------------------------------------------------

def generate_positive_pay_file(
    results: Sequence[PayoutResult], batch_id: str, settings: AppSettings | None = None
) -> ReconciliationFile:
    return _generator(settings).positive_pay(results, batch_id)


def generate_bank_reconciliation_file(
    results: Sequence[PayoutResult],
    batch_id: str,
    include_voided: bool = True,
    include_pending: bool = True,
    settings: AppSettings | None = None,
) -> ReconciliationFile:
    return _generator(settings).bank_reconciliation(
        results, batch_id, include_voided=include_voided, include_pending=include_pending,
    )


def generate_detailed_report(
    results: Sequence[PayoutResult],
    batch_id: str,
    metadata: BatchMetadata | None = None,
    settings: AppSettings | None = None,
) -> ReconciliationFile:
    return _generator(settings).detailed_report(results, batch_id, metadata)


def generate_all_reconciliation_files(
    results: Sequence[PayoutResult],
    batch_id: str,
    metadata: BatchMetadata | None = None,
    settings: AppSettings | None = None,
) -> list[ReconciliationFile]:
    return _generator(settings).all_files(results, batch_id, metadata)


def publish_reconciliation_files(
    files: Iterable[ReconciliationFile],
    store: IFileStore,
    batch_id: str,
    settings: AppSettings | None = None,
) -> list[str]:
    return _generator(settings).publish(files, store, batch_id)


def _generator(settings: AppSettings | None) -> ReconciliationGenerator:
    if settings is None:
        return ReconciliationGenerator()
    return ReconciliationGenerator(settings.reconciliation)
