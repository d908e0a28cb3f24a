"""PayoutExecutor: tokenize destinations and dispatch transfers per item.

Every item is failure-isolated: a provider error on one line is recorded as a
``failed`` result and the batch moves on. Nothing is retried inline; retry is
a separate call that only touches the failed subset.

Bank details are held in memory only. Nothing here logs a routing number or
more than the last four account digits.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from wirebatch.core.config import AppSettings
from wirebatch.core.protocols import IPaymentProvider
from wirebatch.core.types import BatchId, IdempotencyKey
from wirebatch.models.execution import (
    BatchPayoutRequest,
    BatchPayoutResult,
    PaymentRail,
    PayoutResult,
    PayoutStatus,
)
from wirebatch.models.payout import AccountType, ParsedPayoutItem
from wirebatch.models.provider import ExternalAccountRequest, TransferRequest
from wirebatch.routing.router import route_payment

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_batch_id(now: datetime | None = None) -> BatchId:
    """WB-<year>-<last 8 digits of the epoch millisecond clock>."""
    now = now or _utcnow()
    millis = int(now.timestamp() * 1000)
    return f"WB-{now.year}-{str(millis)[-8:]}"


def _account_batch_id(request: BatchPayoutRequest) -> BatchId:
    return request.account_batch_id or request.batch_id


def split_payee_name(payee_name: str) -> tuple[str, str]:
    parts = payee_name.strip().split()
    first = parts[0] if parts else "Unknown"
    last = " ".join(parts[1:]) or "Payee"
    return first, last


class PayoutExecutor:
    """Runs execution passes against an injected payment-rail provider."""

    def __init__(
        self,
        provider: IPaymentProvider,
        settings: AppSettings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._provider = provider
        self._settings = settings or AppSettings()
        self._clock = clock or _utcnow

    # ---- idempotency keys ----

    def account_key(self, batch_id: BatchId, item: ParsedPayoutItem) -> IdempotencyKey:
        """Stable per line, so a retry never creates a second payee account."""
        prefix = self._settings.provider.idempotency_prefix
        return f"{prefix}-{batch_id}-ext-{item.reference_id}-{item.line_number}"

    def transfer_key(self, batch_id: BatchId, item: ParsedPayoutItem) -> IdempotencyKey:
        """Unique per attempt."""
        prefix = self._settings.provider.idempotency_prefix
        return f"{prefix}-{batch_id}-txfr-{item.reference_id}-{uuid.uuid4().hex}"

    # ---- execution ----

    def execute(self, request: BatchPayoutRequest) -> BatchPayoutResult:
        items = list(request.items)
        logger.info(
            "executing batch",
            extra={
                "batch_id": request.batch_id,
                "item_count": len(items),
                "source_currency": request.source_currency,
                "dry_run": request.dry_run,
            },
        )

        max_workers = max(1, self._settings.execution.max_workers)
        if max_workers == 1 or len(items) <= 1:
            results = [self._process_item(request, item) for item in items]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(pool.map(lambda item: self._process_item(request, item), items))

        result = self._summarize(request, results)
        logger.info(
            "batch complete",
            extra={
                "batch_id": request.batch_id,
                "success_count": result.total_success,
                "failed_count": result.total_failed,
                "skipped_count": result.total_skipped,
                "pending_count": result.total_pending,
            },
        )
        return result

    def _process_item(self, request: BatchPayoutRequest, item: ParsedPayoutItem) -> PayoutResult:
        rail = route_payment(item.amount_dollars, self._settings.routing)

        if not item.has_bank_details:
            return self._result(item, rail, PayoutStatus.SKIPPED, error_message="Missing bank account details")

        if request.dry_run:
            return self._result(item, rail, PayoutStatus.PENDING, transfer_id=f"dry-run-{uuid.uuid4()}")

        try:
            account = self._provider.create_external_account(
                self._account_request(item), self.account_key(_account_batch_id(request), item),
            )
            transfer = self._provider.create_transfer(
                TransferRequest(
                    amount=item.amount_dollars,
                    funding_source_id=request.funding_source_id,
                    source_currency=request.source_currency,
                    external_account_id=account.id,
                    payment_rail=rail,
                ),
                self.transfer_key(request.batch_id, item),
            )
        except Exception as exc:
            logger.error(
                "payout failed",
                extra={"batch_id": request.batch_id, "line_number": item.line_number, "error": str(exc)},
            )
            return self._result(item, rail, PayoutStatus.FAILED, error_message=str(exc) or type(exc).__name__)

        logger.info(
            "payout dispatched",
            extra={
                "batch_id": request.batch_id,
                "line_number": item.line_number,
                "rail": str(rail),
                "account_last4": item.account_last4,
            },
        )
        return self._result(
            item,
            rail,
            PayoutStatus.SUCCESS,
            transfer_id=transfer.id,
            external_account_id=account.id,
            provider_status=transfer.state,
        )

    @staticmethod
    def _account_request(item: ParsedPayoutItem) -> ExternalAccountRequest:
        first, last = split_payee_name(item.payee_name)
        return ExternalAccountRequest(
            first_name=first,
            last_name=last,
            account_owner_name=item.payee_name,
            routing_number=item.routing_number,
            account_number=item.account_number,
            checking_or_savings=item.account_type or AccountType.CHECKING,
        )

    def _result(
        self,
        item: ParsedPayoutItem,
        rail: PaymentRail,
        status: PayoutStatus,
        **fields: str | None,
    ) -> PayoutResult:
        return PayoutResult(
            line_number=item.line_number,
            reference_id=item.reference_id,
            payee_name=item.payee_name,
            amount=item.amount_dollars,
            payment_rail=rail,
            status=status,
            processed_at=self._clock(),
            **fields,
        )

    def _summarize(
        self, request: BatchPayoutRequest, results: Iterable[PayoutResult]
    ) -> BatchPayoutResult:
        item_count = len(request.items)
        ordered = sorted(results, key=lambda r: r.line_number)
        counts = {status: 0 for status in PayoutStatus}
        total_amount = Decimal("0")
        for r in ordered:
            counts[r.status] += 1
            if r.status in (PayoutStatus.SUCCESS, PayoutStatus.PENDING):
                total_amount += r.amount

        return BatchPayoutResult(
            batch_id=request.batch_id,
            success=counts[PayoutStatus.FAILED] == 0 and counts[PayoutStatus.SKIPPED] < item_count,
            total_processed=item_count,
            total_success=counts[PayoutStatus.SUCCESS],
            total_failed=counts[PayoutStatus.FAILED],
            total_skipped=counts[PayoutStatus.SKIPPED],
            total_pending=counts[PayoutStatus.PENDING],
            total_amount=total_amount,
            results=ordered,
            processed_at=self._clock(),
            can_retry=counts[PayoutStatus.FAILED] > 0,
            account_batch_id=_account_batch_id(request),
        )

    # ---- retry ----

    def retry(
        self,
        prior: BatchPayoutResult,
        original_items: Sequence[ParsedPayoutItem],
        funding_source_id: str,
        source_currency: str = "usdb",
    ) -> BatchPayoutResult:
        """Re-run only the failed items of ``prior`` under a fresh batch id.

        Account keys stay scoped to the batch that first tokenized each line,
        so the provider hands back the existing payee account. The outcome is
        returned on its own; merging it with ``prior`` is the caller's job.
        """
        by_key = {(i.line_number, i.reference_id): i for i in original_items}
        to_retry = [
            by_key[(r.line_number, r.reference_id)]
            for r in prior.failed_results
            if (r.line_number, r.reference_id) in by_key
        ]
        batch_id = f"retry-{uuid.uuid4()}"
        account_batch_id = prior.account_batch_id or prior.batch_id

        if not to_retry:
            return BatchPayoutResult(
                batch_id=batch_id,
                success=True,
                processed_at=self._clock(),
                can_retry=False,
                account_batch_id=account_batch_id,
            )

        logger.info(
            "retrying failed payouts",
            extra={"batch_id": batch_id, "prior_batch_id": prior.batch_id, "item_count": len(to_retry)},
        )
        return self.execute(BatchPayoutRequest(
            batch_id=batch_id,
            funding_source_id=funding_source_id,
            source_currency=source_currency,
            items=to_retry,
            dry_run=False,
            account_batch_id=account_batch_id,
        ))

    # ---- status ----

    def check_transfer_statuses(self, result: BatchPayoutResult) -> dict[str, str]:
        """Current provider state per transfer id for the successful items."""
        statuses: dict[str, str] = {}
        for r in result.results:
            if r.status != PayoutStatus.SUCCESS or not r.transfer_id:
                continue
            try:
                statuses[r.transfer_id] = self._provider.get_transfer(r.transfer_id).state
            except Exception as exc:
                logger.warning(
                    "transfer status lookup failed",
                    extra={"transfer_id": r.transfer_id, "error": str(exc)},
                )
                statuses[r.transfer_id] = "unknown"
        return statuses


def execute_payouts(
    request: BatchPayoutRequest,
    provider: IPaymentProvider,
    settings: AppSettings | None = None,
) -> BatchPayoutResult:
    return PayoutExecutor(provider, settings).execute(request)


def retry_failed_payouts(
    prior: BatchPayoutResult,
    original_items: Sequence[ParsedPayoutItem],
    provider: IPaymentProvider,
    funding_source_id: str,
    source_currency: str = "usdb",
    settings: AppSettings | None = None,
) -> BatchPayoutResult:
    return PayoutExecutor(provider, settings).retry(
        prior, original_items, funding_source_id, source_currency,
    )
