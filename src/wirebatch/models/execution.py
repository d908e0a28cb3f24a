"""Execution request/result models for a payout pass."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from wirebatch.models.payout import ParsedPayoutItem


class PaymentRail(StrEnum):
    WIRE = "wire"  # same-day high-value
    RTP = "rtp"  # near-real-time
    ACH = "ach"


class RailClass(StrEnum):
    LARGE_VALUE = "large_value"
    SMALL_VALUE = "small_value"


class PayoutStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"
    SKIPPED = "skipped"


class BatchPayoutRequest(BaseModel):
    """Inputs for one execution pass."""

    model_config = {"frozen": True}

    batch_id: str
    funding_source_id: str
    source_currency: str = "usdb"
    items: tuple[ParsedPayoutItem, ...] = ()
    dry_run: bool = False
    account_batch_id: Optional[str] = None  # scopes account keys; defaults to batch_id


class PayoutResult(BaseModel):
    """Terminal outcome for one item in an execution pass.

    Holds no routing or account numbers; safe to persist and export.
    """

    model_config = {"frozen": True}

    line_number: int
    reference_id: str
    payee_name: str
    amount: Decimal  # dollars
    payment_rail: PaymentRail
    status: PayoutStatus
    transfer_id: Optional[str] = None
    external_account_id: Optional[str] = None
    provider_status: Optional[str] = None
    error_message: Optional[str] = None
    processed_at: datetime


class BatchPayoutResult(BaseModel):
    """One execution pass. A failed pass is itself valid retry input."""

    model_config = {"frozen": True}

    batch_id: str
    success: bool
    total_processed: int = 0
    total_success: int = 0
    total_failed: int = 0
    total_skipped: int = 0
    total_pending: int = 0
    total_amount: Decimal = Decimal("0")
    results: tuple[PayoutResult, ...] = Field(default_factory=tuple)
    processed_at: datetime
    can_retry: bool = False
    account_batch_id: Optional[str] = None  # batch whose account keys retries reuse

    @property
    def failed_results(self) -> list[PayoutResult]:
        return [r for r in self.results if r.status == PayoutStatus.FAILED]
