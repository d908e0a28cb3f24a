"""Output file models: reconciliation exports."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel


class ReconciliationFormat(StrEnum):
    POSITIVE_PAY = "positive-pay"
    BANK_RECONCILIATION = "bank-reconciliation"
    DETAILED = "detailed"


class ReconciliationFile(BaseModel):
    """A rendered export ready to hand back to the ledger operator."""

    model_config = {"frozen": True}

    file_name: str
    content: str
    mime_type: str = "text/csv"
    generated_at: datetime
    record_count: int = 0
    total_amount: Decimal = Decimal("0")
    format: ReconciliationFormat


class BatchMetadata(BaseModel):
    """Caller-supplied context repeated on every audit row."""

    funding_source_id: Optional[str] = None
    original_file_name: Optional[str] = None
    processed_by: Optional[str] = None
    escrow_id: Optional[str] = None
