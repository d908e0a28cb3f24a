"""Parsed payout item, the normalized structure every pipeline stage operates on.

Every export file, regardless of source format, is parsed into this schema.
Amounts are held as integer cents; the dollar view is derived so the two can
never disagree.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

CENT = Decimal("0.01")


class FileType(StrEnum):
    NACHA = "nacha"
    CSV = "csv"
    UNKNOWN = "unknown"


class AccountType(StrEnum):
    CHECKING = "checking"
    SAVINGS = "savings"


class ParsedPayoutItem(BaseModel):
    """One disbursement instruction extracted from a source file."""

    model_config = {"frozen": True}

    # --- Source correlation ---
    line_number: int  # 1-based
    reference_id: str

    # --- Payee & bank details ---
    payee_name: str
    routing_number: str = ""  # empty only when the source omitted it
    account_number: str = ""
    account_type: Optional[AccountType] = None

    # --- Money ---
    amount_cents: int = Field(gt=0)

    memo: Optional[str] = None
    raw_line: Optional[str] = Field(default=None, repr=False)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def amount_dollars(self) -> Decimal:
        return (Decimal(self.amount_cents) / 100).quantize(CENT)

    @property
    def has_bank_details(self) -> bool:
        return bool(self.routing_number) and bool(self.account_number)

    @property
    def account_last4(self) -> str:
        return self.account_number[-4:]


class ParseError(BaseModel):
    """A line-scoped (or, at line 0/1, document-scoped) parse failure."""

    model_config = {"frozen": True}

    line_number: int
    message: str
    raw_line: Optional[str] = None


class ParseResult(BaseModel):
    """Outcome of parsing one uploaded export."""

    model_config = {"frozen": True}

    success: bool
    file_type: FileType
    file_name: str
    items: tuple[ParsedPayoutItem, ...] = ()
    errors: tuple[ParseError, ...] = ()
    warnings: tuple[str, ...] = ()
    content_sha256: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_items(self) -> int:
        return len(self.items)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_amount(self) -> Decimal:
        return sum((item.amount_dollars for item in self.items), Decimal("0"))

    @property
    def is_document_failure(self) -> bool:
        """True when the upload is unusable as a whole and must be re-uploaded."""
        return not self.items and bool(self.errors)
