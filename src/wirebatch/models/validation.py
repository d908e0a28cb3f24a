"""Pre-execution validation models."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, computed_field

from wirebatch.models.execution import PaymentRail


class IssueCode(StrEnum):
    MISSING_BANK_DETAILS = "MISSING_BANK_DETAILS"
    INVALID_ROUTING_FORMAT = "INVALID_ROUTING_FORMAT"
    ROUTING_CHECKSUM = "ROUTING_CHECKSUM"
    NON_POSITIVE_AMOUNT = "NON_POSITIVE_AMOUNT"


class ValidationIssue(BaseModel):
    """A line-level business-rule failure found before execution."""

    model_config = {"frozen": True}

    line_number: int
    code: IssueCode
    message: str


class ValidationSummary(BaseModel):
    """Routing-aware preview of a parsed batch."""

    model_config = {"frozen": True}

    total_items: int = 0
    total_amount: Decimal = Decimal("0")

    large_value_rail: PaymentRail = PaymentRail.WIRE
    large_value_count: int = 0
    large_value_total: Decimal = Decimal("0")

    small_value_rail: PaymentRail = PaymentRail.ACH
    small_value_count: int = 0
    small_value_total: Decimal = Decimal("0")

    missing_bank_details: int = 0
    errors: tuple[ValidationIssue, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid(self) -> bool:
        return not self.errors
