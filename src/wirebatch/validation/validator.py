"""Pre-execution batch validation. Pure; makes no external calls."""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Iterable

from wirebatch.core.config import RoutingConfig
from wirebatch.models.execution import RailClass
from wirebatch.models.payout import ParsedPayoutItem
from wirebatch.models.validation import IssueCode, ValidationIssue, ValidationSummary
from wirebatch.routing.router import classify_amount, rail_for_class

ABA_WEIGHTS = (3, 7, 1, 3, 7, 1, 3, 7, 1)

_ROUTING = re.compile(r"^[0-9]{9}$")


def aba_checksum(routing_number: str) -> int:
    return sum(int(d) * w for d, w in zip(routing_number, ABA_WEIGHTS))


def validate_routing_number(routing_number: str) -> bool:
    """ABA check: weighted digit sum (3,7,1 repeating) divisible by 10."""
    if not _ROUTING.match(routing_number):
        return False
    return aba_checksum(routing_number) % 10 == 0


def validate_batch(
    items: Iterable[ParsedPayoutItem], routing: RoutingConfig | None = None
) -> ValidationSummary:
    if routing is None:
        routing = RoutingConfig()

    errors: list[ValidationIssue] = []
    total_items = 0
    total_amount = Decimal("0")
    missing_bank_details = 0
    counts = {RailClass.LARGE_VALUE: 0, RailClass.SMALL_VALUE: 0}
    totals = {RailClass.LARGE_VALUE: Decimal("0"), RailClass.SMALL_VALUE: Decimal("0")}

    for item in items:
        total_items += 1
        total_amount += item.amount_dollars

        if not item.has_bank_details:
            missing_bank_details += 1
            errors.append(ValidationIssue(
                line_number=item.line_number,
                code=IssueCode.MISSING_BANK_DETAILS,
                message=f"Missing bank details for {item.payee_name}",
            ))
            continue

        if not _ROUTING.match(item.routing_number):
            errors.append(ValidationIssue(
                line_number=item.line_number,
                code=IssueCode.INVALID_ROUTING_FORMAT,
                message=f"Invalid routing number for {item.payee_name}: {item.routing_number}",
            ))
        elif not validate_routing_number(item.routing_number):
            errors.append(ValidationIssue(
                line_number=item.line_number,
                code=IssueCode.ROUTING_CHECKSUM,
                message=f"Routing number fails ABA checksum for {item.payee_name}: {item.routing_number}",
            ))

        if item.amount_dollars <= 0:
            errors.append(ValidationIssue(
                line_number=item.line_number,
                code=IssueCode.NON_POSITIVE_AMOUNT,
                message=f"Invalid amount for {item.payee_name}: ${item.amount_dollars}",
            ))

        rail_class = classify_amount(item.amount_dollars, routing.wire_threshold)
        counts[rail_class] += 1
        totals[rail_class] += item.amount_dollars

    return ValidationSummary(
        total_items=total_items,
        total_amount=total_amount,
        large_value_rail=rail_for_class(RailClass.LARGE_VALUE, routing),
        large_value_count=counts[RailClass.LARGE_VALUE],
        large_value_total=totals[RailClass.LARGE_VALUE],
        small_value_rail=rail_for_class(RailClass.SMALL_VALUE, routing),
        small_value_count=counts[RailClass.SMALL_VALUE],
        small_value_total=totals[RailClass.SMALL_VALUE],
        missing_bank_details=missing_bank_details,
        errors=errors,
    )
