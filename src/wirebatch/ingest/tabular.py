"""Tabular (CSV) export parsing with heuristic header detection."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from wirebatch.core.exceptions import LineParseError
from wirebatch.ingest.csv_text import split_csv_line
from wirebatch.models.payout import CENT, AccountType, ParsedPayoutItem

logger = logging.getLogger(__name__)

# Synonym groups, checked in this order against every header cell. The
# first column to match a group owns it.
COLUMN_PATTERNS: dict[str, tuple[re.Pattern[str], Optional[re.Pattern[str]]]] = {
    "payee_name": (
        re.compile(r"payee|beneficiary|recipient|name|vendor"),
        re.compile(r"bank|account.*(number|#|no)|acct|routing"),
    ),
    "routing_number": (re.compile(r"routing|aba|transit"), None),
    "account_number": (re.compile(r"account|acct"), re.compile(r"type|name|holder")),
    "amount": (re.compile(r"amount|payment|total|sum"), re.compile(r"type|method")),
    "reference_id": (
        re.compile(r"reference|deal|order|file.*number|escrow.*number|transaction"),
        None,
    ),
    "account_type": (re.compile(r"account.*type|type.*account"), None),
    "memo": (re.compile(r"memo|note|description|purpose"), None),
}

REQUIRED_COLUMNS = ("payee_name", "amount")

_NON_DIGIT = re.compile(r"\D")
_CURRENCY_NOISE = re.compile(r"[$,\s]")


@dataclass
class ColumnMap:
    """Header-derived column positions plus any ambiguity found on the way."""

    positions: dict[str, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def get(self, values: list[str], key: str) -> Optional[str]:
        pos = self.positions.get(key)
        if pos is None or pos >= len(values):
            return None
        return values[pos]

    @property
    def missing_required(self) -> list[str]:
        return [key for key in REQUIRED_COLUMNS if key not in self.positions]


def detect_columns(header_row: str) -> ColumnMap:
    columns = [c.lower().strip() for c in split_csv_line(header_row)]
    column_map = ColumnMap()

    for index, col in enumerate(columns):
        claimed: list[str] = []
        for key, (pattern, exclude) in COLUMN_PATTERNS.items():
            if not pattern.search(col):
                continue
            if exclude is not None and exclude.search(col):
                continue
            claimed.append(key)
            column_map.positions.setdefault(key, index)
        if len(claimed) > 1:
            column_map.warnings.append(
                f"Column {index + 1} ({col!r}) matches several fields: {', '.join(claimed)}"
            )

    return column_map


def parse_amount_cents(raw: str) -> int:
    """'$1,234.56' -> 123456. Raises ValueError for anything non-positive."""
    cleaned = _CURRENCY_NOISE.sub("", raw)
    try:
        dollars = Decimal(cleaned)
        if not dollars.is_finite():
            raise ValueError(raw)
        # quantize signals InvalidOperation past the context precision
        cents = int(dollars.quantize(CENT, rounding=ROUND_HALF_UP) * 100)
    except InvalidOperation as exc:
        raise ValueError(raw) from exc
    if cents <= 0:
        raise ValueError(raw)
    return cents


def parse_row(line: str, line_number: int, column_map: ColumnMap) -> ParsedPayoutItem:
    values = split_csv_line(line)

    payee_name = (column_map.get(values, "payee_name") or "").strip()
    if not payee_name:
        raise LineParseError(line_number, "Missing payee name", line)

    routing_number = _NON_DIGIT.sub("", column_map.get(values, "routing_number") or "")
    account_number = _NON_DIGIT.sub("", column_map.get(values, "account_number") or "")

    amount_str = column_map.get(values, "amount")
    if not amount_str:
        raise LineParseError(line_number, "Missing amount", line)
    try:
        amount_cents = parse_amount_cents(amount_str)
    except ValueError:
        raise LineParseError(line_number, f"Invalid amount: {amount_str}", line) from None

    reference_id = (column_map.get(values, "reference_id") or "").strip()

    account_type = AccountType.CHECKING
    type_str = (column_map.get(values, "account_type") or "").lower()
    if "saving" in type_str:
        account_type = AccountType.SAVINGS

    memo = column_map.get(values, "memo")

    return ParsedPayoutItem(
        line_number=line_number,
        payee_name=payee_name,
        routing_number=routing_number,
        account_number=account_number,
        amount_cents=amount_cents,
        reference_id=reference_id or f"LINE-{line_number}",
        account_type=account_type,
        memo=memo.strip() if memo is not None else None,
        raw_line=line,
    )


def parse_csv_rows(
    lines: list[str], column_map: ColumnMap
) -> tuple[list[ParsedPayoutItem], list[LineParseError], list[str]]:
    """Parse every data row after the header."""
    items: list[ParsedPayoutItem] = []
    errors: list[LineParseError] = []
    warnings: list[str] = []

    for index in range(1, len(lines)):
        line = lines[index].strip()
        if not line:
            continue
        line_number = index + 1

        try:
            item = parse_row(line, line_number, column_map)
        except LineParseError as exc:
            errors.append(exc)
            continue

        if not item.has_bank_details:
            # Bank details often arrive in a separate manual step.
            warnings.append(
                f"Line {line_number}: Missing bank details for {item.payee_name}, may need manual entry"
            )
            logger.info("row missing bank details", extra={"line_number": line_number})
        items.append(item)

    return items, errors, warnings
