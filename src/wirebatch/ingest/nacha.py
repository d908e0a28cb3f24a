"""Fixed-width (NACHA) batch file parsing.

Records are 94 characters; the record type is the first character.

    1  File Header        (skipped)
    5  Batch Header       supplies the fallback reference id
    6  Entry Detail       one payout
    7  Addenda            (skipped)
    8  Batch Control      (skipped)
    9  File Control       (skipped)

Entry Detail layout, zero-based half-open offsets:

    [1:3)    transaction code
    [3:12)   receiving DFI routing number (8 digits + check digit)
    [12:29)  DFI account number, space padded
    [29:39)  amount in cents, zero filled
    [39:54)  individual id number (reference id)
    [54:76)  individual name (payee)
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from wirebatch.core.exceptions import LineParseError
from wirebatch.models.payout import AccountType, ParsedPayoutItem

logger = logging.getLogger(__name__)

NACHA_RECORD_LENGTH = 94

FILE_HEADER = "1"
BATCH_HEADER = "5"
ENTRY_DETAIL = "6"

# Live credits only. Debits (27/37), prenotes (23/33) and zero-dollar
# entries are legitimately not payouts.
CREDIT_CODES = {
    "22": AccountType.CHECKING,
    "32": AccountType.SAVINGS,
    "42": AccountType.CHECKING,  # general ledger credit
    "52": AccountType.CHECKING,  # loan account credit
}

_ROUTING = re.compile(r"^\d{9}$")
_DIGITS = re.compile(r"^\d+$")
_FILE_HEADER = re.compile(r"^1\d{2}")


def looks_like_nacha(first_line: str) -> bool:
    return len(first_line) >= NACHA_RECORD_LENGTH and bool(_FILE_HEADER.match(first_line))


def batch_reference(line: str) -> str:
    """Company entry description of a batch header record."""
    return line[53:63].strip()


def parse_entry_detail(
    line: str, line_number: int, batch_ref: str = ""
) -> Optional[ParsedPayoutItem]:
    """Parse one Entry Detail record.

    Returns None for non-credit transaction codes. Raises LineParseError when
    a credit record is malformed.
    """
    transaction_code = line[1:3]
    account_type = CREDIT_CODES.get(transaction_code)
    if account_type is None:
        return None

    routing_number = line[3:12].strip()
    if not _ROUTING.match(routing_number):
        raise LineParseError(
            line_number, f"Invalid routing number format: {routing_number}", line
        )

    account_number = line[12:29].strip()
    if not account_number:
        raise LineParseError(line_number, "Missing account number", line)

    amount_str = line[29:39].strip()
    if not _DIGITS.match(amount_str) or int(amount_str) <= 0:
        raise LineParseError(line_number, f"Invalid amount: {amount_str}", line)

    payee_name = line[54:76].strip()
    if not payee_name:
        raise LineParseError(line_number, "Missing payee name", line)

    reference_id = line[39:54].strip() or batch_ref or f"LINE-{line_number}"

    return ParsedPayoutItem(
        line_number=line_number,
        payee_name=payee_name,
        routing_number=routing_number,
        account_number=account_number,
        amount_cents=int(amount_str),
        reference_id=reference_id,
        account_type=account_type,
        raw_line=line,
    )


def parse_nacha_lines(
    lines: list[str],
) -> tuple[list[ParsedPayoutItem], list[LineParseError]]:
    """Walk every record, collecting items and line-scoped failures."""
    items: list[ParsedPayoutItem] = []
    errors: list[LineParseError] = []
    batch_ref = ""

    for index, line in enumerate(lines):
        line_number = index + 1
        if len(line) < NACHA_RECORD_LENGTH:
            continue

        record_type = line[0]
        if record_type == BATCH_HEADER:
            batch_ref = batch_reference(line)
        elif record_type == ENTRY_DETAIL:
            try:
                item = parse_entry_detail(line, line_number, batch_ref)
            except LineParseError as exc:
                logger.warning(
                    "rejected entry detail record",
                    extra={"line_number": line_number, "reason": str(exc)},
                )
                errors.append(exc)
                continue
            if item is not None:
                items.append(item)

    return items, errors
