"""Shared test doubles: in-memory backends and record builders."""

from __future__ import annotations

from wirebatch.models.payout import AccountType, ParsedPayoutItem
from wirebatch.persistence.memory_backend import MemoryFileStore
from wirebatch.providers.mock_provider import MockRailProvider

VALID_ROUTING = "021000021"


def make_item(
    line_number: int = 1,
    payee_name: str = "Jane Doe",
    routing_number: str = VALID_ROUTING,
    account_number: str = "123456789",
    amount_cents: int = 10_000,
    reference_id: str | None = None,
    account_type: AccountType | None = AccountType.CHECKING,
) -> ParsedPayoutItem:
    return ParsedPayoutItem(
        line_number=line_number,
        payee_name=payee_name,
        routing_number=routing_number,
        account_number=account_number,
        amount_cents=amount_cents,
        reference_id=reference_id or f"REF-{line_number}",
        account_type=account_type,
    )


def nacha_file_header() -> str:
    return "101 021000021 1234567890260101".ljust(94)


def nacha_batch_header(description: str = "PAYOFFS") -> str:
    return ("5" + " " * 52 + description.ljust(10)).ljust(94)


def nacha_entry(
    transaction_code: str = "22",
    routing_number: str = VALID_ROUTING,
    account_number: str = "123456789",
    amount_cents: int | str = 10_000,
    reference_id: str = "DEAL-1",
    payee_name: str = "JOHN SMITH",
) -> str:
    amount = amount_cents if isinstance(amount_cents, str) else str(amount_cents).zfill(10)
    line = (
        "6"
        + transaction_code
        + routing_number.ljust(9)[:9]
        + account_number.ljust(17)
        + amount.rjust(10)[:10]
        + reference_id.ljust(15)
        + payee_name.ljust(22)
        + "  "
        + "0"
        + "021000020000001"
    )
    assert len(line) == 94, len(line)
    return line


def nacha_control(record_type: str = "8") -> str:
    return (record_type + "2000000001").ljust(94, "0")


__all__ = [
    "MemoryFileStore",
    "MockRailProvider",
    "VALID_ROUTING",
    "make_item",
    "nacha_batch_header",
    "nacha_control",
    "nacha_entry",
    "nacha_file_header",
]
