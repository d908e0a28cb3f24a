"""Plain-text batch summary for operator display."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from wirebatch.models.execution import PayoutResult, PayoutStatus

RULE = "=" * 63


def format_usd(amount: Decimal) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def render_summary_text(results: Sequence[PayoutResult]) -> str:
    by_status: dict[PayoutStatus, list[PayoutResult]] = {s: [] for s in PayoutStatus}
    for r in results:
        by_status[r.status].append(r)

    successful = by_status[PayoutStatus.SUCCESS]
    failed = by_status[PayoutStatus.FAILED]
    total_success = sum((r.amount for r in successful), Decimal("0"))
    total_failed = sum((r.amount for r in failed), Decimal("0"))

    lines = [
        RULE,
        "BATCH PROCESSING SUMMARY".center(63),
        RULE,
        "",
        f"Total Transactions: {len(results)}",
        "",
        f"Successful:  {len(successful)} transactions  {format_usd(total_success)}",
        f"Failed:      {len(failed)} transactions  {format_usd(total_failed)}",
        f"Pending:     {len(by_status[PayoutStatus.PENDING])} transactions",
        f"Skipped:     {len(by_status[PayoutStatus.SKIPPED])} transactions",
        "",
    ]

    if successful:
        lines.append("SUCCESSFUL PAYMENTS:")
        lines.extend(
            f"  - {r.payee_name}: {format_usd(r.amount)} via {r.payment_rail.upper()}"
            for r in successful
        )
        lines.append("")

    if failed:
        lines.append("FAILED PAYMENTS:")
        lines.extend(
            f"  - {r.payee_name}: {format_usd(r.amount)} - {r.error_message or 'Unknown error'}"
            for r in failed
        )
        lines.append("")

    lines.append(RULE)
    return "\n".join(lines)
