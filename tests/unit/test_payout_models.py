"""Tests for ParsedPayoutItem / ParseResult models."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from wirebatch.models.payout import FileType, ParseResult
from tests.fakes import make_item


def test_amount_dollars_derived_from_cents():
    item = make_item(amount_cents=123456)
    assert item.amount_dollars == Decimal("1234.56")


def test_amount_must_be_positive():
    with pytest.raises(ValidationError):
        make_item(amount_cents=0)


def test_items_are_immutable():
    item = make_item()
    with pytest.raises(ValidationError):
        item.payee_name = "Someone Else"


def test_has_bank_details_requires_both_numbers():
    assert make_item().has_bank_details
    assert not make_item(routing_number="").has_bank_details
    assert not make_item(account_number="").has_bank_details


def test_raw_line_not_in_repr():
    item = make_item().model_copy(update={"raw_line": "SECRET-LINE"})
    assert "SECRET-LINE" not in repr(item)


def test_parse_result_totals():
    result = ParseResult(
        success=True,
        file_type=FileType.CSV,
        file_name="batch.csv",
        items=[make_item(1, amount_cents=150), make_item(2, amount_cents=250)],
    )
    assert result.total_items == 2
    assert result.total_amount == Decimal("4.00")
    assert not result.is_document_failure
