"""Payment-rail provider request/response models."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from wirebatch.models.execution import PaymentRail
from wirebatch.models.payout import AccountType


class ExternalAccountRequest(BaseModel):
    """Raw bank details to tokenize. Held in memory only."""

    model_config = {"frozen": True}

    first_name: str
    last_name: str
    account_owner_name: str
    routing_number: str
    account_number: str
    checking_or_savings: AccountType = AccountType.CHECKING
    bank_name: str = "Unknown"


class ExternalAccount(BaseModel):
    """Provider-side tokenized destination account."""

    id: str
    last_4: str = ""
    active: bool = True


class TransferRequest(BaseModel):
    model_config = {"frozen": True}

    amount: Decimal
    funding_source_id: str
    source_currency: str
    external_account_id: str
    payment_rail: PaymentRail
    destination_currency: str = "usd"


class Transfer(BaseModel):
    id: str
    state: str = "awaiting_funds"
    amount: Optional[Decimal] = None
