"""Mock payment-rail provider for local development and testing.

Keeps everything in memory. No real money moves.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any

from wirebatch.core.exceptions import ProviderError
from wirebatch.models.provider import (
    ExternalAccount,
    ExternalAccountRequest,
    Transfer,
    TransferRequest,
)


class MockRailProvider:
    """IPaymentProvider that honours idempotency keys and can inject failures."""

    def __init__(self, initial_state: str = "payment_submitted") -> None:
        self._initial_state = initial_state
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._accounts: dict[str, ExternalAccount] = {}
        self._transfers_by_key: dict[str, Transfer] = {}
        self._transfers: dict[str, Transfer] = {}
        self._account_failures: dict[str, str] = {}
        self._transfer_failures: dict[str, str] = {}
        self._account_owner: dict[str, str] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def fail_account_for(self, payee_name: str, message: str = "account rejected") -> None:
        """Make tokenization fail for a payee."""
        self._account_failures[payee_name] = message

    def fail_transfer_for(self, payee_name: str, message: str = "transfer rejected") -> None:
        """Make transfers to a payee's tokenized account fail."""
        self._transfer_failures[payee_name] = message

    def clear_failures(self) -> None:
        self._account_failures.clear()
        self._transfer_failures.clear()

    def set_transfer_state(self, transfer_id: str, state: str) -> None:
        self._transfers[transfer_id] = self._transfers[transfer_id].model_copy(update={"state": state})

    @property
    def accounts(self) -> dict[str, ExternalAccount]:
        return dict(self._accounts)

    @property
    def transfers(self) -> dict[str, Transfer]:
        return dict(self._transfers)

    def create_external_account(
        self, request: ExternalAccountRequest, idempotency_key: str
    ) -> ExternalAccount:
        self.calls.append(("create_external_account", {"idempotency_key": idempotency_key}))
        message = self._account_failures.get(request.account_owner_name)
        if message is not None:
            raise ProviderError("create external account", f"Failed to create external account: {message}", 400)

        with self._lock:
            if idempotency_key in self._accounts:
                return self._accounts[idempotency_key]
            account = ExternalAccount(id=f"ext_{next(self._ids):06d}", last_4=request.account_number[-4:])
            self._accounts[idempotency_key] = account
            self._account_owner[account.id] = request.account_owner_name
            return account

    def create_transfer(self, request: TransferRequest, idempotency_key: str) -> Transfer:
        self.calls.append((
            "create_transfer",
            {"idempotency_key": idempotency_key, "payment_rail": str(request.payment_rail)},
        ))
        owner = self._account_owner.get(request.external_account_id, "")
        message = self._transfer_failures.get(owner)
        if message is not None:
            raise ProviderError("create transfer", f"Failed to create transfer: {message}", 400)

        with self._lock:
            if idempotency_key in self._transfers_by_key:
                return self._transfers_by_key[idempotency_key]
            transfer = Transfer(id=f"txn_{next(self._ids):06d}", state=self._initial_state, amount=request.amount)
            self._transfers_by_key[idempotency_key] = transfer
            self._transfers[transfer.id] = transfer
            return transfer

    def get_transfer(self, transfer_id: str) -> Transfer:
        self.calls.append(("get_transfer", {"transfer_id": transfer_id}))
        if transfer_id not in self._transfers:
            raise ProviderError("get transfer", f"Transfer not found: {transfer_id}", 404)
        return self._transfers[transfer_id]
