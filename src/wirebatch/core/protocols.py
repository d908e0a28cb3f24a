"""Protocol interfaces for the pipeline's external collaborators.

Structural typing, no inheritance required; tests substitute in-memory
implementations and can check them with isinstance().
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from wirebatch.core.types import IdempotencyKey
from wirebatch.models.provider import (
    ExternalAccount,
    ExternalAccountRequest,
    Transfer,
    TransferRequest,
)


# ---------------------------------------------------------------------------
# Payment-rail provider
# ---------------------------------------------------------------------------

@runtime_checkable
class IPaymentProvider(Protocol):
    """Tokenize destinations and move money over a named rail.

    Both mutating operations accept an idempotency key; failures surface as
    exceptions carrying a human-readable message.
    """

    def create_external_account(
        self, request: ExternalAccountRequest, idempotency_key: IdempotencyKey
    ) -> ExternalAccount: ...

    def create_transfer(self, request: TransferRequest, idempotency_key: IdempotencyKey) -> Transfer: ...

    def get_transfer(self, transfer_id: str) -> Transfer: ...


# ---------------------------------------------------------------------------
# Artifact storage
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """Write-only sink for rendered exports. Returns the stored path."""

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...
