"""REST client for the payment-rail provider.

Bank details pass through in memory only: request bodies are never logged,
and only the last four account digits appear in log records.
"""

from __future__ import annotations

import logging

import requests

from wirebatch.core.config import ProviderConfig
from wirebatch.core.exceptions import ConfigurationError, ProviderError
from wirebatch.core.types import JsonDict
from wirebatch.models.provider import (
    ExternalAccount,
    ExternalAccountRequest,
    Transfer,
    TransferRequest,
)

logger = logging.getLogger(__name__)


class HttpRailProvider:
    """Production IPaymentProvider over the provider's HTTP API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        customer_id: str,
        timeout: int = 30,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Payment provider API key is required")
        if not customer_id:
            raise ConfigurationError("Payment provider customer id is required")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._customer_id = customer_id
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: ProviderConfig) -> HttpRailProvider:
        return cls(
            base_url=config.base_url,
            api_key=config.api_key,
            customer_id=config.customer_id,
            timeout=config.timeout,
        )

    def _headers(self, idempotency_key: str | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Api-Key": self._api_key,
        }
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        return headers

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        body: JsonDict | None = None,
        idempotency_key: str | None = None,
    ) -> JsonDict:
        logger.debug("provider request", extra={"operation": operation, "method": method, "path": path})
        try:
            resp = self._session.request(
                method,
                f"{self._base_url}{path}",
                headers=self._headers(idempotency_key),
                json=body,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(operation, f"{operation} request failed: {exc}") from exc

        if not resp.ok:
            detail = resp.reason or "error"
            try:
                data = resp.json()
                if isinstance(data, dict):
                    detail = data.get("message") or data.get("error") or detail
            except ValueError:
                pass
            logger.error(
                "provider call rejected",
                extra={"operation": operation, "status_code": resp.status_code},
            )
            raise ProviderError(
                operation, f"Failed to {operation}: {detail}", status_code=resp.status_code,
            )

        if not resp.content:
            return {}
        return resp.json()

    # ---- IPaymentProvider methods ----

    def create_external_account(
        self, request: ExternalAccountRequest, idempotency_key: str
    ) -> ExternalAccount:
        body = {
            "currency": "usd",
            "account_type": "us",
            "bank_name": request.bank_name,
            "account_name": f"{request.first_name} {request.last_name} Account",
            "first_name": request.first_name,
            "last_name": request.last_name,
            "account_owner_type": "individual",
            "account_owner_name": request.account_owner_name,
            "account": {
                "routing_number": request.routing_number,
                "account_number": request.account_number,
                "checking_or_savings": str(request.checking_or_savings),
            },
        }
        data = self._request(
            "create external account",
            "POST",
            f"/v0/customers/{self._customer_id}/external_accounts",
            body,
            idempotency_key,
        )
        return ExternalAccount(
            id=data["id"],
            last_4=data.get("last_4", request.account_number[-4:]),
            active=data.get("active", True),
        )

    def create_transfer(self, request: TransferRequest, idempotency_key: str) -> Transfer:
        body = {
            "amount": f"{request.amount:.2f}",
            "on_behalf_of": self._customer_id,
            "source": {
                "payment_rail": "bridge_wallet",
                "currency": request.source_currency,
                "bridge_wallet_id": request.funding_source_id,
            },
            "destination": {
                "payment_rail": str(request.payment_rail),
                "currency": request.destination_currency,
                "external_account_id": request.external_account_id,
            },
        }
        data = self._request("create transfer", "POST", "/v0/transfers", body, idempotency_key)
        return Transfer(id=data["id"], state=data.get("state", "awaiting_funds"), amount=data.get("amount"))

    def get_transfer(self, transfer_id: str) -> Transfer:
        data = self._request("get transfer", "GET", f"/v0/transfers/{transfer_id}")
        return Transfer(id=data["id"], state=data.get("state", "unknown"), amount=data.get("amount"))
