"""Pluggable payment-rail providers behind the IPaymentProvider protocol."""

from __future__ import annotations

from wirebatch.core.config import AppSettings
from wirebatch.core.protocols import IPaymentProvider
from wirebatch.providers.http_provider import HttpRailProvider
from wirebatch.providers.mock_provider import MockRailProvider


def create_provider(settings: AppSettings | None = None) -> IPaymentProvider:
    """Build the provider named by settings.

    The returned client is handed to the executor explicitly; nothing is
    cached at module level.
    """
    if settings is None:
        settings = AppSettings()

    if settings.provider.provider == "http":
        return HttpRailProvider.from_config(settings.provider)
    return MockRailProvider()


__all__ = ["HttpRailProvider", "MockRailProvider", "create_provider"]
