"""Payment rail routing.

Amounts above the configured threshold clear over the same-day high-value
rail (wire); everything else goes over the near-real-time rail, or ACH while
that rail is switched off. The threshold is exclusive on the wire side.
"""

from __future__ import annotations

from decimal import Decimal

from wirebatch.core.config import RoutingConfig
from wirebatch.models.execution import PaymentRail, RailClass


def classify_amount(amount_dollars: Decimal, threshold: Decimal) -> RailClass:
    if amount_dollars > threshold:
        return RailClass.LARGE_VALUE
    return RailClass.SMALL_VALUE


def rail_for_class(rail_class: RailClass, config: RoutingConfig | None = None) -> PaymentRail:
    """Effective rail label for a rail class under the current configuration."""
    if config is None:
        config = RoutingConfig()
    if rail_class == RailClass.LARGE_VALUE:
        return PaymentRail.WIRE
    return PaymentRail.RTP if config.rtp_enabled else PaymentRail.ACH


def route_payment(amount_dollars: Decimal, config: RoutingConfig | None = None) -> PaymentRail:
    if config is None:
        config = RoutingConfig()
    return rail_for_class(classify_amount(amount_dollars, config.wire_threshold), config)
