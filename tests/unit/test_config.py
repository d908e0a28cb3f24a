"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

from decimal import Decimal

from wirebatch.core.config import AppSettings, ProviderConfig, RoutingConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.provider.provider == "mock"
    assert settings.execution.max_workers == 1


def test_routing_config_defaults():
    config = RoutingConfig()
    assert config.wire_threshold == Decimal("100000.00")
    assert config.rtp_enabled is False


def test_routing_config_env_override(monkeypatch):
    monkeypatch.setenv("WIREBATCH_ROUTING_WIRE_THRESHOLD", "50000")
    monkeypatch.setenv("WIREBATCH_ROUTING_RTP_ENABLED", "true")
    config = RoutingConfig()
    assert config.wire_threshold == Decimal("50000")
    assert config.rtp_enabled is True


def test_provider_config_defaults():
    config = ProviderConfig()
    assert config.api_key == ""
    assert config.idempotency_prefix == "wirebatch"
