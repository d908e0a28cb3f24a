"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings


class RoutingConfig(BaseSettings):
    """Payment rail routing policy.

    ``wire_threshold`` is the only place the rail threshold lives; preview
    (validator) and dispatch (executor) both read it from here.
    """

    model_config = {"env_prefix": "WIREBATCH_ROUTING_"}

    wire_threshold: Decimal = Decimal("100000.00")  # exclusive: above -> wire
    rtp_enabled: bool = False  # small-value items fall back to ACH when off


class ProviderConfig(BaseSettings):
    """Payment-rail provider configuration."""

    model_config = {"env_prefix": "WIREBATCH_PROVIDER_"}

    provider: Literal["mock", "http"] = "mock"
    base_url: str = "https://api.sandbox.bridge.xyz"
    api_key: str = ""
    customer_id: str = ""
    timeout: int = 30
    idempotency_prefix: str = "wirebatch"


class ExecutionConfig(BaseSettings):
    """Executor fan-out configuration."""

    model_config = {"env_prefix": "WIREBATCH_EXEC_"}

    max_workers: int = 1  # 1 = strictly sequential


class ReconciliationConfig(BaseSettings):
    """Reconciliation export naming and layout."""

    model_config = {"env_prefix": "WIREBATCH_RECON_"}

    file_prefix: str = "WireBatch"
    wire_number_width: int = 20
    key_prefix: str = "reconciliation"


class S3Config(BaseSettings):
    """S3 artifact storage configuration."""

    model_config = {"env_prefix": "WIREBATCH_S3_"}

    bucket: str = "wirebatch-reconciliation"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "WIREBATCH_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    routing: RoutingConfig = RoutingConfig()
    provider: ProviderConfig = ProviderConfig()
    execution: ExecutionConfig = ExecutionConfig()
    reconciliation: ReconciliationConfig = ReconciliationConfig()
    s3: S3Config = S3Config()
