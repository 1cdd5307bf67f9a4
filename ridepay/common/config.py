"""Central environment-driven settings for the payment submitter process.

The process loads this once at startup. Gateway address, connection pool
sizing and retry budget are controlled by environment variables (see
`.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payment-gateway"
    log_level: str = "INFO"
    payment_gateway_url: str = "http://payment-gateway:12345"
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    http_timeout_seconds: float = 5.0
    http_max_keepalive_connections: int = 3000
    http_max_connections: int | None = None
    payment_retry_max_attempts: int = 5
    payment_retry_initial_interval_seconds: float = 0.05
    payment_retry_max_interval_seconds: float = 1.0
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
