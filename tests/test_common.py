"""Tests for config, logging context and startup helpers."""

import logging

import httpx

from ridepay.common.config import CommonSettings
from ridepay.common.http import create_http_client
from ridepay.common.logging import ContextFilter, ride_id_ctx, trace_id_ctx
from ridepay.common.startup import _safe_env, log_startup_config


def test_settings_defaults_match_gateway_tuning():
    config = CommonSettings()

    assert config.http_max_keepalive_connections == 3000
    assert config.payment_retry_max_attempts == 5
    assert config.payment_retry_initial_interval_seconds == 0.05


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("PAYMENT_GATEWAY_URL", "http://pg.internal:9000")
    monkeypatch.setenv("PAYMENT_RETRY_MAX_ATTEMPTS", "2")

    config = CommonSettings()

    assert config.payment_gateway_url == "http://pg.internal:9000"
    assert config.payment_retry_max_attempts == 2


def test_context_filter_adds_correlation_fields():
    record = logging.LogRecord("ridepay", logging.INFO, __file__, 1, "msg", None, None)
    trace_token = trace_id_ctx.set("trace-1")
    ride_token = ride_id_ctx.set("ride-9")
    try:
        assert ContextFilter().filter(record)
    finally:
        trace_id_ctx.reset(trace_token)
        ride_id_ctx.reset(ride_token)

    assert record.trace_id == "trace-1"
    assert record.ride_id == "ride-9"


def test_secret_like_env_is_redacted(monkeypatch):
    monkeypatch.setenv("PAYMENT_GATEWAY_TOKEN", "abc")
    monkeypatch.setenv("PAYMENT_GATEWAY_URL", "http://pg")
    monkeypatch.delenv("MISSING_SETTING", raising=False)

    assert _safe_env("PAYMENT_GATEWAY_TOKEN") == "<redacted>"
    assert _safe_env("PAYMENT_GATEWAY_URL") == "http://pg"
    assert _safe_env("MISSING_SETTING") == "<unset>"


def test_startup_config_includes_service(monkeypatch):
    monkeypatch.setenv("PAYMENT_GATEWAY_URL", "http://pg")

    config = log_startup_config("payment-gateway", ["PAYMENT_GATEWAY_URL"])

    assert config == {"service": "payment-gateway", "PAYMENT_GATEWAY_URL": "http://pg"}


async def test_http_client_applies_timeout():
    config = CommonSettings(http_timeout_seconds=2.5)
    client = create_http_client(config, transport=httpx.MockTransport(lambda request: httpx.Response(204)))
    try:
        assert client.timeout.connect == 2.5
        assert (await client.get("http://gateway/payments")).status_code == 204
    finally:
        await client.aclose()
