"""Payment submitter process wiring.

Builds the shared connection pool once and hands it to a single submitter that
the ride-booking handlers import.
"""

from ridepay.common.config import settings
from ridepay.common.http import create_http_client
from ridepay.common.logging import configure_logging
from ridepay.common.startup import log_startup_config
from ridepay.common.tracing import setup_tracing
from ridepay.services.payment_gateway.models import RetryPolicy
from ridepay.services.payment_gateway.service import PaymentSubmitter

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "PAYMENT_GATEWAY_URL",
        "HTTP_TIMEOUT_SECONDS",
        "HTTP_MAX_KEEPALIVE_CONNECTIONS",
        "PAYMENT_RETRY_MAX_ATTEMPTS",
        "PAYMENT_RETRY_INITIAL_INTERVAL_SECONDS",
    ],
)
http_client = create_http_client(settings)
submitter = PaymentSubmitter(
    http_client,
    retry_policy=RetryPolicy.from_settings(settings),
    service_name=settings.service_name,
)


async def shutdown() -> None:
    """Close the shared pool; call once from the host application's shutdown hook."""

    await http_client.aclose()
