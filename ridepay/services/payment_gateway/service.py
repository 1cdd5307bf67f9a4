"""Payment gateway submission with ledger reconciliation and bounded retries.

A POST that does not come back 204 may still have landed on the gateway (the
response can be lost on the way back), so the gateway ledger is queried and its
size compared against the caller's billable rides. The whole attempt is retried
with exponential backoff; the last failure is surfaced unchanged.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ridepay.common.logging import logger, ride_id_ctx
from ridepay.common.metrics import (
    payment_failure_total,
    payment_latency_seconds,
    payment_reconciliations_total,
    payment_requests_total,
    payment_success_total,
    retries_total,
)
from ridepay.common.tracing import get_tracer
from ridepay.services.payment_gateway.errors import (
    LocalDataError,
    PaymentError,
    ProtocolError,
    ReconciliationMismatchError,
    TransportError,
    UpstreamUnavailableError,
)
from ridepay.services.payment_gateway.models import PaymentRecord, PaymentRecordList, PaymentRequest, RetryPolicy

RetrieveRides = Callable[[], Sequence[Any] | Awaitable[Sequence[Any]]]

tracer = get_tracer(__name__)


class PaymentSubmitter:
    """Records one payment per call against the external gateway.

    Holds no per-call state, so a single instance can be shared by every
    concurrent task in the process. The HTTP client is the process-wide pool.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        service_name: str = "payment-gateway",
    ) -> None:
        self.http_client = http_client
        self.retry_policy = retry_policy or RetryPolicy()
        self.sleep = sleep
        self.service_name = service_name

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        # Streamed so the caller decides how the body is consumed; the caller
        # must close the response to hand the connection back to the pool.
        request = self.http_client.build_request(method, url, **kwargs)
        try:
            return await self.http_client.send(request, stream=True)
        except httpx.TransportError as exc:
            raise TransportError(method, url, str(exc) or type(exc).__name__) from exc
        except httpx.RequestError as exc:
            raise ProtocolError(f"[{method} {url}] {type(exc).__name__}: {exc}") from exc

    async def post_payment(self, gateway_url: str, token: str, body: bytes) -> int:
        """Issue `POST /payments` and return the status code; the body is discarded."""

        response = await self._send(
            "POST",
            f"{gateway_url}/payments",
            content=body,
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {token}"},
        )
        try:
            await response.aread()
        except httpx.RequestError as exc:
            # Only the status matters here; a body that fails to drain or decode
            # does not change the outcome.
            logger.warning(
                "payment post body drain failed status=%s error_type=%s error=%s",
                response.status_code,
                type(exc).__name__,
                exc,
            )
        finally:
            await response.aclose()
        return response.status_code

    async def fetch_payments(self, gateway_url: str, token: str) -> list[PaymentRecord]:
        """Read the gateway ledger.

        Raises:
            UpstreamUnavailableError: status other than 200. The ledger answers
                200 regardless of gateway incidents, so anything else is fatal
                for this attempt.
            ProtocolError: body is not a JSON array (or null) of payment records.
        """

        url = f"{gateway_url}/payments"
        response = await self._send("GET", url, headers={"Authorization": f"Bearer {token}"})
        try:
            if response.status_code != 200:
                raise UpstreamUnavailableError(response.status_code)
            content = await response.aread()
        except httpx.TransportError as exc:
            raise TransportError("GET", url, str(exc) or type(exc).__name__) from exc
        except httpx.DecodingError as exc:
            raise ProtocolError(f"[GET /payments] undecodable body: {exc}") from exc
        finally:
            await response.aclose()
        try:
            return PaymentRecordList.validate_json(content) or []
        except ValidationError as exc:
            raise ProtocolError(f"[GET /payments] undecodable body: {exc.error_count()} error(s)") from exc

    async def _retrieve_rides(self, retrieve_rides: RetrieveRides) -> list[Any]:
        # Plain callbacks are typically blocking database reads; keep them off
        # the event loop.
        try:
            if inspect.iscoroutinefunction(retrieve_rides):
                rides = await retrieve_rides()
            else:
                rides = await asyncio.to_thread(retrieve_rides)
                if inspect.isawaitable(rides):
                    rides = await rides
            return list(rides)
        except Exception as exc:
            raise LocalDataError(f"billable ride lookup failed: {exc}") from exc

    async def _attempt(self, gateway_url: str, token: str, body: bytes, retrieve_rides: RetrieveRides) -> None:
        with tracer.start_as_current_span("payment_gateway.attempt") as span:
            status_code = await self.post_payment(gateway_url, token, body)
            span.set_attribute("payment_gateway.post_status_code", status_code)
            if status_code == 204:
                return

            logger.warning("payment post ambiguous status=%s, reconciling with gateway ledger", status_code)
            payments = await self.fetch_payments(gateway_url, token)
            rides = await self._retrieve_rides(retrieve_rides)
            if len(rides) != len(payments):
                payment_reconciliations_total.labels(service=self.service_name, outcome="mismatched").inc()
                raise ReconciliationMismatchError(expected=len(rides), actual=len(payments))

            payment_reconciliations_total.labels(service=self.service_name, outcome="matched").inc()
            logger.info("payment reconciled rides=%s payments=%s", len(rides), len(payments))

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception()
        retries_total.labels(service=self.service_name, dependency="payment_gateway").inc()
        logger.warning(
            "payment attempt failed attempt=%s backoff_s=%s error_type=%s error=%s",
            retry_state.attempt_number,
            retry_state.next_action.sleep,
            type(exc).__name__,
            exc,
        )

    def _retrying(self) -> AsyncRetrying:
        policy = self.retry_policy
        return AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_exponential(
                multiplier=policy.initial_interval_seconds,
                exp_base=2,
                max=policy.max_interval_seconds,
            ),
            retry=retry_if_exception_type(PaymentError),
            before_sleep=self._before_sleep,
            sleep=self.sleep,
            reraise=True,
        )

    async def submit_payment(
        self,
        gateway_url: str,
        token: str,
        amount: int,
        retrieve_rides_ordered_by_created_at_asc: RetrieveRides,
        ride_id: str | None = None,
    ) -> None:
        """Record a payment of `amount`, retrying whole attempts with backoff.

        `retrieve_rides_ordered_by_created_at_asc` is only called when the POST
        result is ambiguous; it may be a plain function (run in a worker
        thread) or a coroutine function. `ride_id` tags logs emitted during
        the call. Cancelling the calling task aborts in-flight requests and the
        backoff sleep without issuing another request.

        Raises:
            PaymentError: the subclass raised by the final attempt, unchanged.
        """

        body = PaymentRequest(amount=amount).model_dump_json().encode("utf-8")
        ride_token = ride_id_ctx.set(ride_id) if ride_id is not None else None
        payment_requests_total.labels(service=self.service_name).inc()
        started = time.perf_counter()
        attempts = 0
        try:
            with tracer.start_as_current_span("payment_gateway.submit_payment") as span:
                span.set_attribute("payment.amount", amount)
                try:
                    async for attempt in self._retrying():
                        with attempt:
                            attempts = attempt.retry_state.attempt_number
                            await self._attempt(gateway_url, token, body, retrieve_rides_ordered_by_created_at_asc)
                except PaymentError as exc:
                    payment_failure_total.labels(service=self.service_name, error_type=type(exc).__name__).inc()
                    logger.error(
                        "payment submission failed amount=%s attempts=%s error_type=%s error=%s",
                        amount,
                        attempts,
                        type(exc).__name__,
                        exc,
                    )
                    raise
                finally:
                    payment_latency_seconds.labels(service=self.service_name).observe(
                        max(0.0, time.perf_counter() - started)
                    )
            payment_success_total.labels(service=self.service_name).inc()
        finally:
            if ride_token is not None:
                ride_id_ctx.reset(ride_token)
