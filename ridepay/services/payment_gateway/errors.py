"""Typed failures surfaced by the payment submitter.

Every member is retried by the submission loop; once the budget is spent the
last one reaches the caller unchanged.
"""


class PaymentError(Exception):
    """Base class for all payment submission failures."""


class TransportError(PaymentError):
    """Connection, DNS or timeout failure talking to the gateway."""

    def __init__(self, method: str, url: str, detail: str) -> None:
        super().__init__(f"[{method} {url}] transport failure: {detail}")
        self.method = method
        self.url = url


class UpstreamUnavailableError(PaymentError):
    """The ledger query did not answer 200."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"[GET /payments] unexpected status code ({status_code})")
        self.status_code = status_code


class ProtocolError(PaymentError):
    """The gateway answered with a body we could not decode."""


class LocalDataError(PaymentError):
    """The caller's billable-transaction lookup failed."""


class ReconciliationMismatchError(PaymentError):
    """Local billable count and gateway ledger size disagree."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"unexpected number of payments: {expected} != {actual}")
        self.expected = expected
        self.actual = actual
