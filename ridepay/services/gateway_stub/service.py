"""In-memory payment gateway ledger with scripted faults.

Stands in for the external gateway during local runs and tests. The
interesting fault is LOST_RESPONSE: the payment is recorded but the client is
told it failed, which is exactly what the submitter's reconciliation step has
to see through.
"""

import random
from collections import deque
from enum import Enum

from ridepay.common.logging import logger
from ridepay.services.payment_gateway.models import PaymentRecord


class StubOutcome(str, Enum):
    OK = "OK"
    LOST_RESPONSE = "LOST_RESPONSE"
    REJECT = "REJECT"


class StubLedger:
    """Gateway-side bookkeeping plus the fault schedule for `POST /payments`."""

    def __init__(self, weights: dict[StubOutcome, float] | None = None, seed: int | None = None) -> None:
        self.payments: list[PaymentRecord] = []
        self.weights = weights or {StubOutcome.OK: 1.0}
        self.post_count = 0
        self.get_count = 0
        self._scripted: deque[StubOutcome] = deque()
        self._rng = random.Random(seed)

    def script(self, *outcomes: StubOutcome) -> None:
        """Queue outcomes consumed by the next POSTs before falling back to weights."""

        self._scripted.extend(outcomes)

    def next_outcome(self) -> StubOutcome:
        if self._scripted:
            return self._scripted.popleft()
        return self._rng.choices(
            population=list(self.weights.keys()),
            weights=list(self.weights.values()),
            k=1,
        )[0]

    def record_payment(self, amount: int) -> int:
        """Apply one POST and return the status code to answer with."""

        self.post_count += 1
        outcome = self.next_outcome()
        if outcome in (StubOutcome.OK, StubOutcome.LOST_RESPONSE):
            self.payments.append(PaymentRecord(amount=amount, status="COMPLETED"))
        if outcome == StubOutcome.OK:
            return 204
        logger.warning("stub gateway injected fault outcome=%s amount=%s", outcome.value, amount)
        return 500

    def list_payments(self) -> list[PaymentRecord]:
        self.get_count += 1
        return list(self.payments)
