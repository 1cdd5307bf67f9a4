"""Prometheus metric definitions for gateway submissions."""

from prometheus_client import Counter, Histogram


payment_requests_total = Counter("payment_requests_total", "Total payment submissions", ["service"])
payment_success_total = Counter("payment_success_total", "Total successful payment submissions", ["service"])
payment_failure_total = Counter(
    "payment_failure_total",
    "Total payment submissions that failed after exhausting retries",
    ["service", "error_type"],
)
payment_latency_seconds = Histogram(
    "payment_latency_seconds",
    "Payment submission latency seconds including retries",
    ["service"],
)
retries_total = Counter("retries_total", "Retry count", ["service", "dependency"])
payment_reconciliations_total = Counter(
    "payment_reconciliations_total",
    "Ledger reconciliations after an ambiguous submission",
    ["service", "outcome"],
)
