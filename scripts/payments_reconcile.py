"""Compare the gateway ledger size against an expected billable-ride count."""

import argparse
import asyncio
import json

from ridepay.common.config import settings
from ridepay.common.http import create_http_client
from ridepay.services.payment_gateway.service import PaymentSubmitter


async def run(gateway_url: str, token: str, expected: int) -> dict:
    """Fetch the ledger once and build the reconciliation report."""

    async with create_http_client(settings) as client:
        payments = await PaymentSubmitter(client).fetch_payments(gateway_url, token)
    return {
        "payments": [payment.model_dump() for payment in payments],
        "expected": expected,
        "actual": len(payments),
        "matched": expected == len(payments),
    }


def main() -> None:
    """CLI entrypoint for reconciliation checks."""

    parser = argparse.ArgumentParser(description="Check gateway ledger size against billable rides.")
    parser.add_argument("--gateway-url", default=settings.payment_gateway_url)
    parser.add_argument("--token", required=True)
    parser.add_argument("--expected", type=int, required=True)
    args = parser.parse_args()

    report = asyncio.run(run(args.gateway_url, args.token, args.expected))
    print(json.dumps(report, indent=2))
    if not report["matched"]:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
