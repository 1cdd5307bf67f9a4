"""Stub payment gateway API.

Serves the two endpoints the submitter talks to, backed by a `StubLedger`.
"""

from fastapi import FastAPI, Header, HTTPException, Response

from ridepay.common.logging import configure_logging
from ridepay.services.gateway_stub.service import StubLedger
from ridepay.services.payment_gateway.models import PaymentRecord, PaymentRequest

configure_logging()


def create_app(ledger: StubLedger, token: str | None = None) -> FastAPI:
    """Build a gateway app around `ledger`; when `token` is set, bearer auth is enforced."""

    app = FastAPI(title="RidePay Stub Payment Gateway")

    def enforce_token(authorization: str | None) -> None:
        if token is not None and authorization != f"Bearer {token}":
            raise HTTPException(status_code=401, detail="invalid token")

    @app.post("/payments")
    async def create_payment(req: PaymentRequest, authorization: str | None = Header(default=None)):
        enforce_token(authorization)
        status_code = ledger.record_payment(req.amount)
        if status_code == 204:
            return Response(status_code=204)
        raise HTTPException(status_code=status_code, detail="payment gateway error")

    @app.get("/payments", response_model=list[PaymentRecord])
    async def list_payments(authorization: str | None = Header(default=None)):
        enforce_token(authorization)
        return ledger.list_payments()

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    return app


app = create_app(StubLedger())
