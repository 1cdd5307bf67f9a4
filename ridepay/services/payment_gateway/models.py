"""Wire models for the external payment gateway and the retry policy."""

from pydantic import BaseModel, ConfigDict, TypeAdapter

from ridepay.common.config import CommonSettings


class PaymentRequest(BaseModel):
    """Body of `POST /payments`. Built once per submission and reused on retries."""

    model_config = ConfigDict(frozen=True)

    amount: int


class PaymentRecord(BaseModel):
    """One entry of the gateway ledger returned by `GET /payments`.

    Only the number of entries is ever compared, so missing fields fall back to
    zero values instead of failing the decode.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    amount: int = 0
    status: str = ""


# A `null` ledger decodes to None and is treated as empty by the caller.
PaymentRecordList = TypeAdapter(list[PaymentRecord] | None)


class RetryPolicy(BaseModel):
    """Bounded exponential backoff applied to whole submission attempts."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = 5
    initial_interval_seconds: float = 0.05
    max_interval_seconds: float = 1.0

    @classmethod
    def from_settings(cls, config: CommonSettings) -> "RetryPolicy":
        return cls(
            max_attempts=config.payment_retry_max_attempts,
            initial_interval_seconds=config.payment_retry_initial_interval_seconds,
            max_interval_seconds=config.payment_retry_max_interval_seconds,
        )
