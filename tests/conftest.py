"""Shared fixtures: a scriptable fake gateway behind httpx.MockTransport."""

import json

import httpx
import pytest

from ridepay.common.config import settings
from ridepay.common.http import create_http_client

GATEWAY_URL = "http://gateway.test"
TOKEN = "secret-token"


class FakeGateway:
    """Answers POST/GET /payments from per-method response scripts.

    Each script entry is an `httpx.Response`, an exception to raise, or a
    callable taking the request. The last entry repeats once the script runs out.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.post_script: list = [httpx.Response(204)]
        self.get_script: list = [httpx.Response(200, json=[])]

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def gets(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def _next(self, script: list, index: int, request: httpx.Request) -> httpx.Response:
        entry = script[min(index, len(script) - 1)]
        if isinstance(entry, BaseException):
            raise entry
        if callable(entry):
            return entry(request)
        # Hand out a fresh response each time; a sent response is bound to its request.
        return httpx.Response(entry.status_code, headers=entry.headers, content=entry.content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return self._next(self.post_script, len(self.posts) - 1, request)
        return self._next(self.get_script, len(self.gets) - 1, request)


def ledger(count: int) -> httpx.Response:
    return httpx.Response(200, json=[{"amount": 600, "status": "COMPLETED"} for _ in range(count)])


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
async def http_client(gateway):
    client = create_http_client(settings, transport=httpx.MockTransport(gateway.handler))
    yield client
    await client.aclose()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def recording_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(float(seconds))

    return _sleep
