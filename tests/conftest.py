from __future__ import annotations

import threading
from typing import Any

import pytest

from near_client.config import AppSettings
from near_client.repository import NearRepository
from near_client.services import NearService


class FakeTransport:
    """Stands in for JsonRpcTransport; answers by RPC method name."""

    def __init__(self, responses: dict[str, Any] | None = None):
        self.responses = responses or {}
        self.calls: list[tuple[str, Any]] = []
        self.closed = False
        self._lock = threading.Lock()

    def call(self, method: str, params: Any) -> Any:
        with self._lock:
            self.calls.append((method, params))
        response = self.responses.get(method, {"method": method})
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(params)
        return response

    def close(self) -> None:
        self.closed = True


class Gate:
    """Blocking response: records that the call started, then waits to be released."""

    def __init__(self, result: Any):
        self.result = result
        self.started = threading.Event()
        self.release = threading.Event()

    def __call__(self, params: Any) -> Any:
        self.started.set()
        assert self.release.wait(5), "gate was never released"
        return self.result


@pytest.fixture()
def settings() -> AppSettings:
    return AppSettings(timeout_seconds=5, max_workers=4)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def repository(settings: AppSettings, transport: FakeTransport) -> NearRepository:
    return NearRepository(settings, transport=transport)


@pytest.fixture()
def service(repository: NearRepository):
    near_service = NearService(repository)
    yield near_service
    near_service.close()
