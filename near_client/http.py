from __future__ import annotations

import itertools
import logging
import threading
from typing import Any

import requests

from near_client.config import AppSettings

logger = logging.getLogger(__name__)


class ApiHttpError(RuntimeError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class InvalidResponseError(ValueError):
    pass


class JsonRpcError(RuntimeError):
    """Error envelope returned by the node in place of a result."""

    def __init__(self, code: int, message: str, data: Any = None, name: str | None = None):
        super().__init__(f"JSON-RPC error {code}: {message}")
        self.code = code
        self.rpc_message = message
        self.data = data
        self.name = name

    @classmethod
    def from_envelope(cls, error: Any) -> "JsonRpcError":
        if not isinstance(error, dict):
            return cls(code=-32603, message=str(error))

        code = error.get("code")
        if not isinstance(code, int):
            code = -32603

        # NEAR puts the useful text in "data" or "cause.name"; "message" is often just "Server error".
        data = error.get("data")
        cause = error.get("cause")
        if isinstance(data, str) and data.strip():
            message = data.strip()
        elif isinstance(cause, dict) and cause.get("name"):
            message = str(cause["name"])
        else:
            message = str(error.get("message") or "Unknown JSON-RPC error")

        name = error.get("name")
        return cls(code=code, message=message, data=data, name=str(name) if name else None)


class JsonRpcTransport:
    def __init__(self, settings: AppSettings, session: requests.Session | None = None):
        self._settings = settings
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        self._ids = itertools.count(1)
        self._ids_lock = threading.Lock()
        self._closed = False

    @property
    def rpc_url(self) -> str:
        return self._settings.rpc_url

    def call(self, method: str, params: Any) -> Any:
        with self._ids_lock:
            request_id = next(self._ids)

        payload = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": params,
        }
        logger.debug("RPC %s (id=%s) -> %s", method, request_id, self._settings.rpc_url)

        response = self._session.post(
            self._settings.rpc_url,
            json=payload,
            timeout=self._settings.timeout_seconds,
        )

        if not response.ok:
            message = response.text[:500]
            raise ApiHttpError(
                status_code=response.status_code,
                message=f"HTTP {response.status_code}: {message}",
            )

        data = response.json()
        if not isinstance(data, dict):
            raise InvalidResponseError(f"Expected a JSON-RPC object, got {type(data).__name__}")

        if data.get("error") is not None:
            raise JsonRpcError.from_envelope(data["error"])

        if "result" not in data:
            raise JsonRpcError(code=-32603, message=f"Response to {method} is missing result")

        return data["result"]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._session.close()

    def __enter__(self) -> "JsonRpcTransport":
        return self

    def __exit__(self, *args) -> None:
        self.close()
