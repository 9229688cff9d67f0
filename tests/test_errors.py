from __future__ import annotations

import json

import pytest
import requests

from near_client.errors import classify_exception, safe_call
from near_client.http import ApiHttpError, InvalidResponseError, JsonRpcError
from near_client.models import Error, NetworkError, ParseError, RpcError, Success, Unknown


class TestStructuralClassification:
    def test_timeout(self) -> None:
        error = classify_exception(requests.ReadTimeout("read timed out"))
        assert error == NetworkError("Request timeout")

    def test_connect_timeout_is_a_timeout(self) -> None:
        error = classify_exception(requests.ConnectTimeout("connect"))
        assert error == NetworkError("Request timeout")

    def test_connection_refused(self) -> None:
        error = classify_exception(requests.ConnectionError("Connection refused"))
        assert error == NetworkError("Network connection failed")

    def test_rpc_envelope_keeps_code(self) -> None:
        exc = JsonRpcError.from_envelope(
            {"code": -32000, "message": "Server error", "data": "account does not exist", "name": "HANDLER_ERROR"}
        )
        assert classify_exception(exc) == RpcError(code=-32000, message="account does not exist")

    def test_http_status(self) -> None:
        error = classify_exception(ApiHttpError(503, "HTTP 503: unavailable"))
        assert isinstance(error, NetworkError)
        assert error.message == "HTTP 503: unavailable"

    def test_malformed_json(self) -> None:
        error = classify_exception(json.JSONDecodeError("Expecting value", "<html>", 0))
        assert isinstance(error, ParseError)
        assert error.message.startswith("Malformed JSON-RPC response")

    def test_non_object_response(self) -> None:
        assert isinstance(classify_exception(InvalidResponseError("list")), ParseError)


class TestMessageHeuristic:
    @pytest.mark.parametrize("text", ["NETWORK unreachable", "the Network is down", "bad network"])
    def test_network(self, text: str) -> None:
        assert classify_exception(RuntimeError(text)) == NetworkError("Network connection failed")

    def test_timeout(self) -> None:
        assert classify_exception(RuntimeError("socket TimeOut")) == NetworkError("Request timeout")

    def test_network_wins_over_timeout(self) -> None:
        assert classify_exception(RuntimeError("network timeout")).message == "Network connection failed"

    def test_json_rpc(self) -> None:
        assert classify_exception(RuntimeError("JSON-RPC failure")) == RpcError(-1, "JSON-RPC failure")

    def test_unknown(self) -> None:
        assert classify_exception(KeyError("x")) == Unknown("'x'")

    def test_unknown_without_message(self) -> None:
        assert classify_exception(RuntimeError()) == Unknown("Unknown error occurred")


class TestSafeCall:
    def test_success(self) -> None:
        assert safe_call(lambda: {"ok": True}) == Success({"ok": True})

    def test_failure_is_wrapped(self) -> None:
        def explode():
            raise requests.ConnectionError("refused")

        result = safe_call(explode)
        assert result == Error(NetworkError("Network connection failed"))
