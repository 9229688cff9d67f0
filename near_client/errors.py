"""Mapping of transport failures onto the NearError vocabulary shown in the UI."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import requests

from near_client.http import ApiHttpError, InvalidResponseError, JsonRpcError
from near_client.models import Error, NearError, NearResult, NetworkError, ParseError, RpcError, Success, Unknown

logger = logging.getLogger(__name__)

NETWORK_FAILED = "Network connection failed"
REQUEST_TIMEOUT = "Request timeout"
UNKNOWN_FAILURE = "Unknown error occurred"


def classify_exception(exc: BaseException) -> NearError:
    # Typed failures first; the message heuristic only sees what is left.
    if isinstance(exc, requests.Timeout):
        return NetworkError(REQUEST_TIMEOUT, exc)

    if isinstance(exc, requests.ConnectionError):
        return NetworkError(NETWORK_FAILED, exc)

    if isinstance(exc, JsonRpcError):
        return RpcError(code=exc.code, message=exc.rpc_message)

    if isinstance(exc, ApiHttpError):
        return NetworkError(str(exc), exc)

    if isinstance(exc, (requests.JSONDecodeError, json.JSONDecodeError, InvalidResponseError)):
        return ParseError(f"Malformed JSON-RPC response: {exc}")

    return classify_message(exc)


def classify_message(exc: BaseException) -> NearError:
    text = str(exc)
    lowered = text.lower()

    if "network" in lowered:
        return NetworkError(NETWORK_FAILED, exc)
    if "timeout" in lowered:
        return NetworkError(REQUEST_TIMEOUT, exc)
    if "json-rpc" in lowered:
        return RpcError(code=-1, message=text)
    return Unknown(text or UNKNOWN_FAILURE, exc)


def safe_call(call: Callable[[], Any], description: str = "RPC call") -> NearResult[Any]:
    """Run ``call`` and wrap its outcome; no exception escapes."""
    try:
        return Success(call())
    except Exception as exc:
        error = classify_exception(exc)
        logger.warning("%s failed: %s", description, error.display_message())
        logger.debug("%s raised", description, exc_info=exc)
        return Error(error)
