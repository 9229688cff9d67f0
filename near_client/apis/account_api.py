from __future__ import annotations

import base64
from typing import Any

from near_client.http import JsonRpcTransport


class AccountApi:
    def __init__(self, transport: JsonRpcTransport):
        self._transport = transport

    def view_account(self, account_id: str, finality: str = "final") -> Any:
        return self._transport.call(
            "query",
            {
                "request_type": "view_account",
                "finality": finality,
                "account_id": account_id,
            },
        )

    def call_function(
        self,
        account_id: str,
        method_name: str,
        args: str = "{}",
        finality: str = "final",
    ) -> Any:
        return self._transport.call(
            "query",
            {
                "request_type": "call_function",
                "finality": finality,
                "account_id": account_id,
                "method_name": method_name,
                "args_base64": self.encode_args(args),
            },
        )

    @staticmethod
    def encode_args(args: str) -> str:
        return base64.b64encode((args or "{}").encode("utf-8")).decode("ascii")
