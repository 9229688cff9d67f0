from __future__ import annotations

from typing import Any

from near_client.http import JsonRpcTransport


class TransactionApi:
    def __init__(self, transport: JsonRpcTransport):
        self._transport = transport

    def tx_status(self, tx_hash: str, account_id: str) -> Any:
        return self._transport.call("EXPERIMENTAL_tx_status", [tx_hash, account_id])

    def light_client_proof(self, tx_hash: str, sender_id: str, light_client_head: str) -> Any:
        return self._transport.call(
            "light_client_proof",
            {
                "type": "transaction",
                "transaction_hash": tx_hash,
                "sender_id": sender_id,
                "light_client_head": light_client_head,
            },
        )
