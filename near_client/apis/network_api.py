from __future__ import annotations

from typing import Any

from near_client.http import JsonRpcTransport


class NetworkApi:
    def __init__(self, transport: JsonRpcTransport):
        self._transport = transport

    def status(self) -> Any:
        return self._transport.call("status", [])

    def network_info(self) -> Any:
        return self._transport.call("network_info", [])

    def health(self) -> Any:
        return self._transport.call("health", [])

    def genesis_config(self) -> Any:
        return self._transport.call("genesis_config", [])

    def client_config(self) -> Any:
        return self._transport.call("client_config", [])

    def protocol_config(self, finality: str = "final") -> Any:
        return self._transport.call("EXPERIMENTAL_protocol_config", {"finality": finality})

    def gas_price(self, block_id: int | str | None = None) -> Any:
        # Without a block the node expects a positional null meaning "latest".
        if block_id is None:
            return self._transport.call("gas_price", [None])
        return self._transport.call("gas_price", {"block_id": block_id})

    def validators(self, block_id: int | str | None = None) -> Any:
        if block_id is None:
            return self._transport.call("validators", [None])
        return self._transport.call("validators", {"block_id": block_id})
