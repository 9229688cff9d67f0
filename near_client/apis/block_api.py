from __future__ import annotations

from typing import Any

from near_client.http import JsonRpcTransport


class BlockApi:
    def __init__(self, transport: JsonRpcTransport):
        self._transport = transport

    def block(self, finality: str = "final", block_id: int | str | None = None) -> Any:
        if block_id is not None:
            return self._transport.call("block", {"block_id": block_id})
        return self._transport.call("block", {"finality": finality})

    def chunk(self, chunk_hash: str) -> Any:
        chunk_id = chunk_hash.strip()
        if not chunk_id:
            raise ValueError("Chunk hash is required")
        return self._transport.call("chunk", {"chunk_id": chunk_id})

    def changes(self, block_id: int | str, changes_type: str = "all") -> Any:
        return self._transport.call(
            "changes",
            {
                "block_id": block_id,
                "changes_type": changes_type,
            },
        )
