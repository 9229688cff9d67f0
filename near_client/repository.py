from __future__ import annotations

from typing import Any

from near_client.apis import AccountApi, BlockApi, NetworkApi, TransactionApi
from near_client.config import AppSettings
from near_client.errors import safe_call
from near_client.http import JsonRpcTransport
from near_client.models import Error, NearResult, ParseError, RpcEndpoint
from near_client.wallet import build_login_url

CHUNK_HASH_REQUIRED = "Chunk hash required for this endpoint"
BLOCK_ID_REQUIRED = "Block ID required for this endpoint"


class NearRepository:
    """One method per supported RPC query.

    Every method returns a ``NearResult``; transport failures come back as
    ``Error`` values, never as exceptions. The repository owns its transport
    and closes it in ``close()``.
    """

    def __init__(self, settings: AppSettings, transport: JsonRpcTransport | None = None):
        self._settings = settings
        self._transport = transport or JsonRpcTransport(settings)
        self._network_api = NetworkApi(self._transport)
        self._block_api = BlockApi(self._transport)
        self._account_api = AccountApi(self._transport)
        self._transaction_api = TransactionApi(self._transport)

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def get_status(self) -> NearResult[Any]:
        return safe_call(self._network_api.status, "status")

    def get_network_info(self) -> NearResult[Any]:
        return safe_call(self._network_api.network_info, "network_info")

    def get_health(self) -> NearResult[Any]:
        return safe_call(self._network_api.health, "health")

    def get_genesis_config(self) -> NearResult[Any]:
        return safe_call(self._network_api.genesis_config, "genesis_config")

    def get_client_config(self) -> NearResult[Any]:
        return safe_call(self._network_api.client_config, "client_config")

    def get_protocol_config(self, finality: str = "final") -> NearResult[Any]:
        return safe_call(
            lambda: self._network_api.protocol_config(finality),
            "EXPERIMENTAL_protocol_config",
        )

    def get_gas_price(self, block_id: int | None = None) -> NearResult[Any]:
        return safe_call(lambda: self._network_api.gas_price(block_id), "gas_price")

    def get_validators(self, block_id: int | str | None = None) -> NearResult[Any]:
        return safe_call(lambda: self._network_api.validators(block_id), "validators")

    def get_block(self, finality: str = "final", block_id: int | str | None = None) -> NearResult[Any]:
        return safe_call(lambda: self._block_api.block(finality, block_id), "block")

    def get_chunk(self, chunk_hash: str | None) -> NearResult[Any]:
        if chunk_hash is None or not chunk_hash.strip():
            return Error(ParseError(CHUNK_HASH_REQUIRED))
        return safe_call(lambda: self._block_api.chunk(chunk_hash), "chunk")

    def get_changes(self, block_id: int | str | None, changes_type: str = "all") -> NearResult[Any]:
        if block_id is None or (isinstance(block_id, str) and not block_id.strip()):
            return Error(ParseError(BLOCK_ID_REQUIRED))
        return safe_call(lambda: self._block_api.changes(block_id, changes_type), "changes")

    def query_account(self, account_id: str, finality: str = "final") -> NearResult[Any]:
        return safe_call(
            lambda: self._account_api.view_account(account_id, finality),
            f"view_account {account_id}",
        )

    def call_view_method(
        self,
        account_id: str,
        method_name: str,
        args: str = "{}",
        finality: str = "final",
    ) -> NearResult[Any]:
        return safe_call(
            lambda: self._account_api.call_function(account_id, method_name, args, finality),
            f"call_function {account_id}.{method_name}",
        )

    def get_transaction_status(self, tx_hash: str, account_id: str) -> NearResult[Any]:
        return safe_call(
            lambda: self._transaction_api.tx_status(tx_hash, account_id),
            "EXPERIMENTAL_tx_status",
        )

    def get_light_client_proof(self, tx_hash: str, sender_id: str, light_client_head: str) -> NearResult[Any]:
        return safe_call(
            lambda: self._transaction_api.light_client_proof(tx_hash, sender_id, light_client_head),
            "light_client_proof",
        )

    def fetch_endpoint(
        self,
        endpoint: RpcEndpoint,
        chunk_hash: str | None = None,
        block_id: int | str | None = None,
    ) -> NearResult[Any]:
        match endpoint:
            case RpcEndpoint.NETWORK_INFO:
                return self.get_network_info()
            case RpcEndpoint.STATUS:
                return self.get_status()
            case RpcEndpoint.BLOCK:
                return self.get_block()
            case RpcEndpoint.GAS_PRICE:
                return self.get_gas_price()
            case RpcEndpoint.VALIDATORS:
                return self.get_validators()
            case RpcEndpoint.HEALTH:
                return self.get_health()
            case RpcEndpoint.PROTOCOL_CONFIG:
                return self.get_protocol_config()
            case RpcEndpoint.GENESIS_CONFIG:
                return self.get_genesis_config()
            case RpcEndpoint.CHUNK:
                return self.get_chunk(chunk_hash)
            case RpcEndpoint.CHANGES:
                return self.get_changes(block_id)
        raise ValueError(f"Unsupported endpoint: {endpoint}")

    def get_wallet_login_url(self, contract_id: str | None = None) -> str:
        return build_login_url(
            contract_id=contract_id or self._settings.contract_id,
            success_url=self._settings.success_url,
            failure_url=self._settings.failure_url,
            base_url=self._settings.wallet_url,
        )

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "NearRepository":
        return self

    def __exit__(self, *args) -> None:
        self.close()
