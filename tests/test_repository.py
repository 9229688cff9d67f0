from __future__ import annotations

import base64
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from near_client.models import Error, NetworkError, ParseError, RpcEndpoint, Success
from near_client.repository import NearRepository


class TestParameters:
    def test_block_by_finality(self, repository: NearRepository, transport) -> None:
        repository.get_block()
        assert transport.calls == [("block", {"finality": "final"})]

    def test_block_by_id(self, repository: NearRepository, transport) -> None:
        repository.get_block(block_id=17)
        assert transport.calls == [("block", {"block_id": 17})]

    def test_gas_price(self, repository: NearRepository, transport) -> None:
        repository.get_gas_price()
        repository.get_gas_price(block_id=42)
        assert transport.calls == [("gas_price", [None]), ("gas_price", {"block_id": 42})]

    def test_protocol_config(self, repository: NearRepository, transport) -> None:
        repository.get_protocol_config()
        assert transport.calls == [("EXPERIMENTAL_protocol_config", {"finality": "final"})]

    def test_view_account(self, repository: NearRepository, transport) -> None:
        repository.query_account("alice.testnet")
        assert transport.calls == [
            ("query", {"request_type": "view_account", "finality": "final", "account_id": "alice.testnet"})
        ]

    def test_view_call_encodes_args(self, repository: NearRepository, transport) -> None:
        repository.call_view_method("guest-book.testnet", "get_messages", '{"limit": 2}')
        method, params = transport.calls[0]
        assert method == "query"
        assert params["request_type"] == "call_function"
        assert params["method_name"] == "get_messages"
        assert base64.b64decode(params["args_base64"]) == b'{"limit": 2}'

    def test_view_call_default_args(self, repository: NearRepository, transport) -> None:
        repository.call_view_method("guest-book.testnet", "total_messages")
        assert transport.calls[0][1]["args_base64"] == "e30="

    def test_changes(self, repository: NearRepository, transport) -> None:
        repository.get_changes(100)
        assert transport.calls == [("changes", {"block_id": 100, "changes_type": "all"})]

    def test_tx_status_is_positional(self, repository: NearRepository, transport) -> None:
        repository.get_transaction_status("9FtHUFBQ", "alice.testnet")
        assert transport.calls == [("EXPERIMENTAL_tx_status", ["9FtHUFBQ", "alice.testnet"])]

    def test_light_client_proof(self, repository: NearRepository, transport) -> None:
        repository.get_light_client_proof("tx", "alice.testnet", "head")
        assert transport.calls == [
            (
                "light_client_proof",
                {
                    "type": "transaction",
                    "transaction_hash": "tx",
                    "sender_id": "alice.testnet",
                    "light_client_head": "head",
                },
            )
        ]


class TestPreconditions:
    @pytest.mark.parametrize("chunk_hash", [None, "", "   "])
    def test_chunk_requires_hash(self, repository: NearRepository, transport, chunk_hash) -> None:
        result = repository.get_chunk(chunk_hash)
        assert result == Error(ParseError("Chunk hash required for this endpoint"))
        assert transport.calls == []

    def test_changes_requires_block(self, repository: NearRepository, transport) -> None:
        result = repository.fetch_endpoint(RpcEndpoint.CHANGES)
        assert result == Error(ParseError("Block ID required for this endpoint"))
        assert transport.calls == []

    def test_chunk_with_hash(self, repository: NearRepository, transport) -> None:
        repository.fetch_endpoint(RpcEndpoint.CHUNK, chunk_hash="EBM2qg5cGr")
        assert transport.calls == [("chunk", {"chunk_id": "EBM2qg5cGr"})]


@pytest.mark.parametrize(
    "endpoint",
    [endpoint for endpoint in RpcEndpoint.all() if endpoint not in (RpcEndpoint.CHUNK, RpcEndpoint.CHANGES)],
)
def test_every_endpoint_uses_its_wire_name(repository: NearRepository, transport, endpoint) -> None:
    result = repository.fetch_endpoint(endpoint)
    assert isinstance(result, Success)
    assert transport.calls[0][0] == endpoint.wire_name


@pytest.mark.parametrize("endpoint", RpcEndpoint.all())
def test_transport_failures_never_escape(repository: NearRepository, transport, endpoint) -> None:
    for endpoint_method in [e.wire_name for e in RpcEndpoint.all()]:
        transport.responses[endpoint_method] = requests.ConnectionError("refused")

    result = repository.fetch_endpoint(endpoint, chunk_hash="abc", block_id=1)

    assert result == Error(NetworkError("Network connection failed"))


def test_wallet_login_url_uses_settings(repository: NearRepository) -> None:
    url = repository.get_wallet_login_url("x.testnet")
    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://wallet.testnet.near.org/login/"
    assert parse_qs(parsed.query)["contract_id"] == ["x.testnet"]


def test_close_releases_transport(repository: NearRepository, transport) -> None:
    with repository:
        pass
    assert transport.closed
