from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from near_client.models import WalletState
from near_client.wallet import WalletSession, build_login_url, parse_wallet_callback, resolve_callback


class TestWalletSession:
    def test_connect(self) -> None:
        session = WalletSession()
        assert session.connect("alice.testnet") == WalletState(is_connected=True, account_id="alice.testnet")

    def test_disconnect_clears_everything(self) -> None:
        session = WalletSession()
        session.connect("alice.testnet")
        session.update_balance("alice.testnet", "1000")

        assert session.disconnect() == WalletState(is_connected=False, account_id=None, balance=None)

    def test_disconnect_twice(self) -> None:
        session = WalletSession()
        session.connect("alice.testnet")
        first = session.disconnect()
        assert session.disconnect() == first

    def test_balance_ignored_for_other_account(self) -> None:
        session = WalletSession()
        session.connect("bob.testnet")
        assert session.update_balance("alice.testnet", "5") is None
        assert session.state.balance is None

    def test_balance_ignored_when_disconnected(self) -> None:
        session = WalletSession()
        assert session.update_balance("alice.testnet", "5") is None
        assert session.state == WalletState()


class TestLoginUrl:
    def test_defaults(self) -> None:
        url = build_login_url(contract_id="x.testnet")
        parsed = urlparse(url)

        assert url.startswith("https://wallet.testnet.near.org/login/?")
        assert parse_qs(parsed.query) == {
            "success_url": ["myapp://callback"],
            "failure_url": ["myapp://callback?error=true"],
            "contract_id": ["x.testnet"],
        }

    def test_base_url_with_query(self) -> None:
        url = build_login_url(base_url="https://wallet.example/login?lang=en")
        assert url.startswith("https://wallet.example/login?lang=en&success_url=")


class TestCallback:
    def test_parse_success(self) -> None:
        callback = parse_wallet_callback(
            "myapp://callback?account_id=alice.testnet&public_key=ed25519%3Aabc&all_keys=ed25519%3Aabc"
        )
        assert callback.account_id == "alice.testnet"
        assert callback.public_key == "ed25519:abc"
        assert callback.error is None

    def test_parse_failure(self) -> None:
        callback = parse_wallet_callback("myapp://callback?error=true")
        assert callback.error == "true"
        assert callback.account_id is None

    def test_error_takes_precedence(self) -> None:
        assert resolve_callback("alice.testnet", "user_rejected") is None

    def test_account_connects(self) -> None:
        assert resolve_callback("alice.testnet", None) == "alice.testnet"

    def test_nothing_to_do(self) -> None:
        assert resolve_callback(None, None) is None
        assert resolve_callback("  ", None) is None
