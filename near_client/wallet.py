"""Wallet login URL, deep-link callback parsing and the connected-account session."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from urllib.parse import parse_qs, urlencode, urlparse

from near_client.config import (
    DEFAULT_CONTRACT_ID,
    DEFAULT_FAILURE_URL,
    DEFAULT_SUCCESS_URL,
    DEFAULT_WALLET_URL,
)
from near_client.models import WalletState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletCallback:
    account_id: str | None = None
    error: str | None = None
    public_key: str | None = None
    all_keys: str | None = None


def build_login_url(
    contract_id: str = DEFAULT_CONTRACT_ID,
    success_url: str = DEFAULT_SUCCESS_URL,
    failure_url: str = DEFAULT_FAILURE_URL,
    base_url: str = DEFAULT_WALLET_URL,
) -> str:
    query = urlencode(
        [
            ("success_url", success_url),
            ("failure_url", failure_url),
            ("contract_id", contract_id),
        ]
    )
    separator = "&" if urlparse(base_url).query else "?"
    return f"{base_url}{separator}{query}"


def parse_wallet_callback(uri: str) -> WalletCallback:
    params = parse_qs(urlparse(uri.strip()).query, keep_blank_values=True)

    def first(name: str) -> str | None:
        values = params.get(name)
        return values[0] if values else None

    return WalletCallback(
        account_id=first("account_id"),
        error=first("error"),
        public_key=first("public_key"),
        all_keys=first("all_keys"),
    )


def resolve_callback(account_id: str | None, error: str | None) -> str | None:
    """Return the account to connect, or None when the callback must not change the session."""
    if error is not None:
        logger.info("Wallet login failed: %s", error)
        return None
    if account_id is None or not account_id.strip():
        return None
    logger.info("Wallet login succeeded for %s", account_id)
    return account_id.strip()


class WalletSession:
    def __init__(self):
        self._lock = threading.Lock()
        self._state = WalletState()

    @property
    def state(self) -> WalletState:
        with self._lock:
            return self._state

    def connect(self, account_id: str) -> WalletState:
        with self._lock:
            self._state = WalletState(is_connected=True, account_id=account_id)
            return self._state

    def disconnect(self) -> WalletState:
        with self._lock:
            self._state = WalletState()
            return self._state

    def update_balance(self, account_id: str, balance: str | None) -> WalletState | None:
        """Set the balance only if ``account_id`` is still the connected account."""
        with self._lock:
            if not self._state.is_connected or self._state.account_id != account_id:
                return None
            self._state = WalletState(
                is_connected=True,
                account_id=account_id,
                balance=balance,
            )
            return self._state
