from __future__ import annotations

from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
import dataclasses
import logging
import threading
from typing import Any, Callable

from near_client.errors import UNKNOWN_FAILURE
from near_client.models import (
    Error,
    Loading,
    NearError,
    NearResult,
    ParseError,
    RpcEndpoint,
    Success,
    UiState,
    Unknown,
    WalletState,
)
from near_client.repository import NearRepository
from near_client.wallet import WalletSession, parse_wallet_callback, resolve_callback

logger = logging.getLogger(__name__)

StateListener = Callable[[UiState], None]
WalletListener = Callable[[WalletState], None]

ACCOUNT_ID_REQUIRED = "Account ID cannot be empty"
CONTRACT_CALL_REQUIRED = "Contract ID and method name are required"
TX_STATUS_REQUIRED = "Transaction hash and account ID are required"
LIGHT_CLIENT_PROOF_REQUIRED = "Transaction hash, sender ID and light client head are required"


class NearService:
    """Runs one tracked request at a time and publishes ``UiState`` snapshots.

    Triggers return immediately with a ``Future``. A new trigger supersedes the
    request in flight: the older task is cancelled if it has not started yet,
    otherwise its result is dropped instead of being published.

    Listeners are never called while the service lock is held. Snapshots are
    queued in publication order and drained by whichever thread gets there
    first, so a listener may block (e.g. on Tk's ``after``) without stalling
    other threads that read ``state`` or trigger requests.
    """

    def __init__(
        self,
        repository: NearRepository,
        wallet_session: WalletSession | None = None,
        executor: ThreadPoolExecutor | None = None,
    ):
        self._repository = repository
        self._wallet = wallet_session or WalletSession()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=repository.settings.max_workers,
            thread_name_prefix="near-rpc",
        )
        self._lock = threading.RLock()
        self._state = UiState()
        self._generation = 0
        self._pending: Future | None = None
        self._listeners: list[StateListener] = []
        self._wallet_listeners: list[WalletListener] = []
        self._deliveries: deque[tuple[list[Callable[[Any], None]], Any]] = deque()
        self._delivering = False
        self._active = 0
        self._closed = False

    @property
    def request_timeout_seconds(self) -> float:
        return self._repository.settings.timeout_seconds

    @property
    def state(self) -> UiState:
        with self._lock:
            return self._state

    @property
    def wallet_state(self) -> WalletState:
        return self._wallet.state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def subscribe_wallet(self, listener: WalletListener) -> Callable[[], None]:
        with self._lock:
            self._wallet_listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._wallet_listeners:
                    self._wallet_listeners.remove(listener)

        return unsubscribe

    # RPC triggers

    def fetch_endpoint(
        self,
        endpoint: RpcEndpoint,
        chunk_hash: str | None = None,
        block_id: int | str | None = None,
    ) -> Future:
        return self._dispatch(
            endpoint.display_name,
            lambda: self._repository.fetch_endpoint(endpoint, chunk_hash=chunk_hash, block_id=block_id),
        )

    def query_account(self, account_id: str) -> Future:
        if not account_id or not account_id.strip():
            return self._reject(ParseError(ACCOUNT_ID_REQUIRED))

        account_id = account_id.strip()
        return self._dispatch(
            f"Account Query: {account_id}",
            lambda: self._repository.query_account(account_id),
        )

    def call_view_method(self, contract_id: str, method_name: str, args: str = "{}") -> Future:
        if not _present(contract_id, method_name):
            return self._reject(ParseError(CONTRACT_CALL_REQUIRED))

        contract_id = contract_id.strip()
        method_name = method_name.strip()
        return self._dispatch(
            f"View Method: {contract_id}.{method_name}",
            lambda: self._repository.call_view_method(contract_id, method_name, args or "{}"),
        )

    def get_transaction_status(self, tx_hash: str, account_id: str) -> Future:
        if not _present(tx_hash, account_id):
            return self._reject(ParseError(TX_STATUS_REQUIRED))

        return self._dispatch(
            "Transaction Status",
            lambda: self._repository.get_transaction_status(tx_hash.strip(), account_id.strip()),
        )

    def get_light_client_proof(self, tx_hash: str, sender_id: str, light_client_head: str) -> Future:
        if not _present(tx_hash, sender_id, light_client_head):
            return self._reject(ParseError(LIGHT_CLIENT_PROOF_REQUIRED))

        return self._dispatch(
            "Light Client Proof",
            lambda: self._repository.get_light_client_proof(
                tx_hash.strip(),
                sender_id.strip(),
                light_client_head.strip(),
            ),
        )

    def get_client_config(self) -> Future:
        return self._dispatch("Client Config", self._repository.get_client_config)

    def set_selected_endpoint(self, endpoint: RpcEndpoint) -> None:
        with self._lock:
            self._publish(selected_endpoint=endpoint)
        self._deliver()

    def clear_error(self) -> None:
        with self._lock:
            self._publish(error=None)
        self._deliver()

    # Wallet

    def get_wallet_login_url(self, contract_id: str | None = None) -> str:
        return self._repository.get_wallet_login_url(contract_id)

    def connect_wallet(self, account_id: str) -> Future:
        """Mark the wallet connected and refresh the account's balance.

        A blank account id leaves the wallet untouched and publishes a ``ParseError``.
        """
        if not _present(account_id):
            return self._reject(ParseError(ACCOUNT_ID_REQUIRED))

        account_id = account_id.strip()

        with self._lock:
            self._ensure_open()
            self._publish_wallet(self._wallet.connect(account_id))
        self._deliver()
        logger.info("Wallet connected: %s", account_id)

        future = self.query_account(account_id)
        future.add_done_callback(lambda done: self._apply_balance(account_id, done))
        return future

    def disconnect_wallet(self) -> WalletState:
        with self._lock:
            state = self._wallet.disconnect()
            self._publish_wallet(state)
        self._deliver()
        logger.info("Wallet disconnected")
        return state

    def handle_wallet_callback(self, uri: str) -> str | None:
        callback = parse_wallet_callback(uri)
        account_id = resolve_callback(callback.account_id, callback.error)
        if account_id is not None:
            self.connect_wallet(account_id)
        return account_id

    # Lifecycle

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._generation += 1
            self._cancel_pending()
            release_now = self._active == 0

        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        # A worker still inside a call closes the repository when it leaves.
        if release_now:
            self._repository.close()

    def __enter__(self) -> "NearService":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # Internals

    def _dispatch(self, label: str, call: Callable[[], NearResult[Any]]) -> Future:
        with self._lock:
            self._ensure_open()
            self._generation += 1
            generation = self._generation
            self._cancel_pending()
            self._publish(is_loading=True, error=None, result=Loading())
            future = self._executor.submit(self._run, generation, label, call)
            self._pending = future
        self._deliver()
        logger.debug("Dispatched %s (request %s)", label, generation)
        return future

    def _run(self, generation: int, label: str, call: Callable[[], NearResult[Any]]) -> NearResult[Any] | None:
        with self._lock:
            if generation != self._generation or self._closed:
                return None
            self._active += 1

        try:
            try:
                result = call()
            except Exception as exc:
                logger.exception("Request %s failed unexpectedly", label)
                result = Error(Unknown(str(exc) or UNKNOWN_FAILURE, exc))
            except BaseException:
                self._resolve(generation, label, Error(Unknown("Request interrupted")))
                raise
            self._resolve(generation, label, result)
            return result
        finally:
            with self._lock:
                self._active -= 1
                release = self._closed and self._active == 0
            if release:
                self._repository.close()

    def _resolve(self, generation: int, label: str, result: NearResult[Any]) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("Dropped superseded result for %s (request %s)", label, generation)
                return
            self._pending = None
            self._publish(
                is_loading=False,
                error=result.error_or_none(),
                last_endpoint=label,
                result=result,
            )
        self._deliver()

    def _reject(self, error: NearError) -> Future:
        result = Error(error)
        with self._lock:
            self._ensure_open()
            self._generation += 1
            self._cancel_pending()
            self._publish(is_loading=False, error=error, result=result)
        self._deliver()

        future: Future = Future()
        future.set_result(result)
        return future

    def _apply_balance(self, account_id: str, future: Future) -> None:
        if future.cancelled():
            return
        result = future.result()
        match result:
            case Success(data=data) if isinstance(data, dict):
                amount = data.get("amount")
                with self._lock:
                    state = self._wallet.update_balance(account_id, str(amount) if amount is not None else None)
                    if state is not None:
                        self._publish_wallet(state)
                self._deliver()
            case Success() | Error() | Loading() | None:
                return

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("NearService is closed")

    def _publish(self, **changes: Any) -> None:
        # Caller holds self._lock; _deliver() runs after it is released.
        self._state = dataclasses.replace(self._state, **changes)
        self._deliveries.append((list(self._listeners), self._state))

    def _publish_wallet(self, state: WalletState) -> None:
        # Caller holds self._lock; _deliver() runs after it is released.
        self._deliveries.append((list(self._wallet_listeners), state))

    def _deliver(self) -> None:
        """Drain queued snapshots outside the lock, one drainer at a time."""
        with self._lock:
            if self._delivering:
                return
            self._delivering = True
        try:
            while True:
                with self._lock:
                    if not self._deliveries:
                        self._delivering = False
                        return
                    listeners, snapshot = self._deliveries.popleft()
                for listener in listeners:
                    _notify(listener, snapshot)
        except BaseException:
            with self._lock:
                self._delivering = False
            raise


def _notify(listener: Callable[[Any], None], snapshot: Any) -> None:
    try:
        listener(snapshot)
    except Exception:
        logger.exception("State listener %r failed", listener)


def _present(*values: str | None) -> bool:
    return all(value is not None and value.strip() for value in values)
