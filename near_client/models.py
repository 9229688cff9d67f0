from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class RpcEndpoint(Enum):
    NETWORK_INFO = ("network_info", "Network Info")
    STATUS = ("status", "Status")
    BLOCK = ("block", "Block")
    GAS_PRICE = ("gas_price", "Gas Price")
    VALIDATORS = ("validators", "Validators")
    HEALTH = ("health", "Health Check")
    PROTOCOL_CONFIG = ("EXPERIMENTAL_protocol_config", "Protocol Config")
    GENESIS_CONFIG = ("genesis_config", "Genesis Config")
    CHUNK = ("chunk", "Chunk Details")
    CHANGES = ("changes", "State Changes")

    def __init__(self, wire_name: str, display_name: str):
        self.wire_name = wire_name
        self.display_name = display_name

    @classmethod
    def all(cls) -> list["RpcEndpoint"]:
        return list(cls)

    @classmethod
    def from_display_name(cls, display_name: str) -> "RpcEndpoint":
        for endpoint in cls:
            if endpoint.display_name == display_name:
                return endpoint
        raise ValueError(f"Unknown endpoint: {display_name}")


# Errors are values handed to the UI, not exceptions.


@dataclass(frozen=True)
class NetworkError:
    message: str
    cause: BaseException | None = field(default=None, compare=False, repr=False)

    def display_message(self) -> str:
        return f"Network Error: {self.message}"


@dataclass(frozen=True)
class RpcError:
    code: int
    message: str

    def display_message(self) -> str:
        return f"RPC Error ({self.code}): {self.message}"


@dataclass(frozen=True)
class ParseError:
    message: str

    def display_message(self) -> str:
        return f"Parse Error: {self.message}"


@dataclass(frozen=True)
class AuthError:
    message: str

    def display_message(self) -> str:
        return f"Authentication Error: {self.message}"


@dataclass(frozen=True)
class TransactionError:
    message: str
    details: str | None = None

    def display_message(self) -> str:
        if self.details:
            return f"Transaction Error: {self.message} - {self.details}"
        return f"Transaction Error: {self.message}"


@dataclass(frozen=True)
class Unknown:
    message: str
    cause: BaseException | None = field(default=None, compare=False, repr=False)

    def display_message(self) -> str:
        return f"Unknown Error: {self.message}"


NearError = Union[NetworkError, RpcError, ParseError, AuthError, TransactionError, Unknown]


class _ResultMixin:
    def is_success(self) -> bool:
        return isinstance(self, Success)

    def is_error(self) -> bool:
        return isinstance(self, Error)

    def is_loading(self) -> bool:
        return isinstance(self, Loading)

    def get_or_none(self) -> Any:
        return self.data if isinstance(self, Success) else None

    def error_or_none(self) -> NearError | None:
        return self.error if isinstance(self, Error) else None


@dataclass(frozen=True)
class Loading(_ResultMixin):
    pass


@dataclass(frozen=True)
class Success(_ResultMixin, Generic[T]):
    data: T


@dataclass(frozen=True)
class Error(_ResultMixin):
    error: NearError


NearResult = Union[Loading, Success[T], Error]


@dataclass(frozen=True)
class WalletState:
    is_connected: bool = False
    account_id: str | None = None
    balance: str | None = None


@dataclass(frozen=True)
class UiState:
    is_loading: bool = False
    error: NearError | None = None
    last_endpoint: str | None = None
    selected_endpoint: RpcEndpoint = RpcEndpoint.NETWORK_INFO
    result: NearResult[Any] = field(default_factory=Loading)
