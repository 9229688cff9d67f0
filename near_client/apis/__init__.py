from .network_api import NetworkApi
from .block_api import BlockApi
from .account_api import AccountApi
from .transaction_api import TransactionApi

__all__ = ["NetworkApi", "BlockApi", "AccountApi", "TransactionApi"]
