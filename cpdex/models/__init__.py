"""Ledger records, events and shared validators."""

from cpdex.models.accounts import DataAccount, Mint, TokenAccount
from cpdex.models.events import DexEvent, SwapEvent, TransactionEvent
from cpdex.models.pool import PoolState
from cpdex.models.types import Address, U64, is_valid_address, to_pubkey, validate_u64

__all__ = [
    "Address",
    "U64",
    "DataAccount",
    "DexEvent",
    "Mint",
    "PoolState",
    "SwapEvent",
    "TokenAccount",
    "TransactionEvent",
    "is_valid_address",
    "to_pubkey",
    "validate_u64",
]
