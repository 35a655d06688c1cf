"""Swap execution and quoting."""

from cpdex.swap.engine import SwapAccounts, SwapEngine, SwapOutcome, SwapQuote
from cpdex.swap.vaults import VaultRoles, require_destination_mint, resolve_source_mint

__all__ = [
    "SwapAccounts",
    "SwapEngine",
    "SwapOutcome",
    "SwapQuote",
    "VaultRoles",
    "require_destination_mint",
    "resolve_source_mint",
]
