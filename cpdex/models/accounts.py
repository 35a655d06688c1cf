"""Token mint and token account records held by the ledger."""

from dataclasses import dataclass

from solders.pubkey import Pubkey


@dataclass(frozen=True)
class Mint:
    """A fungible token definition."""

    address: Pubkey
    decimals: int
    supply: int = 0


@dataclass(frozen=True)
class TokenAccount:
    """Balance of one mint held on behalf of one owner.

    Records are immutable; the ledger replaces the whole record on every
    balance change, so a record obtained from a read is never updated in
    place by a later write.
    """

    address: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int = 0


@dataclass(frozen=True)
class DataAccount:
    """Raw program-owned account (e.g. a serialized pool record)."""

    address: Pubkey
    owner: Pubkey
    data: bytes
