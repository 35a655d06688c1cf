"""Vault role resolution for a swap.

The mint of the user's source account decides the direction of the trade:
the vault of that mint receives the input and the other vault pays out.
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey

from cpdex.errors import InvalidDestinationMint, InvalidSourceMint
from cpdex.models.accounts import TokenAccount
from cpdex.models.pool import PoolState


@dataclass(frozen=True)
class VaultRoles:
    """Which pool vault plays which part in one swap."""

    source_vault: Pubkey
    destination_vault: Pubkey
    source_mint: Pubkey
    destination_mint: Pubkey


def resolve_source_mint(pool: PoolState, source_mint: Pubkey) -> VaultRoles:
    """Resolve vault roles from the mint being sold.

    Raises:
        InvalidSourceMint: If source_mint is neither of the pool's mints
    """
    if source_mint == pool.mint_a:
        return VaultRoles(
            source_vault=pool.vault_a,
            destination_vault=pool.vault_b,
            source_mint=pool.mint_a,
            destination_mint=pool.mint_b,
        )
    if source_mint == pool.mint_b:
        return VaultRoles(
            source_vault=pool.vault_b,
            destination_vault=pool.vault_a,
            source_mint=pool.mint_b,
            destination_mint=pool.mint_a,
        )
    raise InvalidSourceMint(
        f"Source mint {source_mint} is not in pool ({pool.mint_a}, {pool.mint_b})"
    )


def require_destination_mint(roles: VaultRoles, user_destination: TokenAccount) -> None:
    """Check the user's destination account holds the mint the pool pays out.

    Raises:
        InvalidDestinationMint: If it holds any other mint
    """
    if user_destination.mint != roles.destination_mint:
        raise InvalidDestinationMint(
            f"Destination account {user_destination.address} holds {user_destination.mint}, "
            f"expected {roles.destination_mint}"
        )
