"""Persistent pool record and its fixed-size binary layout."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from cpdex.constants import POOL_DISCRIMINATOR, POOL_RESERVED_SIZE, POOL_STATE_SPACE
from cpdex.errors import InvalidAccountData

# discriminator, mint_a, mint_b, vault_a, vault_b, pool/authority/vault_a/vault_b bumps
_LAYOUT = struct.Struct("<8s32s32s32s32sBBBB")


@dataclass(frozen=True)
class PoolState:
    """State of a constant-product pool.

    The reserves are not part of the record: they live in the two vaults and
    are read from there on every use.

    Attributes:
        mint_a: Canonically smaller mint of the pair
        mint_b: Canonically larger mint of the pair
        vault_a: Custody account for mint_a, owned by the pool authority
        vault_b: Custody account for mint_b, owned by the pool authority
        pool_bump: Bump of the pool record address
        authority_bump: Bump of the pool authority address
        vault_a_bump: Bump of vault_a's associated-account derivation
        vault_b_bump: Bump of vault_b's associated-account derivation
    """

    mint_a: Pubkey
    mint_b: Pubkey
    vault_a: Pubkey
    vault_b: Pubkey
    pool_bump: int
    authority_bump: int
    vault_a_bump: int
    vault_b_bump: int

    def __post_init__(self) -> None:
        if bytes(self.mint_a) >= bytes(self.mint_b):
            raise ValueError(f"Mints must be in canonical order: {self.mint_a} < {self.mint_b}")
        for name in ("pool_bump", "authority_bump", "vault_a_bump", "vault_b_bump"):
            bump = getattr(self, name)
            if not 0 <= bump <= 255:
                raise ValueError(f"{name} must fit in one byte: {bump}")

    def pack(self) -> bytes:
        """Serialize to exactly POOL_STATE_SPACE bytes (reserved tail zeroed)."""
        head = _LAYOUT.pack(
            POOL_DISCRIMINATOR,
            bytes(self.mint_a),
            bytes(self.mint_b),
            bytes(self.vault_a),
            bytes(self.vault_b),
            self.pool_bump,
            self.authority_bump,
            self.vault_a_bump,
            self.vault_b_bump,
        )
        return head + bytes(POOL_RESERVED_SIZE)

    @classmethod
    def unpack(cls, data: bytes) -> PoolState:
        """Decode a record written by pack().

        Raises:
            InvalidAccountData: If the size or discriminator is wrong
        """
        if len(data) != POOL_STATE_SPACE:
            raise InvalidAccountData(f"Pool record must be {POOL_STATE_SPACE} bytes, got {len(data)}")
        (
            discriminator,
            mint_a,
            mint_b,
            vault_a,
            vault_b,
            pool_bump,
            authority_bump,
            vault_a_bump,
            vault_b_bump,
        ) = _LAYOUT.unpack_from(data)
        if discriminator != POOL_DISCRIMINATOR:
            raise InvalidAccountData("Account is not a pool record (discriminator mismatch)")
        return cls(
            mint_a=Pubkey.from_bytes(mint_a),
            mint_b=Pubkey.from_bytes(mint_b),
            vault_a=Pubkey.from_bytes(vault_a),
            vault_b=Pubkey.from_bytes(vault_b),
            pool_bump=pool_bump,
            authority_bump=authority_bump,
            vault_a_bump=vault_a_bump,
            vault_b_bump=vault_b_bump,
        )
