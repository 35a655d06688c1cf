"""Deterministic program-derived addresses for pools, authorities and vaults.

A program-derived address has no private key: it is a hash of seeds and the
owning program id that is guaranteed not to be a valid ed25519 public key.
Only the owning program can act as such an address, by presenting the seeds
and bump again (a PdaSigner) when it invokes another program.

Every derivation that involves a mint pair goes through canonical_mints(), so
(X, Y) and (Y, X) always produce the same seeds.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog
from solders.pubkey import Pubkey

from cpdex.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    DEFAULT_PROGRAM_ID,
    POOL_SEED,
    TOKEN_PROGRAM_ID,
)
from cpdex.errors import InvalidVault

logger = structlog.get_logger()


def canonical_mints(mint_x: Pubkey, mint_y: Pubkey) -> tuple[Pubkey, Pubkey]:
    """Order a mint pair byte-wise, smallest first."""
    if bytes(mint_x) <= bytes(mint_y):
        return mint_x, mint_y
    return mint_y, mint_x


def pool_seeds(mint_x: Pubkey, mint_y: Pubkey) -> tuple[bytes, ...]:
    """Seeds of the pool record: ["pool", min_mint, max_mint]."""
    low, high = canonical_mints(mint_x, mint_y)
    return (POOL_SEED, bytes(low), bytes(high))


def authority_seeds(mint_x: Pubkey, mint_y: Pubkey, pool_bump: int) -> tuple[bytes, ...]:
    """Seeds of the pool authority: the pool seeds followed by the pool bump."""
    return (*pool_seeds(mint_x, mint_y), bytes([pool_bump]))


@dataclass(frozen=True)
class PdaSigner:
    """Capability to act as a program-derived address.

    Produced only by AddressDerivation.prove(), which checks that the seeds and
    bump recompute to the address. The token program re-checks the derivation
    before honoring it as a transfer authority.
    """

    address: Pubkey
    seeds: tuple[bytes, ...]
    bump: int
    program_id: Pubkey

    @property
    def signer_seeds(self) -> tuple[bytes, ...]:
        """Full seed list including the trailing bump byte."""
        return (*self.seeds, bytes([self.bump]))


class AddressDerivation:
    """Address derivation bound to one program id.

    Args:
        program_id: Program that owns the pool records and authorities
        token_program_id: Token program used in associated-account seeds
        associated_token_program_id: Program that owns associated accounts
    """

    def __init__(
        self,
        program_id: Pubkey | None = None,
        token_program_id: Pubkey = TOKEN_PROGRAM_ID,
        associated_token_program_id: Pubkey = ASSOCIATED_TOKEN_PROGRAM_ID,
    ) -> None:
        self.program_id = program_id or Pubkey.from_string(DEFAULT_PROGRAM_ID)
        self.token_program_id = token_program_id
        self.associated_token_program_id = associated_token_program_id

    def find(self, seeds: Sequence[bytes]) -> tuple[Pubkey, int]:
        """Find the canonical (highest valid bump) address for seeds."""
        return Pubkey.find_program_address(list(seeds), self.program_id)

    def derive(self, seed_prefix: bytes, mint_x: Pubkey, mint_y: Pubkey) -> tuple[Pubkey, int]:
        """Address and bump for a prefix and a mint pair (order independent)."""
        low, high = canonical_mints(mint_x, mint_y)
        return self.find((seed_prefix, bytes(low), bytes(high)))

    def pool_address(self, mint_x: Pubkey, mint_y: Pubkey) -> tuple[Pubkey, int]:
        """Address and bump of the pool record for a pair (order independent)."""
        return self.derive(POOL_SEED, mint_x, mint_y)

    def pool_authority(self, mint_x: Pubkey, mint_y: Pubkey, pool_bump: int) -> tuple[Pubkey, int]:
        """Address and bump of the authority that owns the pool's vaults."""
        return self.find(authority_seeds(mint_x, mint_y, pool_bump))

    def vault_address(self, mint: Pubkey, authority: Pubkey) -> tuple[Pubkey, int]:
        """Associated token account of `authority` for `mint`."""
        return Pubkey.find_program_address(
            [bytes(authority), bytes(self.token_program_id), bytes(mint)],
            self.associated_token_program_id,
        )

    def prove(self, address: Pubkey, seeds: Sequence[bytes], bump: int) -> PdaSigner:
        """Prove control of `address` by recomputing it from seeds and bump.

        Raises:
            InvalidVault: If the seeds and bump do not derive `address`
        """
        derived, canonical_bump = self.find(seeds)
        if derived != address or canonical_bump != bump:
            logger.warning(
                "derivation_mismatch",
                expected=str(address),
                derived=str(derived),
                bump=bump,
                canonical_bump=canonical_bump,
            )
            raise InvalidVault(f"Seeds with bump {bump} do not derive {address}")
        return PdaSigner(address=address, seeds=tuple(seeds), bump=bump, program_id=self.program_id)

    def verify(self, signer: PdaSigner) -> bool:
        """Check a PdaSigner against this program id without raising."""
        if signer.program_id != self.program_id:
            return False
        derived, canonical_bump = self.find(signer.seeds)
        return derived == signer.address and canonical_bump == signer.bump
