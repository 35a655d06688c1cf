"""Pool registry: creates pool records and looks them up by mint pair.

A pool lives at the program-derived address of its canonical mint pair, so a
lookup never needs an index: deriving the address for (X, Y) or (Y, X) gives
the same account, which either holds a pool record or does not exist.
"""

from __future__ import annotations

import structlog
from solders.pubkey import Pubkey

from cpdex.derivation import AddressDerivation, PdaSigner, authority_seeds, canonical_mints
from cpdex.errors import AccountNotFound, InvalidVault, PoolNotFound
from cpdex.ledger.store import Ledger
from cpdex.ledger.token import TokenProgram
from cpdex.models.pool import PoolState
from cpdex.validation import require_distinct_mints, require_vault

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of constant-product pools owned by one program.

    Args:
        ledger: Account store holding pool records and vaults
        token_program: Token program used to create the vaults
        derivation: Address derivation bound to the owning program
    """

    def __init__(
        self,
        ledger: Ledger,
        token_program: TokenProgram,
        derivation: AddressDerivation,
    ) -> None:
        self.ledger = ledger
        self.token_program = token_program
        self.derivation = derivation

    def pool_address(self, mint_x: Pubkey, mint_y: Pubkey) -> Pubkey:
        """Address of the pool for a mint pair (order independent)."""
        address, _ = self.derivation.pool_address(mint_x, mint_y)
        return address

    def initialize_pool(self, mint_a: Pubkey, mint_b: Pubkey, payer: Pubkey) -> PoolState:
        """Create a pool and its two empty vaults.

        The pair is canonicalized first, so initialize_pool(X, Y) and
        initialize_pool(Y, X) create the same record at the same address.

        Args:
            mint_a: One mint of the pair
            mint_b: The other mint of the pair
            payer: Account funding the new accounts

        Returns:
            The persisted PoolState

        Raises:
            InvalidMint: If the mints are equal or either mint does not exist
            AccountAlreadyInitialized: If the pool (or a vault) already exists
        """
        require_distinct_mints(mint_a, mint_b)
        low, high = canonical_mints(mint_a, mint_b)

        with self.ledger.transaction():
            self.ledger.get_mint(low)
            self.ledger.get_mint(high)

            pool_address, pool_bump = self.derivation.pool_address(low, high)
            authority, authority_bump = self.derivation.pool_authority(low, high, pool_bump)

            vault_a, vault_a_bump = self.token_program.create_associated_account(low, authority)
            vault_b, vault_b_bump = self.token_program.create_associated_account(high, authority)

            state = PoolState(
                mint_a=low,
                mint_b=high,
                vault_a=vault_a.address,
                vault_b=vault_b.address,
                pool_bump=pool_bump,
                authority_bump=authority_bump,
                vault_a_bump=vault_a_bump,
                vault_b_bump=vault_b_bump,
            )
            self.ledger.allocate(pool_address, self.derivation.program_id, state.pack())

        logger.info(
            "pool_initialized",
            pool=str(pool_address),
            mint_a=str(low),
            mint_b=str(high),
            authority=str(authority),
            payer=str(payer),
        )
        return state

    def load_pool(self, address: Pubkey) -> PoolState:
        """Load the pool record stored at an address.

        Raises:
            PoolNotFound: If no account exists at address
            InvalidAccountData: If the account is not a pool record of this program
        """
        try:
            data = self.ledger.read_data(address, self.derivation.program_id)
        except AccountNotFound as err:
            raise PoolNotFound(f"No pool at {address}") from err
        return PoolState.unpack(data)

    def get_pool(self, mint_x: Pubkey, mint_y: Pubkey) -> PoolState:
        """Load the pool for a mint pair (order independent).

        Raises:
            PoolNotFound: If the pair has no pool
        """
        return self.load_pool(self.pool_address(mint_x, mint_y))

    def authority_signer(self, pool: PoolState) -> PdaSigner:
        """Prove control of a pool's authority and check its vaults.

        Seeds come from the pool's stored mints, which are canonical by
        construction, and are passed through the same canonical ordering used
        at creation.

        Raises:
            InvalidVault: If the authority or either vault does not re-derive
        """
        seeds = authority_seeds(pool.mint_a, pool.mint_b, pool.pool_bump)
        authority, _ = self.derivation.find(seeds)
        signer = self.derivation.prove(authority, seeds, pool.authority_bump)

        for mint, vault, bump in (
            (pool.mint_a, pool.vault_a, pool.vault_a_bump),
            (pool.mint_b, pool.vault_b, pool.vault_b_bump),
        ):
            derived, derived_bump = self.derivation.vault_address(mint, signer.address)
            require_vault(vault, derived)
            if derived_bump != bump:
                raise InvalidVault(f"Vault {vault} recorded with bump {bump}, derives with {derived_bump}")
        return signer
