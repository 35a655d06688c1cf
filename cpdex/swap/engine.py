"""Swap engine: prices trades against live vault reserves and settles them.

A swap runs these steps, each of which may abort the invocation:

1. Load the pool and check it lives at the address its mints derive.
2. Check the user's accounts and resolve which vault pays in and out.
3. Prove the pool authority and check the vaults re-derive from it.
4. Read both vault balances fresh, then price with the constant product rule.
5. Enforce the caller's minimum output.
6. Transfer the input from the user, then the output from the pool.

The engine does not roll back by itself: it relies on the ledger transaction
that wraps the whole invocation (see DexProgram), so a failed output transfer
also discards the input transfer.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from solders.pubkey import Pubkey

from cpdex.amm.base import SwapResult
from cpdex.amm.constant_product import ConstantProduct, constant_product
from cpdex.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from cpdex.errors import InvalidVault, SlippageExceeded
from cpdex.ledger.store import Ledger
from cpdex.ledger.token import TransferService
from cpdex.models.events import SwapEvent
from cpdex.models.pool import PoolState
from cpdex.models.types import validate_u64
from cpdex.pools.registry import PoolRegistry
from cpdex.swap.vaults import VaultRoles, require_destination_mint, resolve_source_mint
from cpdex.validation import require_owner, require_signer, require_vault, require_vault_account

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapAccounts:
    """Accounts a swap instruction names.

    Attributes:
        pool: Address of the pool record
        user: Signer trading through the pool
        user_source: User token account debited with the input
        user_destination: User token account credited with the output
        vault_a: Vault for the pool's mint_a as supplied by the caller
            (None to use the recorded vault)
        vault_b: Vault for the pool's mint_b as supplied by the caller
    """

    pool: Pubkey
    user: Pubkey
    user_source: Pubkey
    user_destination: Pubkey
    vault_a: Pubkey | None = None
    vault_b: Pubkey | None = None


@dataclass(frozen=True)
class SwapOutcome:
    """Result of a settled swap."""

    amount_out: int
    event: SwapEvent
    pricing: SwapResult


@dataclass(frozen=True)
class SwapQuote:
    """Read-only price of a trade at the current reserves."""

    pool: Pubkey
    source_mint: Pubkey
    destination_mint: Pubkey
    amount_in: int
    amount_out: int
    min_amount_out: int
    price_impact_bps: int
    reserve_in: int
    reserve_out: int


class SwapEngine:
    """Executes swaps against pools in a PoolRegistry.

    Args:
        registry: Pool registry (gives access to the ledger and derivation)
        transfers: Transfer service that moves tokens
        amm: Pricing rule. Defaults to the fee-less constant product.
        config: Engine configuration
    """

    def __init__(
        self,
        registry: PoolRegistry,
        transfers: TransferService,
        amm: ConstantProduct | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.registry = registry
        self.transfers = transfers
        self.amm = amm or constant_product
        self.config = config

    @property
    def ledger(self) -> Ledger:
        return self.registry.ledger

    def _load_verified_pool(self, address: Pubkey) -> PoolState:
        """Load a pool and check it sits at the address its own mints derive."""
        pool = self.registry.load_pool(address)
        derived, bump = self.registry.derivation.pool_address(pool.mint_a, pool.mint_b)
        if derived != address or bump != pool.pool_bump:
            raise InvalidVault(f"Pool {address} does not derive from its mints")
        return pool

    def _read_reserves(self, roles: VaultRoles, authority: Pubkey) -> tuple[int, int]:
        """Read both vault balances as of now.

        Called once per invocation, immediately before pricing; reserves are
        never carried over from an earlier read.
        """
        vault_in = self.ledger.read_token_account(roles.source_vault)
        vault_out = self.ledger.read_token_account(roles.destination_vault)
        require_vault_account(vault_in, roles.source_mint, authority)
        require_vault_account(vault_out, roles.destination_mint, authority)
        return vault_in.amount, vault_out.amount

    def swap(
        self,
        accounts: SwapAccounts,
        amount_in: int,
        min_amount_out: int,
        signers: frozenset[Pubkey] = frozenset(),
    ) -> SwapOutcome:
        """Swap `amount_in` of the source account's mint for the other pool mint.

        Args:
            accounts: Accounts named by the instruction
            amount_in: Exact input amount (u64)
            min_amount_out: Smallest acceptable output (u64)
            signers: Keys that signed the invocation

        Returns:
            SwapOutcome with the output amount and the swap event

        Raises:
            PoolNotFound: If no pool exists at accounts.pool
            MissingRequiredSignature: If the user did not sign
            InvalidOwner: If the user does not own the source account
            InvalidSourceMint: If the source account's mint is not in the pool
            InvalidDestinationMint: If the destination account holds the wrong mint
            InvalidVault: If a vault, the authority or the pool fails re-derivation
            PoolIsEmpty: If either reserve is zero
            ZeroAmount: If amount_in is zero
            CalculationOverflow: If pricing leaves its integer range
            SlippageExceeded: If the output is below min_amount_out
        """
        amount_in = validate_u64(amount_in)
        min_amount_out = validate_u64(min_amount_out)

        pool = self._load_verified_pool(accounts.pool)
        if accounts.vault_a is not None:
            require_vault(accounts.vault_a, pool.vault_a)
        if accounts.vault_b is not None:
            require_vault(accounts.vault_b, pool.vault_b)

        require_signer(accounts.user, signers)
        user_source = self.ledger.read_token_account(accounts.user_source)
        require_owner(user_source, accounts.user)
        roles = resolve_source_mint(pool, user_source.mint)
        # the destination is only looked at once the source mint is known good
        user_destination = self.ledger.read_token_account(accounts.user_destination)
        require_destination_mint(roles, user_destination)

        authority = self.registry.authority_signer(pool)

        reserve_in, reserve_out = self._read_reserves(roles, authority.address)
        pricing = self.amm.swap_exact_in(amount_in, reserve_in, reserve_out)

        if pricing.amount_out < min_amount_out:
            logger.info(
                "slippage_exceeded",
                pool=str(accounts.pool),
                amount_in=amount_in,
                amount_out=pricing.amount_out,
                min_amount_out=min_amount_out,
            )
            raise SlippageExceeded(
                f"Output {pricing.amount_out} is below minimum {min_amount_out}"
            )

        source_decimals = self.ledger.get_mint(roles.source_mint).decimals
        destination_decimals = self.ledger.get_mint(roles.destination_mint).decimals

        self.transfers.transfer_checked(
            source=accounts.user_source,
            mint=roles.source_mint,
            destination=roles.source_vault,
            authority=accounts.user,
            amount=amount_in,
            decimals=source_decimals,
            signers=signers,
        )
        self.transfers.transfer_checked(
            source=roles.destination_vault,
            mint=roles.destination_mint,
            destination=accounts.user_destination,
            authority=authority,
            amount=pricing.amount_out,
            decimals=destination_decimals,
        )

        event = SwapEvent(
            pool=accounts.pool,
            user=accounts.user,
            amount_in=amount_in,
            amount_out=pricing.amount_out,
            source_mint=roles.source_mint,
            destination_mint=roles.destination_mint,
        )
        logger.info(
            "swap_executed",
            pool=str(accounts.pool),
            user=str(accounts.user),
            amount_in=amount_in,
            amount_out=pricing.amount_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )
        return SwapOutcome(amount_out=pricing.amount_out, event=event, pricing=pricing)

    def quote(
        self,
        pool_address: Pubkey,
        source_mint: Pubkey,
        amount_in: int,
        slippage_bps: int | None = None,
    ) -> SwapQuote:
        """Price a trade at the current reserves without executing it.

        Args:
            pool_address: Address of the pool record
            source_mint: Mint being sold
            amount_in: Exact input amount (u64)
            slippage_bps: Tolerance used to derive min_amount_out
                (defaults to config.default_slippage_bps)

        Raises:
            Same pricing errors as swap() steps 1-4, and ValueError for a
            slippage outside [0, 10000]
        """
        amount_in = validate_u64(amount_in)
        if slippage_bps is None:
            slippage_bps = self.config.default_slippage_bps

        pool = self._load_verified_pool(pool_address)
        roles = resolve_source_mint(pool, source_mint)
        authority = self.registry.authority_signer(pool)
        reserve_in, reserve_out = self._read_reserves(roles, authority.address)
        pricing = self.amm.swap_exact_in(amount_in, reserve_in, reserve_out)

        return SwapQuote(
            pool=pool_address,
            source_mint=roles.source_mint,
            destination_mint=roles.destination_mint,
            amount_in=amount_in,
            amount_out=pricing.amount_out,
            min_amount_out=self.amm.min_amount_out(pricing.amount_out, slippage_bps),
            price_impact_bps=self.amm.price_impact_bps(pricing.amount_out, reserve_out),
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )
