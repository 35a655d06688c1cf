"""The pool program: instruction entry points over one ledger.

DexProgram wires the ledger, address derivation, token program, pool registry
and swap engine together, and runs every instruction inside a ledger
transaction so that any failure leaves all accounts as they were.
"""

from __future__ import annotations

from collections import deque

import structlog
from solders.pubkey import Pubkey

from cpdex.config import DEFAULT_ENGINE_CONFIG, EngineConfig, load_engine_config
from cpdex.constants import EVENT_HISTORY_SIZE
from cpdex.derivation import AddressDerivation
from cpdex.ledger.store import Ledger
from cpdex.ledger.token import TokenProgram
from cpdex.models.events import DexEvent, TransactionEvent
from cpdex.models.pool import PoolState
from cpdex.models.types import validate_u64
from cpdex.pools.registry import PoolRegistry
from cpdex.swap.engine import SwapAccounts, SwapEngine, SwapOutcome, SwapQuote

logger = structlog.get_logger()


class DexProgram:
    """Constant-product pool program bound to a ledger.

    Args:
        ledger: Account store. A fresh empty ledger if not given.
        config: Engine configuration (program id, quote slippage)
    """

    def __init__(
        self,
        ledger: Ledger | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.config = config
        self.ledger = ledger or Ledger()
        self.derivation = AddressDerivation(Pubkey.from_string(config.program_id))
        self.token_program = TokenProgram(self.ledger, self.derivation)
        self.registry = PoolRegistry(self.ledger, self.token_program, self.derivation)
        self.engine = SwapEngine(self.registry, self.token_program, config=config)
        self.events: deque[DexEvent] = deque(maxlen=EVENT_HISTORY_SIZE)

    @property
    def program_id(self) -> Pubkey:
        return self.derivation.program_id

    def initialize_pool(self, mint_a: Pubkey, mint_b: Pubkey, payer: Pubkey) -> PoolState:
        """Create the pool for a mint pair. See PoolRegistry.initialize_pool."""
        with self.ledger.transaction():
            return self.registry.initialize_pool(mint_a, mint_b, payer)

    def swap(
        self,
        accounts: SwapAccounts,
        amount_in: int,
        min_amount_out: int,
        signers: frozenset[Pubkey] = frozenset(),
    ) -> SwapOutcome:
        """Execute a swap atomically and record its event. See SwapEngine.swap."""
        with self.ledger.transaction():
            outcome = self.engine.swap(accounts, amount_in, min_amount_out, signers)
        self.events.append(outcome.event)
        return outcome

    def quote(
        self,
        pool: Pubkey,
        source_mint: Pubkey,
        amount_in: int,
        slippage_bps: int | None = None,
    ) -> SwapQuote:
        """Price a trade without executing it. See SwapEngine.quote.

        Runs under the ledger lock so it never sees a swap half settled.
        """
        with self.ledger.transaction():
            return self.engine.quote(pool, source_mint, amount_in, slippage_bps)

    def reserves(self, pool: PoolState) -> tuple[int, int]:
        """Current balances of a pool's (vault_a, vault_b), read under the ledger lock."""
        with self.ledger.transaction():
            return (
                self.ledger.read_token_account(pool.vault_a).amount,
                self.ledger.read_token_account(pool.vault_b).amount,
            )

    def process_transaction(
        self,
        authority: Pubkey,
        source: Pubkey,
        mint: Pubkey,
        destination: Pubkey,
        amount: int,
        signers: frozenset[Pubkey] = frozenset(),
    ) -> TransactionEvent:
        """Move tokens between two accounts under the signing authority.

        A single checked transfer, with the mint's own decimals; every error
        from the token program propagates unchanged.

        Args:
            authority: Owner of the source account, must be among signers
            source: Token account debited
            mint: Mint both accounts hold
            destination: Token account credited
            amount: Base units to move (u64)
            signers: Keys that signed the invocation

        Returns:
            TransactionEvent recording sender, receiver and amount
        """
        amount = validate_u64(amount)
        with self.ledger.transaction():
            decimals = self.ledger.get_mint(mint).decimals
            self.token_program.transfer_checked(
                source=source,
                mint=mint,
                destination=destination,
                authority=authority,
                amount=amount,
                decimals=decimals,
                signers=signers,
            )
        event = TransactionEvent(sender=authority, receiver=destination, amount=amount)
        self.events.append(event)
        logger.info(
            "transaction_processed",
            sender=str(authority),
            source=str(source),
            receiver=str(destination),
            amount=amount,
        )
        return event


_default_program: DexProgram | None = None


def get_default_program() -> DexProgram:
    """Get the process-wide program, creating it from the environment on first use."""
    global _default_program
    if _default_program is None:
        config = load_engine_config()
        logger.info("program_created", program_id=config.program_id)
        _default_program = DexProgram(config=config)
    return _default_program
