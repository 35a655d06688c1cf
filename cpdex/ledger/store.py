"""In-memory account store with whole-invocation atomicity.

The Ledger stands in for the runtime that invokes the program. It holds mints,
token accounts and raw program-owned accounts, and runs each invocation inside
transaction(): on any exception every account is restored to its state at
entry, so a failed instruction never leaves partial writes behind.

Records are immutable, so a snapshot is a shallow copy of the three maps.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

import structlog
from solders.pubkey import Pubkey

from cpdex.constants import U64_MAX
from cpdex.errors import (
    AccountAlreadyInitialized,
    AccountNotFound,
    CalculationOverflow,
    InsufficientFunds,
    InvalidAccountData,
    InvalidMint,
)
from cpdex.models.accounts import DataAccount, Mint, TokenAccount

logger = structlog.get_logger()

_Snapshot = tuple[dict[Pubkey, Mint], dict[Pubkey, TokenAccount], dict[Pubkey, DataAccount]]


class Ledger:
    """Account store for mints, token accounts and program data accounts.

    Invocations are serialized with a re-entrant lock, which plays the part of
    the runtime's account-level write isolation.
    """

    def __init__(self) -> None:
        self._mints: dict[Pubkey, Mint] = {}
        self._token_accounts: dict[Pubkey, TokenAccount] = {}
        self._data_accounts: dict[Pubkey, DataAccount] = {}
        self._lock = threading.RLock()

    # --- Atomicity ---

    @contextmanager
    def transaction(self) -> Iterator[Ledger]:
        """Run a block atomically: commit on success, roll back on any error."""
        with self._lock:
            snapshot = self._snapshot()
            try:
                yield self
            except Exception as exc:
                self._restore(snapshot)
                logger.debug("transaction_rolled_back", error=type(exc).__name__)
                raise

    def _snapshot(self) -> _Snapshot:
        return dict(self._mints), dict(self._token_accounts), dict(self._data_accounts)

    def _restore(self, snapshot: _Snapshot) -> None:
        self._mints, self._token_accounts, self._data_accounts = snapshot

    def exists(self, address: Pubkey) -> bool:
        """True if any kind of account lives at address."""
        return (
            address in self._mints
            or address in self._token_accounts
            or address in self._data_accounts
        )

    def _require_free(self, address: Pubkey) -> None:
        if self.exists(address):
            raise AccountAlreadyInitialized(f"Account {address} already in use")

    # --- Mints ---

    def create_mint(self, decimals: int, address: Pubkey | None = None) -> Mint:
        """Create a new mint with zero supply."""
        if not 0 <= decimals <= 255:
            raise ValueError(f"decimals must fit in one byte: {decimals}")
        address = address or Pubkey.new_unique()
        with self._lock:
            self._require_free(address)
            mint = Mint(address=address, decimals=decimals)
            self._mints[address] = mint
        logger.debug("mint_created", mint=str(address), decimals=decimals)
        return mint

    def get_mint(self, address: Pubkey) -> Mint:
        """Get a mint.

        Raises:
            InvalidMint: If no mint exists at address
        """
        mint = self._mints.get(address)
        if mint is None:
            raise InvalidMint(f"No mint at {address}")
        return mint

    # --- Token accounts ---

    def create_token_account(
        self,
        mint: Pubkey,
        owner: Pubkey,
        address: Pubkey | None = None,
    ) -> TokenAccount:
        """Create an empty token account for `mint` owned by `owner`.

        Raises:
            InvalidMint: If the mint does not exist
            AccountAlreadyInitialized: If address is taken
        """
        address = address or Pubkey.new_unique()
        with self._lock:
            self.get_mint(mint)
            self._require_free(address)
            account = TokenAccount(address=address, mint=mint, owner=owner)
            self._token_accounts[address] = account
        logger.debug("token_account_created", account=str(address), mint=str(mint), owner=str(owner))
        return account

    def read_token_account(self, address: Pubkey) -> TokenAccount:
        """Read the current record of a token account.

        Every call returns the record as of now; callers that need a live
        balance must call this again rather than keep an earlier result.

        Raises:
            AccountNotFound: If no token account exists at address
        """
        account = self._token_accounts.get(address)
        if account is None:
            raise AccountNotFound(f"No token account at {address}")
        return account

    def credit(self, address: Pubkey, amount: int) -> TokenAccount:
        """Add amount to a token account balance.

        Raises:
            CalculationOverflow: If the balance would exceed u64
        """
        account = self.read_token_account(address)
        new_amount = account.amount + amount
        if new_amount > U64_MAX:
            raise CalculationOverflow(f"Balance of {address} would exceed u64")
        updated = replace(account, amount=new_amount)
        self._token_accounts[address] = updated
        return updated

    def debit(self, address: Pubkey, amount: int) -> TokenAccount:
        """Subtract amount from a token account balance.

        Raises:
            InsufficientFunds: If the balance is smaller than amount
        """
        account = self.read_token_account(address)
        if account.amount < amount:
            raise InsufficientFunds(f"Account {address} holds {account.amount}, needs {amount}")
        updated = replace(account, amount=account.amount - amount)
        self._token_accounts[address] = updated
        return updated

    def mint_to(self, address: Pubkey, amount: int) -> TokenAccount:
        """Issue new tokens into an account (test and localnet provisioning)."""
        with self.transaction():
            account = self.read_token_account(address)
            mint = self.get_mint(account.mint)
            if mint.supply + amount > U64_MAX:
                raise CalculationOverflow(f"Supply of {mint.address} would exceed u64")
            self._mints[mint.address] = replace(mint, supply=mint.supply + amount)
            return self.credit(address, amount)

    # --- Program data accounts ---

    def allocate(self, address: Pubkey, owner: Pubkey, data: bytes) -> DataAccount:
        """Create a program-owned account holding data; its size is fixed forever.

        Raises:
            AccountAlreadyInitialized: If address is taken
        """
        with self._lock:
            self._require_free(address)
            account = DataAccount(address=address, owner=owner, data=bytes(data))
            self._data_accounts[address] = account
        return account

    def read_data(self, address: Pubkey, owner: Pubkey) -> bytes:
        """Read a program-owned account's data.

        Raises:
            AccountNotFound: If no data account exists at address
            InvalidAccountData: If the account is owned by another program
        """
        account = self._data_accounts.get(address)
        if account is None:
            raise AccountNotFound(f"No account at {address}")
        if account.owner != owner:
            raise InvalidAccountData(f"Account {address} is owned by {account.owner}, not {owner}")
        return account.data
