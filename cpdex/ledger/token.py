"""Checked token transfers (the Transfer Service the swap engine relies on).

TokenProgram moves base units between token accounts after checking mints,
declared decimals and the authority. An authority is either a plain key, which
must be among the invocation's signers, or a PdaSigner, which must re-derive
under the program id it was issued for.
"""

from __future__ import annotations

from typing import Protocol

import structlog
from solders.pubkey import Pubkey

from cpdex.derivation import AddressDerivation, PdaSigner
from cpdex.errors import (
    InvalidMint,
    InvalidOwner,
    MintDecimalsMismatch,
    MissingRequiredSignature,
)
from cpdex.ledger.store import Ledger
from cpdex.models.accounts import TokenAccount

logger = structlog.get_logger()

Authority = Pubkey | PdaSigner


class TransferService(Protocol):
    """Protocol for checked token transfers.

    Implementations must be atomic per call and fail closed: either the full
    amount moves or an error is raised and nothing changes.
    """

    def transfer_checked(
        self,
        *,
        source: Pubkey,
        mint: Pubkey,
        destination: Pubkey,
        authority: Authority,
        amount: int,
        decimals: int,
        signers: frozenset[Pubkey] = frozenset(),
    ) -> None:
        """Move `amount` of `mint` from source to destination.

        Args:
            source: Token account debited
            mint: Mint both accounts must hold
            destination: Token account credited
            authority: Owner of the source account (key or program capability)
            amount: Base units to move
            decimals: Decimals the caller expects the mint to have
            signers: Keys that signed the invocation
        """
        ...


class TokenProgram:
    """Token program over a Ledger.

    Args:
        ledger: Account store to read and write
        derivation: Derivation used to verify PdaSigner authorities and to
            compute associated token account addresses
    """

    def __init__(self, ledger: Ledger, derivation: AddressDerivation) -> None:
        self.ledger = ledger
        self.derivation = derivation

    def create_associated_account(self, mint: Pubkey, owner: Pubkey) -> tuple[TokenAccount, int]:
        """Create the associated token account of `owner` for `mint`.

        Returns:
            Tuple of (account, bump of the associated-address derivation)
        """
        address, bump = self.derivation.vault_address(mint, owner)
        account = self.ledger.create_token_account(mint, owner, address=address)
        return account, bump

    def _authority_key(self, authority: Authority, signers: frozenset[Pubkey]) -> Pubkey:
        if isinstance(authority, PdaSigner):
            if not self.derivation.verify(authority):
                raise MissingRequiredSignature(
                    f"Signer seeds do not derive {authority.address} under {self.derivation.program_id}"
                )
            return authority.address
        if authority not in signers:
            raise MissingRequiredSignature(f"Authority {authority} did not sign")
        return authority

    def transfer_checked(
        self,
        *,
        source: Pubkey,
        mint: Pubkey,
        destination: Pubkey,
        authority: Authority,
        amount: int,
        decimals: int,
        signers: frozenset[Pubkey] = frozenset(),
    ) -> None:
        """Move `amount` of `mint` from source to destination.

        Raises:
            AccountNotFound: If either account does not exist
            InvalidMint: If an account holds another mint, or the mint is unknown
            MintDecimalsMismatch: If decimals differ from the mint's
            MissingRequiredSignature: If the authority is not proven
            InvalidOwner: If the authority does not own the source account
            InsufficientFunds: If the source balance is too small
            CalculationOverflow: If the destination balance would exceed u64
        """
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        with self.ledger.transaction():
            mint_record = self.ledger.get_mint(mint)
            from_account = self.ledger.read_token_account(source)
            to_account = self.ledger.read_token_account(destination)
            if from_account.mint != mint:
                raise InvalidMint(f"Source {source} holds {from_account.mint}, not {mint}")
            if to_account.mint != mint:
                raise InvalidMint(f"Destination {destination} holds {to_account.mint}, not {mint}")
            if decimals != mint_record.decimals:
                raise MintDecimalsMismatch(
                    f"Mint {mint} has {mint_record.decimals} decimals, caller declared {decimals}"
                )
            authority_key = self._authority_key(authority, signers)
            if from_account.owner != authority_key:
                raise InvalidOwner(f"{authority_key} does not own {source}")

            self.ledger.debit(source, amount)
            self.ledger.credit(destination, amount)

        logger.debug(
            "transfer_checked",
            source=str(source),
            destination=str(destination),
            mint=str(mint),
            amount=amount,
        )
