"""Tests for checked token transfers."""

from dataclasses import dataclass

import pytest
from solders.pubkey import Pubkey

from cpdex.derivation import AddressDerivation, PdaSigner
from cpdex.errors import (
    AccountNotFound,
    InsufficientFunds,
    InvalidMint,
    InvalidOwner,
    MintDecimalsMismatch,
    MissingRequiredSignature,
)
from cpdex.ledger.store import Ledger
from cpdex.ledger.token import TokenProgram
from tests.helpers import OTHER_PROGRAM_ID


@dataclass
class Accounts:
    mint: Pubkey
    owner: Pubkey
    source: Pubkey
    destination: Pubkey


@pytest.fixture
def token_program(ledger: Ledger) -> TokenProgram:
    return TokenProgram(ledger, AddressDerivation())


@pytest.fixture
def accounts(ledger: Ledger) -> Accounts:
    mint = ledger.create_mint(6).address
    owner = Pubkey.new_unique()
    source = ledger.create_token_account(mint, owner).address
    destination = ledger.create_token_account(mint, Pubkey.new_unique()).address
    ledger.mint_to(source, 1_000)
    return Accounts(mint=mint, owner=owner, source=source, destination=destination)


def transfer(token_program: TokenProgram, accounts: Accounts, **overrides) -> None:
    kwargs = {
        "source": accounts.source,
        "mint": accounts.mint,
        "destination": accounts.destination,
        "authority": accounts.owner,
        "amount": 100,
        "decimals": 6,
        "signers": frozenset({accounts.owner}),
    }
    kwargs.update(overrides)
    token_program.transfer_checked(**kwargs)


class TestTransferChecked:
    """Tests for TokenProgram.transfer_checked."""

    def test_moves_amount(self, token_program: TokenProgram, ledger: Ledger, accounts: Accounts) -> None:
        transfer(token_program, accounts)
        assert ledger.read_token_account(accounts.source).amount == 900
        assert ledger.read_token_account(accounts.destination).amount == 100

    def test_wrong_decimals(self, token_program: TokenProgram, ledger: Ledger, accounts: Accounts) -> None:
        with pytest.raises(MintDecimalsMismatch):
            transfer(token_program, accounts, decimals=9)
        assert ledger.read_token_account(accounts.source).amount == 1_000

    def test_unsigned_authority(self, token_program: TokenProgram, accounts: Accounts) -> None:
        with pytest.raises(MissingRequiredSignature):
            transfer(token_program, accounts, signers=frozenset())

    def test_authority_not_owner(self, token_program: TokenProgram, accounts: Accounts) -> None:
        stranger = Pubkey.new_unique()
        with pytest.raises(InvalidOwner):
            transfer(token_program, accounts, authority=stranger, signers=frozenset({stranger}))

    def test_mint_mismatch(self, token_program: TokenProgram, ledger: Ledger, accounts: Accounts) -> None:
        other = ledger.create_mint(6).address
        with pytest.raises(InvalidMint):
            transfer(token_program, accounts, mint=other)

    def test_destination_holds_other_mint(
        self, token_program: TokenProgram, ledger: Ledger, accounts: Accounts
    ) -> None:
        other = ledger.create_mint(6).address
        foreign = ledger.create_token_account(other, Pubkey.new_unique()).address
        with pytest.raises(InvalidMint):
            transfer(token_program, accounts, destination=foreign)

    def test_missing_destination(self, token_program: TokenProgram, accounts: Accounts) -> None:
        with pytest.raises(AccountNotFound):
            transfer(token_program, accounts, destination=Pubkey.new_unique())

    def test_insufficient_funds(self, token_program: TokenProgram, ledger: Ledger, accounts: Accounts) -> None:
        with pytest.raises(InsufficientFunds):
            transfer(token_program, accounts, amount=1_001)
        assert ledger.read_token_account(accounts.destination).amount == 0

    def test_negative_amount(self, token_program: TokenProgram, accounts: Accounts) -> None:
        with pytest.raises(ValueError):
            transfer(token_program, accounts, amount=-1)


class TestPdaAuthority:
    """Tests for transfers signed by a program-derived address."""

    def _pda_account(self, ledger: Ledger, derivation: AddressDerivation, mint: Pubkey) -> tuple[PdaSigner, Pubkey]:
        seeds = (b"vault", bytes(mint))
        address, bump = derivation.find(seeds)
        signer = derivation.prove(address, seeds, bump)
        account = ledger.create_token_account(mint, address).address
        ledger.mint_to(account, 50)
        return signer, account

    def test_pda_signer_moves_funds(self, token_program: TokenProgram, ledger: Ledger, accounts: Accounts) -> None:
        signer, account = self._pda_account(ledger, token_program.derivation, accounts.mint)

        transfer(token_program, accounts, source=account, authority=signer, amount=50, signers=frozenset())

        assert ledger.read_token_account(accounts.destination).amount == 50

    def test_pda_signer_from_other_program(
        self, token_program: TokenProgram, ledger: Ledger, accounts: Accounts
    ) -> None:
        foreign = AddressDerivation(OTHER_PROGRAM_ID)
        signer, account = self._pda_account(ledger, foreign, accounts.mint)

        with pytest.raises(MissingRequiredSignature):
            transfer(token_program, accounts, source=account, authority=signer, amount=50)

    def test_associated_account_address(self, token_program: TokenProgram, ledger: Ledger) -> None:
        mint = ledger.create_mint(6).address
        owner = Pubkey.new_unique()
        account, bump = token_program.create_associated_account(mint, owner)
        assert (account.address, bump) == token_program.derivation.vault_address(mint, owner)
        assert account.owner == owner
