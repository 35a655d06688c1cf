"""Error classes for the pool engine.

Program errors carry the numeric code the ledger reports for a failed
instruction (custom program errors start at 6000). Runtime and token errors
reuse the codes of the component that raises them.
"""

from typing import ClassVar


class DexError(Exception):
    """Base error for every failed instruction.

    Raising any DexError aborts the whole invocation; the ledger restores all
    accounts touched so far.
    """

    code: ClassVar[int] = 0

    @property
    def name(self) -> str:
        """Error name as reported to callers."""
        return type(self).__name__

    @property
    def detail(self) -> str:
        """Message without the name and code prefix."""
        return super().__str__()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.name} ({self.code}): {self.detail}"
        return f"{self.name} ({self.code})"


# =============================================================================
# Program errors
# =============================================================================


class InvalidMint(DexError):
    """Error 6000: Mint does not match the account it describes or the pool."""

    code = 6000


class InvalidDestinationMint(DexError):
    """Error 6001: Destination account mint differs from the destination vault."""

    code = 6001


class ZeroAmount(DexError):
    """Error 6002: Requested input amount is zero."""

    code = 6002


class PoolIsEmpty(DexError):
    """Error 6003: One of the pool reserves is zero."""

    code = 6003


class SlippageExceeded(DexError):
    """Error 6004: Computed output is below the caller's minimum."""

    code = 6004


class CalculationOverflow(DexError):
    """Error 6005: An arithmetic step left its integer range."""

    code = 6005


class InvalidVault(DexError):
    """Error 6006: Vault or authority address does not match its derivation."""

    code = 6006


class InvalidOwner(DexError):
    """Error 6007: Signer does not own the token account it acts through."""

    code = 6007


class InvalidSourceMint(InvalidDestinationMint):
    """Error 6008: Source account mint is neither of the pool's mints.

    Subclasses InvalidDestinationMint, the code this condition used to share,
    so handlers written against the older code still match.
    """

    code = 6008


# =============================================================================
# Runtime and token errors
# =============================================================================


class InsufficientFunds(DexError):
    """Error 1: Source account balance does not cover the transfer."""

    code = 1


class MintDecimalsMismatch(DexError):
    """Error 18: Declared decimals differ from the mint's decimals."""

    code = 18


class MissingRequiredSignature(DexError):
    """Error 2002: Authority did not sign the invocation."""

    code = 2002


class AccountAlreadyInitialized(DexError):
    """Error 3011: An account already exists at the target address."""

    code = 3011


class AccountNotFound(DexError):
    """Error 3012: No account exists at the given address."""

    code = 3012


class InvalidAccountData(DexError):
    """Error 3003: Account data does not decode as the expected record."""

    code = 3003


class PoolNotFound(AccountNotFound):
    """No pool record exists for the requested mint pair."""

    code = 3012
