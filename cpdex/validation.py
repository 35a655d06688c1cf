"""Account checks run at the top of each instruction.

Each check either returns quietly or raises the typed error for the broken
constraint, so handlers read as a flat list of requirements.
"""

from solders.pubkey import Pubkey

from cpdex.errors import InvalidMint, InvalidOwner, InvalidVault, MissingRequiredSignature
from cpdex.models.accounts import TokenAccount


def require_signer(key: Pubkey, signers: frozenset[Pubkey]) -> None:
    """Raise MissingRequiredSignature unless `key` signed the invocation."""
    if key not in signers:
        raise MissingRequiredSignature(f"{key} must sign")


def require_owner(account: TokenAccount, owner: Pubkey) -> None:
    """Raise InvalidOwner unless `owner` owns the token account."""
    if account.owner != owner:
        raise InvalidOwner(f"{owner} does not own {account.address} (owner {account.owner})")


def require_distinct_mints(mint_a: Pubkey, mint_b: Pubkey) -> None:
    """Raise InvalidMint if a pair names the same mint twice."""
    if mint_a == mint_b:
        raise InvalidMint(f"Pool mints must differ, got {mint_a} twice")


def require_vault(supplied: Pubkey, recorded: Pubkey) -> None:
    """Raise InvalidVault unless a supplied vault is the pool's recorded vault."""
    if supplied != recorded:
        raise InvalidVault(f"Vault {supplied} is not the pool's vault {recorded}")


def require_vault_account(vault: TokenAccount, mint: Pubkey, authority: Pubkey) -> None:
    """Raise InvalidVault unless a vault holds `mint` and belongs to the pool authority."""
    if vault.mint != mint:
        raise InvalidVault(f"Vault {vault.address} holds {vault.mint}, expected {mint}")
    if vault.owner != authority:
        raise InvalidVault(f"Vault {vault.address} is owned by {vault.owner}, not the pool authority")
