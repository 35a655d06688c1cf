"""Pydantic request and response models for the pool API.

Addresses travel as base58 strings and amounts as u64 integers (decimal
strings are accepted on input).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from cpdex.constants import BPS_DENOMINATOR
from cpdex.models.types import U64, Address


class ErrorResponse(BaseModel):
    """Body returned for a rejected instruction."""

    error: str = Field(description="Error name, e.g. SlippageExceeded")
    code: int = Field(description="Numeric program error code")
    detail: str = Field(description="Human readable message")


# --- Localnet provisioning ---


class CreateMintRequest(BaseModel):
    """Create a mint with zero supply."""

    decimals: int = Field(ge=0, le=255)
    address: Address | None = None


class MintResponse(BaseModel):
    address: Address
    decimals: int
    supply: U64


class CreateTokenAccountRequest(BaseModel):
    """Create an empty token account."""

    mint: Address
    owner: Address
    address: Address | None = None


class TokenAccountResponse(BaseModel):
    address: Address
    mint: Address
    owner: Address
    amount: U64


class MintToRequest(BaseModel):
    amount: U64


# --- Pools ---


class CreatePoolRequest(BaseModel):
    """Initialize the pool for a mint pair (either order)."""

    mint_a: Address
    mint_b: Address
    payer: Address


class PoolResponse(BaseModel):
    """A pool record, optionally with its live vault balances."""

    address: Address
    mint_a: Address
    mint_b: Address
    vault_a: Address
    vault_b: Address
    authority: Address
    reserve_a: U64 | None = None
    reserve_b: U64 | None = None


# --- Swaps ---


class SwapRequest(BaseModel):
    """Swap an exact input amount through a pool.

    The direction follows the mint of user_source.
    """

    pool: Address
    user: Address
    user_source: Address
    user_destination: Address
    vault_a: Address | None = None
    vault_b: Address | None = None
    amount_in: U64
    min_amount_out: U64


class SwapEventModel(BaseModel):
    pool: Address
    user: Address
    amount_in: U64
    amount_out: U64
    source_mint: Address
    destination_mint: Address


class SwapResponse(BaseModel):
    amount_out: U64
    event: SwapEventModel


class QuoteRequest(BaseModel):
    """Price a trade at the current reserves."""

    pool: Address
    source_mint: Address
    amount_in: U64
    slippage_bps: int | None = Field(default=None, ge=0, le=BPS_DENOMINATOR)


class QuoteResponse(BaseModel):
    pool: Address
    source_mint: Address
    destination_mint: Address
    amount_in: U64
    amount_out: U64
    min_amount_out: U64
    price_impact_bps: int
    reserve_in: U64
    reserve_out: U64


# --- Passthrough transfers ---


class TransactionRequest(BaseModel):
    """Move tokens between two accounts of the same mint."""

    authority: Address
    source: Address
    mint: Address
    destination: Address
    amount: U64


class TransactionEventModel(BaseModel):
    sender: Address
    receiver: Address
    amount: U64
