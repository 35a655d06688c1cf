"""API endpoints for the pool program.

The server is a localnet harness: requests are not signed, so the key named
as `user` (or `authority`) is taken as the invocation's signer.
"""

import asyncio
from collections.abc import Callable
from functools import partial
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException
from solders.pubkey import Pubkey

from cpdex.api.schemas import (
    CreateMintRequest,
    CreatePoolRequest,
    CreateTokenAccountRequest,
    MintResponse,
    MintToRequest,
    PoolResponse,
    QuoteRequest,
    QuoteResponse,
    SwapEventModel,
    SwapRequest,
    SwapResponse,
    TokenAccountResponse,
    TransactionEventModel,
    TransactionRequest,
)
from cpdex.models.pool import PoolState
from cpdex.models.types import to_pubkey
from cpdex.program import DexProgram, get_default_program
from cpdex.swap.engine import SwapAccounts

logger = structlog.get_logger()

router = APIRouter()

T = TypeVar("T")


def get_program() -> DexProgram:
    """Dependency provider for the program instance.

    Override this in tests to inject a program over a prepared ledger:
        app.dependency_overrides[get_program] = lambda: program

    Returns:
        The program instance serving requests.
    """
    return get_default_program()


async def _run(fn: Callable[..., T], *args: object, **kwargs: object) -> T:
    """Run a ledger call off the event loop (the ledger serializes with a lock)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(fn, *args, **kwargs))


def _pubkey(value: str) -> Pubkey:
    """Parse a base58 path parameter, rejecting malformed input with 422."""
    try:
        return to_pubkey(value)
    except ValueError as err:
        raise HTTPException(status_code=422, detail=str(err)) from err


def _optional_pubkey(value: str | None) -> Pubkey | None:
    return None if value is None else Pubkey.from_string(value)


def _pool_response(
    program: DexProgram,
    pool: PoolState,
    reserves: tuple[int, int] | None = None,
) -> PoolResponse:
    address = program.registry.pool_address(pool.mint_a, pool.mint_b)
    authority, _ = program.derivation.pool_authority(pool.mint_a, pool.mint_b, pool.pool_bump)
    response = PoolResponse(
        address=str(address),
        mint_a=str(pool.mint_a),
        mint_b=str(pool.mint_b),
        vault_a=str(pool.vault_a),
        vault_b=str(pool.vault_b),
        authority=str(authority),
    )
    if reserves is not None:
        response.reserve_a, response.reserve_b = reserves
    return response


# --- Localnet provisioning ---


@router.post("/mints", status_code=201)
async def create_mint(
    request: CreateMintRequest,
    program: DexProgram = Depends(get_program),
) -> MintResponse:
    """Create a mint."""
    mint = await _run(
        program.ledger.create_mint,
        request.decimals,
        _optional_pubkey(request.address),
    )
    return MintResponse.model_validate(mint, from_attributes=True)


@router.post("/token-accounts", status_code=201)
async def create_token_account(
    request: CreateTokenAccountRequest,
    program: DexProgram = Depends(get_program),
) -> TokenAccountResponse:
    """Create an empty token account."""
    account = await _run(
        program.ledger.create_token_account,
        Pubkey.from_string(request.mint),
        Pubkey.from_string(request.owner),
        _optional_pubkey(request.address),
    )
    return TokenAccountResponse.model_validate(account, from_attributes=True)


@router.get("/token-accounts/{address}")
async def get_token_account(
    address: str,
    program: DexProgram = Depends(get_program),
) -> TokenAccountResponse:
    """Read a token account."""
    account = await _run(program.ledger.read_token_account, _pubkey(address))
    return TokenAccountResponse.model_validate(account, from_attributes=True)


@router.post("/token-accounts/{address}/mint-to")
async def mint_to(
    address: str,
    request: MintToRequest,
    program: DexProgram = Depends(get_program),
) -> TokenAccountResponse:
    """Issue new tokens into a token account."""
    account = await _run(program.ledger.mint_to, _pubkey(address), request.amount)
    return TokenAccountResponse.model_validate(account, from_attributes=True)


# --- Pools ---


@router.post("/pools", status_code=201)
async def initialize_pool(
    request: CreatePoolRequest,
    program: DexProgram = Depends(get_program),
) -> PoolResponse:
    """Initialize the pool for a mint pair and create its empty vaults."""
    pool = await _run(
        program.initialize_pool,
        Pubkey.from_string(request.mint_a),
        Pubkey.from_string(request.mint_b),
        Pubkey.from_string(request.payer),
    )
    return _pool_response(program, pool)


@router.get("/pools/{mint_x}/{mint_y}")
async def get_pool(
    mint_x: str,
    mint_y: str,
    program: DexProgram = Depends(get_program),
) -> PoolResponse:
    """Look up the pool for a mint pair (either order) with its live reserves."""
    pool = await _run(program.registry.get_pool, _pubkey(mint_x), _pubkey(mint_y))
    reserves = await _run(program.reserves, pool)
    return _pool_response(program, pool, reserves)


# --- Swaps ---


@router.post("/swap")
async def swap(
    request: SwapRequest,
    program: DexProgram = Depends(get_program),
) -> SwapResponse:
    """Swap an exact input amount, enforcing the caller's minimum output."""
    user = Pubkey.from_string(request.user)
    accounts = SwapAccounts(
        pool=Pubkey.from_string(request.pool),
        user=user,
        user_source=Pubkey.from_string(request.user_source),
        user_destination=Pubkey.from_string(request.user_destination),
        vault_a=_optional_pubkey(request.vault_a),
        vault_b=_optional_pubkey(request.vault_b),
    )
    logger.info(
        "received_swap",
        pool=request.pool,
        user=request.user,
        amount_in=request.amount_in,
        min_amount_out=request.min_amount_out,
    )
    outcome = await _run(
        program.swap,
        accounts,
        request.amount_in,
        request.min_amount_out,
        frozenset({user}),
    )
    return SwapResponse(
        amount_out=outcome.amount_out,
        event=SwapEventModel.model_validate(outcome.event, from_attributes=True),
    )


@router.post("/quote")
async def quote(
    request: QuoteRequest,
    program: DexProgram = Depends(get_program),
) -> QuoteResponse:
    """Price a trade at the current reserves without executing it."""
    result = await _run(
        program.quote,
        Pubkey.from_string(request.pool),
        Pubkey.from_string(request.source_mint),
        request.amount_in,
        request.slippage_bps,
    )
    return QuoteResponse.model_validate(result, from_attributes=True)


# --- Passthrough transfers ---


@router.post("/transactions")
async def process_transaction(
    request: TransactionRequest,
    program: DexProgram = Depends(get_program),
) -> TransactionEventModel:
    """Transfer tokens between two accounts under the authority's signature."""
    authority = Pubkey.from_string(request.authority)
    event = await _run(
        program.process_transaction,
        authority,
        Pubkey.from_string(request.source),
        Pubkey.from_string(request.mint),
        Pubkey.from_string(request.destination),
        request.amount,
        frozenset({authority}),
    )
    return TransactionEventModel.model_validate(event, from_attributes=True)
