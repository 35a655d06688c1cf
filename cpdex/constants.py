"""Program constants for the constant-product pool engine.

Centralizes well-known program ids, derivation seeds and integer bounds.
"""

import hashlib

from solders.pubkey import Pubkey

# Program id of the pool engine (overridable via CPDEX_PROGRAM_ID)
DEFAULT_PROGRAM_ID = "B53vYkHSs1vMQzofYfKjz6Unzv8P4TwCcvvTbMWVnctv"

# SPL token program and associated token account program
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

# Seed prefix shared by the pool record and the pool authority
POOL_SEED = b"pool"

# Amounts and reserves are u64 on the ledger; pricing runs in u128
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1

# Basis point denominator for slippage and price impact
BPS_DENOMINATOR = 10_000

# Default slippage tolerance for quotes (0.5%)
DEFAULT_SLIPPAGE_BPS = 50

# Recent events kept in memory by a program; older ones are only in the logs
EVENT_HISTORY_SIZE = 1_000

# Pool record layout:
# discriminator (8) + 4 keys (32 each) + 4 bumps (1 each) + reserved slack
DISCRIMINATOR_SIZE = 8
PUBKEY_SIZE = 32
POOL_RESERVED_SIZE = 64
POOL_STATE_SPACE = DISCRIMINATOR_SIZE + 4 * PUBKEY_SIZE + 4 + POOL_RESERVED_SIZE

# First 8 bytes of sha256("account:<Name>"), as emitted by the program framework
POOL_DISCRIMINATOR = hashlib.sha256(b"account:LiquidityPool").digest()[:DISCRIMINATOR_SIZE]
