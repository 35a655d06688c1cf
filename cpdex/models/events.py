"""Events emitted by successful instructions.

Events are records for observers; they carry no authority.
"""

from dataclasses import dataclass

from solders.pubkey import Pubkey


@dataclass(frozen=True)
class SwapEvent:
    """A completed swap against a pool."""

    pool: Pubkey
    user: Pubkey
    amount_in: int
    amount_out: int
    source_mint: Pubkey
    destination_mint: Pubkey


@dataclass(frozen=True)
class TransactionEvent:
    """A completed point-to-point transfer.

    The sender is the signing authority, not its token account.
    """

    sender: Pubkey
    receiver: Pubkey
    amount: int


DexEvent = SwapEvent | TransactionEvent
