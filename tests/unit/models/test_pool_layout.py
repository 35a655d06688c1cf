"""Tests for the PoolState record and its binary layout."""

import hashlib
import struct

import pytest
from solders.pubkey import Pubkey

from cpdex.constants import POOL_DISCRIMINATOR, POOL_RESERVED_SIZE, POOL_STATE_SPACE
from cpdex.errors import InvalidAccountData
from cpdex.models.pool import PoolState
from tests.helpers import HIGH_MINT, LOW_MINT


def make_state(**overrides) -> PoolState:
    fields = {
        "mint_a": LOW_MINT,
        "mint_b": HIGH_MINT,
        "vault_a": Pubkey.from_bytes(bytes([3] * 32)),
        "vault_b": Pubkey.from_bytes(bytes([4] * 32)),
        "pool_bump": 255,
        "authority_bump": 254,
        "vault_a_bump": 253,
        "vault_b_bump": 252,
    }
    fields.update(overrides)
    return PoolState(**fields)


class TestPoolState:
    """Tests for PoolState construction."""

    def test_requires_canonical_order(self) -> None:
        with pytest.raises(ValueError, match="canonical"):
            make_state(mint_a=HIGH_MINT, mint_b=LOW_MINT)

    def test_rejects_equal_mints(self) -> None:
        with pytest.raises(ValueError):
            make_state(mint_b=LOW_MINT)

    def test_rejects_bump_outside_byte(self) -> None:
        with pytest.raises(ValueError, match="pool_bump"):
            make_state(pool_bump=256)

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            make_state().pool_bump = 1  # type: ignore[misc]


class TestLayout:
    """Tests for pack/unpack of the pool record."""

    def test_space(self) -> None:
        """Discriminator, four keys, four bumps and reserved slack."""
        assert POOL_STATE_SPACE == 8 + 4 * 32 + 4 + 64
        assert len(make_state().pack()) == POOL_STATE_SPACE
        assert struct.calcsize("<8s32s32s32s32sBBBB") + POOL_RESERVED_SIZE == POOL_STATE_SPACE

    def test_discriminator_prefix(self) -> None:
        data = make_state().pack()
        assert data[:8] == hashlib.sha256(b"account:LiquidityPool").digest()[:8]
        assert data[:8] == POOL_DISCRIMINATOR

    def test_field_offsets(self) -> None:
        data = make_state().pack()
        assert data[8:40] == bytes(LOW_MINT)
        assert data[40:72] == bytes(HIGH_MINT)
        assert data[136:140] == bytes([255, 254, 253, 252])
        assert data[140:] == bytes(64)

    def test_unpack_restores_state(self) -> None:
        state = make_state()
        assert PoolState.unpack(state.pack()) == state

    def test_unpack_wrong_size(self) -> None:
        with pytest.raises(InvalidAccountData):
            PoolState.unpack(make_state().pack()[:-1])

    def test_unpack_wrong_discriminator(self) -> None:
        data = bytearray(make_state().pack())
        data[0] ^= 0xFF
        with pytest.raises(InvalidAccountData, match="discriminator"):
            PoolState.unpack(bytes(data))
