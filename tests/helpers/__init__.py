"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Worked-example amounts and fixed keys
- factories: Funded pool factory
"""

from tests.helpers.constants import (
    DECIMALS_A,
    DECIMALS_B,
    EXPECTED_OUT,
    HIGH_MINT,
    LOW_MINT,
    OTHER_PROGRAM_ID,
    RESERVE,
    SWAP_IN,
)
from tests.helpers.factories import PoolSetup, make_pool

__all__ = [
    # Constants
    "RESERVE",
    "SWAP_IN",
    "EXPECTED_OUT",
    "DECIMALS_A",
    "DECIMALS_B",
    "LOW_MINT",
    "HIGH_MINT",
    "OTHER_PROGRAM_ID",
    # Factories
    "PoolSetup",
    "make_pool",
]
