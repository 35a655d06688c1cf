"""Pytest configuration and fixtures."""

import pytest

from cpdex.ledger.store import Ledger
from cpdex.program import DexProgram
from tests.helpers.factories import PoolSetup, make_pool


@pytest.fixture
def program() -> DexProgram:
    """A program over a fresh, empty ledger."""
    return DexProgram()


@pytest.fixture
def ledger(program: DexProgram) -> Ledger:
    """The ledger of the `program` fixture."""
    return program.ledger


@pytest.fixture
def pool_setup(program: DexProgram) -> PoolSetup:
    """A 1000/1000 pool with a trader holding 1000 of each mint."""
    return make_pool(program)


@pytest.fixture
def empty_pool(program: DexProgram) -> PoolSetup:
    """A freshly initialized pool whose vaults are empty."""
    return make_pool(program, reserve_a=0, reserve_b=0)
