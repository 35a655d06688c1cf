"""Pool creation and lookup."""

from cpdex.pools.registry import PoolRegistry

__all__ = ["PoolRegistry"]
