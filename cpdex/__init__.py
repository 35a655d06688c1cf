"""Constant-product liquidity pool engine."""

from cpdex.program import DexProgram, get_default_program

__version__ = "0.1.0"
__all__ = ["DexProgram", "get_default_program", "__version__"]
