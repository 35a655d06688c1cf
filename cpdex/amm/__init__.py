"""AMM pricing."""

from cpdex.amm.base import SwapResult
from cpdex.amm.constant_product import ConstantProduct, constant_product

__all__ = ["ConstantProduct", "SwapResult", "constant_product"]
