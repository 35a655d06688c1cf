"""Constant product AMM pricing.

Uses the formula reserve_in * reserve_out = k with no fee:

    k               = reserve_in * reserve_out
    new_reserve_in  = reserve_in + amount_in
    new_reserve_out = k // new_reserve_in
    amount_out      = reserve_out - new_reserve_out

new_reserve_out is floored, so new_reserve_in * new_reserve_out never exceeds k
and equals it only when the division is exact.
A trade that would leave the output reserve at zero is rejected, so no single
trade drains a pool.
"""

from __future__ import annotations

import structlog

from cpdex.amm.base import SwapResult
from cpdex.constants import BPS_DENOMINATOR
from cpdex.errors import CalculationOverflow, PoolIsEmpty, ZeroAmount
from cpdex.safe_int import S, SafeIntError

logger = structlog.get_logger()


class ConstantProduct:
    """Constant product math in checked u128 arithmetic."""

    def swap_exact_in(self, amount_in: int, reserve_in: int, reserve_out: int) -> SwapResult:
        """Price an exact-input trade.

        Args:
            amount_in: Input token amount (u64)
            reserve_in: Live reserve of the input token
            reserve_out: Live reserve of the output token

        Returns:
            SwapResult with the output amount and post-trade reserves

        Raises:
            PoolIsEmpty: If either reserve is zero, or the trade would empty
                the output reserve
            ZeroAmount: If amount_in is zero
            CalculationOverflow: If any step leaves u128 or the output leaves u64
        """
        if reserve_in == 0 or reserve_out == 0:
            raise PoolIsEmpty(f"Reserves ({reserve_in}, {reserve_out}) include zero")
        if amount_in == 0:
            raise ZeroAmount("amount_in must be positive")

        try:
            k = S(reserve_in) * S(reserve_out)
            new_reserve_in = S(reserve_in) + S(amount_in)
            new_reserve_out = k // new_reserve_in
            if not new_reserve_out:
                raise PoolIsEmpty(
                    f"Input {amount_in} would drain the output reserve {reserve_out}"
                )
            amount_out = S(reserve_out) - new_reserve_out
            result = SwapResult(
                amount_in=amount_in,
                amount_out=amount_out.to_u64(),
                reserve_in=reserve_in,
                reserve_out=reserve_out,
                new_reserve_in=new_reserve_in.value,
                new_reserve_out=new_reserve_out.value,
            )
        except SafeIntError as err:
            logger.info(
                "calculation_overflow",
                amount_in=amount_in,
                reserve_in=reserve_in,
                reserve_out=reserve_out,
                error=str(err),
            )
            raise CalculationOverflow(str(err)) from err

        return result

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate output amount for an exact input (see swap_exact_in)."""
        return self.swap_exact_in(amount_in, reserve_in, reserve_out).amount_out

    def price_impact_bps(self, amount_out: int, reserve_out: int) -> int:
        """Share of the output reserve a trade removes, in basis points."""
        if reserve_out == 0:
            raise PoolIsEmpty("reserve_out is zero")
        return (S(amount_out) * S(BPS_DENOMINATOR) // S(reserve_out)).value

    def min_amount_out(self, amount_out: int, slippage_bps: int) -> int:
        """Floor on the output after allowing `slippage_bps` of slippage.

        Raises:
            ValueError: If slippage_bps is outside [0, 10000]
        """
        if not 0 <= slippage_bps <= BPS_DENOMINATOR:
            raise ValueError(f"slippage_bps must be in [0, {BPS_DENOMINATOR}]: {slippage_bps}")
        return (S(amount_out) * S(BPS_DENOMINATOR - slippage_bps) // S(BPS_DENOMINATOR)).value


# Module-level singleton
constant_product = ConstantProduct()
