"""Result types shared by pricing code."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SwapResult:
    """Result of pricing an exact-input trade against two reserves."""

    amount_in: int
    amount_out: int
    reserve_in: int
    reserve_out: int
    new_reserve_in: int
    new_reserve_out: int

    @property
    def k_before(self) -> int:
        """Constant product before the trade."""
        return self.reserve_in * self.reserve_out

    @property
    def k_after(self) -> int:
        """Constant product after the trade (at most k_before, equal without truncation)."""
        return self.new_reserve_in * self.new_reserve_out
