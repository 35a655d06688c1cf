"""Engine configuration."""

import os
from dataclasses import dataclass

from cpdex.constants import BPS_DENOMINATOR, DEFAULT_PROGRAM_ID, DEFAULT_SLIPPAGE_BPS


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for a DexProgram instance.

    Attributes:
        program_id: Base58 id of the program that owns pools and signs for
            their vaults. Every derived address depends on it.
        default_slippage_bps: Slippage tolerance used by quotes when the caller
            gives none (default: 50, i.e. 0.5%)
    """

    program_id: str = DEFAULT_PROGRAM_ID
    default_slippage_bps: int = DEFAULT_SLIPPAGE_BPS

    def __post_init__(self) -> None:
        if not 0 <= self.default_slippage_bps <= BPS_DENOMINATOR:
            raise ValueError(
                f"default_slippage_bps must be in [0, {BPS_DENOMINATOR}], "
                f"got {self.default_slippage_bps}"
            )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()


def load_engine_config() -> EngineConfig:
    """Build an EngineConfig from environment variables.

    - CPDEX_PROGRAM_ID: Program id (default: DEFAULT_PROGRAM_ID)
    - CPDEX_SLIPPAGE_BPS: Default quote slippage (default: 50)
    """
    return EngineConfig(
        program_id=os.environ.get("CPDEX_PROGRAM_ID", DEFAULT_PROGRAM_ID),
        default_slippage_bps=int(os.environ.get("CPDEX_SLIPPAGE_BPS", str(DEFAULT_SLIPPAGE_BPS))),
    )
