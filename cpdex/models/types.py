"""Shared type definitions for ledger models.

These types are used by the account models, events and the API schemas.
"""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field
from solders.pubkey import Pubkey

from cpdex.constants import U64_MAX

_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_valid_address(address: Any) -> bool:
    """Check if a value is a base58-encoded 32-byte address.

    Args:
        address: Value to validate

    Returns:
        True if the value decodes to a 32-byte public key
    """
    if not isinstance(address, str) or not _BASE58_RE.match(address):
        return False
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True


def to_pubkey(value: Any) -> Pubkey:
    """Coerce a Pubkey, base58 string or 32 raw bytes into a Pubkey.

    Raises:
        ValueError: If the value is not a valid address
    """
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) != Pubkey.LENGTH:
            raise ValueError(f"Address must be {Pubkey.LENGTH} bytes, got {len(value)}")
        return Pubkey.from_bytes(bytes(value))
    if is_valid_address(value):
        return Pubkey.from_string(value)
    raise ValueError(f"Invalid address: {value!r}")


def validate_address(value: Any) -> str:
    """Validate an address and return its base58 form."""
    return str(to_pubkey(value))


def validate_u64(value: Any) -> int:
    """Validate that a value is an unsigned 64-bit integer.

    Accepts ints and decimal strings (large amounts are often sent as strings).

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    if isinstance(value, bool):
        raise ValueError("U64 must be an integer, got bool")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"U64 must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"U64 must be string or int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"U64 cannot be negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"U64 overflow: {value} > 2^64-1")
    return value


# Base58 address, normalized to its string form
Address = Annotated[
    str,
    BeforeValidator(validate_address),
    Field(description="Base58-encoded 32-byte address"),
]

# 64-bit unsigned amount in base units
U64 = Annotated[
    int,
    BeforeValidator(validate_u64),
    Field(description="64-bit unsigned integer"),
]
