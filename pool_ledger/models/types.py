"""Field types shared by the ledger's request and response models.

Amounts cross the wire as decimal strings so that values above 2**53 survive
JSON clients that parse numbers as doubles.
"""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from pool_ledger.safe_int import UINT256_MAX

ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"
_ADDRESS_RE = re.compile(ADDRESS_PATTERN)


def parse_uint256(value: Any) -> str:
    """Coerce an int or decimal string to a canonical uint256 decimal string.

    Raises:
        ValueError: On bools, non-decimal strings, negatives and values above 2^256-1
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if isinstance(value, str):
        digits = value[1:] if value.startswith("-") else value
        # str.isdigit() also accepts non-ASCII digits
        if not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'")
        value = int(value)

    if value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(value)


# Asset address: 0x followed by 40 hex characters, any case
Address = Annotated[str, Field(pattern=ADDRESS_PATTERN)]

# Non-negative amount up to 2^256-1, as a canonical decimal string
Uint256 = Annotated[
    str,
    BeforeValidator(parse_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Opaque caller identity supplied by the host
Identity = Annotated[str, Field(min_length=1, max_length=128)]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Lowercase an asset address and make sure it carries the 0x prefix.

    Raises:
        ValueError: If validate is set and the result is not a valid address
    """
    normalized = address.lower()
    if not normalized.startswith("0x"):
        normalized = f"0x{normalized}"
    if validate and not is_valid_address(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def is_valid_address(address: str) -> bool:
    """True for 0x followed by exactly 40 hex characters."""
    return isinstance(address, str) and _ADDRESS_RE.fullmatch(address) is not None
