"""Shared asset constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import TOKEN_A, TOKEN_B
    # or
    from tests.helpers.constants import WETH, USDC
"""

# =============================================================================
# Synthetic assets (TOKEN_A < TOKEN_B in canonical order)
# =============================================================================

TOKEN_A = "0x1111111111111111111111111111111111111111"
TOKEN_B = "0x2222222222222222222222222222222222222222"
TOKEN_C = "0x3333333333333333333333333333333333333333"

# =============================================================================
# Mainnet tokens (USDC < WETH in canonical order)
# =============================================================================

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"  # Wrapped Ether (18 decimals)
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"  # USD Coin (6 decimals)

# =============================================================================
# Time
# =============================================================================

# Fixed clock value used by test ledgers
NOW = 1_700_000_000
DEADLINE = NOW + 600

# Default starting balance for funded identities
FUNDING = 10**30


__all__ = [
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "WETH",
    "USDC",
    "NOW",
    "DEADLINE",
    "FUNDING",
]
