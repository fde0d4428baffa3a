"""Protocol constants for the pool ledger.

Centralizes the fee and fixed-point parameters of the constant-product curve.
"""

from pool_ledger.safe_int import UINT256_MAX

# Fee in basis points (30 = 0.3%), retained by the pool on every swap
DEFAULT_FEE_BPS = 30

# Basis-point denominator for fee math
# amount_in_with_fee = amount_in * (BPS_DENOMINATOR - fee_bps)
BPS_DENOMINATOR = 10_000

# Fixed-point scale for prices returned by get_price (1e18)
PRICE_SCALE = 10**18

# Upper bound for reserves and share totals
MAX_AMOUNT = UINT256_MAX
