"""Constant-product swap pricing.

The pool keeps reserve_in * reserve_out constant across a swap, net of a fee
taken from the input side:

    amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)

The fee is configured in basis points (fee_multiplier = 10000 - fee_bps, 9970
for 0.3%). Before multiplying, the fraction fee_multiplier / 10000 is reduced
to lowest terms, so 0.3% runs as exactly 997/1000 and overflows at the same
inputs as the formula above.
All arithmetic goes through SafeInt; an intermediate product wider than
uint256 is rejected as Overflow.
"""

from __future__ import annotations

import math

from pool_ledger.constants import BPS_DENOMINATOR, DEFAULT_FEE_BPS, PRICE_SCALE
from pool_ledger.errors import InsufficientReserves, InvalidAmount, NoReserves, Overflow
from pool_ledger.safe_int import S, Uint256Overflow

DEFAULT_FEE_MULTIPLIER = BPS_DENOMINATOR - DEFAULT_FEE_BPS


def _fee_fraction(fee_multiplier: int) -> tuple[int, int]:
    """Reduce fee_multiplier / BPS_DENOMINATOR to lowest terms (9970 -> 997/1000)."""
    divisor = math.gcd(fee_multiplier, BPS_DENOMINATOR)
    return fee_multiplier // divisor, BPS_DENOMINATOR // divisor


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> int:
    """Calculate output amount using constant product formula.

    Formula: amount_out = (in * fee * res_out) / (res_in * 10000 + in * fee),
    with fee / 10000 reduced to lowest terms.

    Args:
        amount_in: Input asset amount
        reserve_in: Reserve of input asset in pool
        reserve_out: Reserve of output asset in pool
        fee_multiplier: Fee multiplier (default 9970 for 0.3% fee)

    Returns:
        Output asset amount, always strictly below reserve_out

    Raises:
        InvalidAmount: If amount_in or either reserve is zero
        Overflow: If an intermediate product exceeds uint256
    """
    if amount_in <= 0:
        raise InvalidAmount(f"amount_in must be positive: {amount_in}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InvalidAmount(f"Reserves must be positive: ({reserve_in}, {reserve_out})")

    fee_num, fee_den = _fee_fraction(fee_multiplier)
    try:
        amount_in_with_fee = S(amount_in) * S(fee_num)
        numerator = amount_in_with_fee * S(reserve_out)
        denominator = S(reserve_in) * S(fee_den) + amount_in_with_fee
    except Uint256Overflow as err:
        raise Overflow(f"get_amount_out overflow: {err}") from err

    return (numerator // denominator).value


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> int:
    """Calculate required input for desired output.

    Formula: amount_in = (res_in * out * 10000) / ((res_out - out) * fee) + 1

    Rounds up, so get_amount_out(get_amount_in(x)) >= x.

    Raises:
        InvalidAmount: If amount_out or either reserve is zero
        InsufficientReserves: If amount_out would drain the output reserve
        Overflow: If an intermediate product exceeds uint256
    """
    if amount_out <= 0:
        raise InvalidAmount(f"amount_out must be positive: {amount_out}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InvalidAmount(f"Reserves must be positive: ({reserve_in}, {reserve_out})")
    if amount_out >= reserve_out:
        raise InsufficientReserves(
            f"Cannot drain full reserve: amount_out ({amount_out}) >= reserve_out ({reserve_out})"
        )

    fee_num, fee_den = _fee_fraction(fee_multiplier)
    try:
        numerator = S(reserve_in) * S(amount_out) * S(fee_den)
        denominator = (S(reserve_out) - S(amount_out)) * S(fee_num)
        return ((numerator // denominator) + S(1)).value
    except Uint256Overflow as err:
        raise Overflow(f"get_amount_in overflow: {err}") from err


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B worth amount_a of A at the current reserve ratio (truncating).

    Raises:
        NoReserves: If either reserve is zero
        Overflow: If amount_a * reserve_b exceeds uint256
    """
    if reserve_a <= 0 or reserve_b <= 0:
        raise NoReserves(f"Reserves must be positive: ({reserve_a}, {reserve_b})")
    try:
        return (S(amount_a) * S(reserve_b) // S(reserve_a)).value
    except Uint256Overflow as err:
        raise Overflow(f"quote overflow: {err}") from err


def get_price(reserve0: int, reserve1: int, scale: int = PRICE_SCALE) -> int:
    """Price of token0 in units of token1, as a fixed-point integer.

    Returns reserve1 * scale / reserve0; reserves (1000, 2000) give 2 * 10**18.

    Raises:
        NoReserves: If either reserve is zero
        Overflow: If reserve1 * scale exceeds uint256
    """
    if reserve0 <= 0 or reserve1 <= 0:
        raise NoReserves(f"Pool has no reserves: ({reserve0}, {reserve1})")
    try:
        return (S(reserve1) * S(scale) // S(reserve0)).value
    except Uint256Overflow as err:
        raise Overflow(f"get_price overflow: {err}") from err


__all__ = [
    "DEFAULT_FEE_MULTIPLIER",
    "get_amount_out",
    "get_amount_in",
    "quote",
    "get_price",
]
