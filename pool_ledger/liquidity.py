"""Liquidity issuance and redemption math.

Pure functions: the ledger reads reserves, calls these, and applies the
result. Shares are issued additively (shares = amount_a + amount_b), not by
the geometric mean used by Uniswap V2. Existing pools and their share
balances depend on this formula, so it must not change.
"""

from __future__ import annotations

from dataclasses import dataclass

from pool_ledger.errors import InvalidAmount, NoLiquidity, Overflow, SlippageExceeded
from pool_ledger.pricing import quote
from pool_ledger.safe_int import S, Uint256Overflow


@dataclass(frozen=True)
class DepositAmounts:
    """Amounts actually accepted for a deposit, in the caller's (A, B) order."""

    amount_a: int
    amount_b: int


def optimal_deposit(
    amount_a_desired: int,
    amount_b_desired: int,
    amount_a_min: int,
    amount_b_min: int,
    reserve_a: int,
    reserve_b: int,
    total_shares: int,
) -> DepositAmounts:
    """Compute how much of each asset to accept for a deposit.

    An empty pool takes the desired amounts as-is and so sets the price.
    Otherwise the deposit is trimmed to the current reserve ratio: B is
    matched to all of A if that fits in amount_b_desired, else A is matched
    to all of B.

    Args:
        amount_a_desired: Most of A the caller will deposit
        amount_b_desired: Most of B the caller will deposit
        amount_a_min: Least of A the caller accepts depositing
        amount_b_min: Least of B the caller accepts depositing
        reserve_a: Pool reserve of A
        reserve_b: Pool reserve of B
        total_shares: Outstanding shares of the pool

    Returns:
        DepositAmounts with amount_a <= amount_a_desired, amount_b <= amount_b_desired

    Raises:
        InvalidAmount: If either desired amount is zero
        SlippageExceeded: If the matched amount falls below its minimum
    """
    if amount_a_desired <= 0 or amount_b_desired <= 0:
        raise InvalidAmount(
            f"Desired amounts must be positive: ({amount_a_desired}, {amount_b_desired})"
        )

    if total_shares == 0:
        return DepositAmounts(amount_a_desired, amount_b_desired)

    b_optimal = quote(amount_a_desired, reserve_a, reserve_b)
    if b_optimal <= amount_b_desired:
        if b_optimal < amount_b_min:
            raise SlippageExceeded(f"amount_b {b_optimal} below minimum {amount_b_min}")
        return DepositAmounts(amount_a_desired, b_optimal)

    a_optimal = quote(amount_b_desired, reserve_b, reserve_a)
    # b_optimal > amount_b_desired implies a_optimal <= amount_a_desired
    if a_optimal < amount_a_min:
        raise SlippageExceeded(f"amount_a {a_optimal} below minimum {amount_a_min}")
    return DepositAmounts(a_optimal, amount_b_desired)


def shares_for_deposit(amount_a: int, amount_b: int) -> int:
    """Shares issued for a deposit: amount_a + amount_b.

    Raises:
        Overflow: If the sum exceeds uint256
    """
    try:
        return (S(amount_a) + S(amount_b)).value
    except Uint256Overflow as err:
        raise Overflow(f"Share issuance overflow: {err}") from err


def redemption_amounts(
    shares: int,
    reserve0: int,
    reserve1: int,
    total_shares: int,
) -> tuple[int, int]:
    """Amounts of each reserve owed for burning shares (truncating).

    Returns:
        (reserve0 * shares // total_shares, reserve1 * shares // total_shares)

    Raises:
        NoLiquidity: If total_shares is zero
        Overflow: If reserve * shares exceeds uint256
    """
    if total_shares == 0:
        raise NoLiquidity("Pool has no outstanding shares")
    try:
        amount0 = S(reserve0) * S(shares) // S(total_shares)
        amount1 = S(reserve1) * S(shares) // S(total_shares)
    except Uint256Overflow as err:
        raise Overflow(f"Redemption overflow: {err}") from err
    return amount0.value, amount1.value


__all__ = [
    "DepositAmounts",
    "optimal_deposit",
    "shares_for_deposit",
    "redemption_amounts",
]
