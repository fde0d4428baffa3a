"""Tests for liquidity issuance and redemption math."""

import pytest

from pool_ledger.errors import InvalidAmount, NoLiquidity, Overflow, SlippageExceeded
from pool_ledger.liquidity import (
    DepositAmounts,
    optimal_deposit,
    redemption_amounts,
    shares_for_deposit,
)
from pool_ledger.safe_int import UINT256_MAX


class TestOptimalDeposit:
    """Tests for optimal_deposit."""

    def test_empty_pool_takes_desired(self):
        """The first deposit sets the price, so nothing is trimmed."""
        assert optimal_deposit(2000, 1000, 0, 0, 0, 0, 0) == DepositAmounts(2000, 1000)

    def test_empty_pool_ignores_minimums(self):
        assert optimal_deposit(5, 7, 5, 7, 0, 0, 0) == DepositAmounts(5, 7)

    def test_matches_b_to_all_of_a(self):
        """Pool 2000:1000, desired (200, 200): B trimmed to 100."""
        assert optimal_deposit(200, 200, 0, 0, 2000, 1000, 3000) == DepositAmounts(200, 100)

    def test_matches_a_to_all_of_b(self):
        """Pool 2000:1000, desired (200, 50): A trimmed to 100."""
        assert optimal_deposit(200, 50, 0, 0, 2000, 1000, 3000) == DepositAmounts(100, 50)

    def test_exact_ratio(self):
        assert optimal_deposit(400, 200, 400, 200, 2000, 1000, 3000) == DepositAmounts(400, 200)

    def test_b_minimum_enforced(self):
        with pytest.raises(SlippageExceeded):
            optimal_deposit(200, 200, 0, 101, 2000, 1000, 3000)

    def test_a_minimum_enforced(self):
        with pytest.raises(SlippageExceeded):
            optimal_deposit(200, 50, 101, 0, 2000, 1000, 3000)

    def test_minimums_met_exactly(self):
        assert optimal_deposit(200, 200, 200, 100, 2000, 1000, 3000) == DepositAmounts(200, 100)

    def test_never_exceeds_desired(self):
        for a_desired, b_desired in [(1, 1), (3, 1000), (1000, 3), (12_345, 6_789)]:
            amounts = optimal_deposit(a_desired, b_desired, 0, 0, 7_777, 3_333, 11_110)
            assert amounts.amount_a <= a_desired
            assert amounts.amount_b <= b_desired

    def test_zero_desired_rejected(self):
        with pytest.raises(InvalidAmount):
            optimal_deposit(0, 100, 0, 0, 0, 0, 0)
        with pytest.raises(InvalidAmount):
            optimal_deposit(100, 0, 0, 0, 2000, 1000, 3000)


class TestSharesForDeposit:
    """Tests for shares_for_deposit."""

    def test_additive(self):
        assert shares_for_deposit(2000, 1000) == 3000
        assert shares_for_deposit(100, 50) == 150

    def test_not_geometric_mean(self):
        """Shares are the plain sum, not sqrt(a * b)."""
        assert shares_for_deposit(100, 10_000) == 10_100

    def test_overflow(self):
        with pytest.raises(Overflow):
            shares_for_deposit(UINT256_MAX, 1)


class TestRedemptionAmounts:
    """Tests for redemption_amounts."""

    def test_proportional(self):
        assert redemption_amounts(300, 2200, 1100, 3300) == (200, 100)

    def test_full_redemption_returns_everything(self):
        assert redemption_amounts(3000, 2000, 1000, 3000) == (2000, 1000)

    def test_truncates(self):
        # 1000 * 1 // 3 and 2000 * 1 // 3
        assert redemption_amounts(1, 1000, 2000, 3) == (333, 666)

    def test_no_shares(self):
        with pytest.raises(NoLiquidity):
            redemption_amounts(1, 0, 0, 0)

    def test_overflow(self):
        with pytest.raises(Overflow):
            redemption_amounts(2**200, 2**100, 1, 2**200)
