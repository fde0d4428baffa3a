"""Tests for single-pool reserve accounting."""

import pytest

from pool_ledger.errors import InsufficientReserves, InsufficientShares, Overflow
from pool_ledger.reserves import Pool, PoolSnapshot
from tests.helpers import TOKEN_A, TOKEN_B, TOKEN_C


def make_pool(reserve0: int = 0, reserve1: int = 0, max_amount: int = 2**256 - 1) -> Pool:
    return Pool(
        token0=TOKEN_A,
        token1=TOKEN_B,
        reserve0=reserve0,
        reserve1=reserve1,
        max_amount=max_amount,
    )


class TestPool:
    """Tests for Pool construction and views."""

    def test_negative_reserves_rejected(self):
        with pytest.raises(ValueError):
            make_pool(reserve0=-1)

    def test_is_empty(self):
        pool = make_pool()
        assert pool.is_empty
        pool.mint_shares("alice", 10)
        assert not pool.is_empty

    def test_constant_product(self):
        assert make_pool(1000, 2000).constant_product == 2_000_000

    def test_reserves_for(self):
        pool = make_pool(1000, 2000)
        assert pool.reserves_for(TOKEN_A) == (1000, 2000)
        assert pool.reserves_for(TOKEN_B) == (2000, 1000)

    def test_reserves_for_unknown_token(self):
        with pytest.raises(ValueError):
            make_pool(1000, 2000).reserves_for(TOKEN_C)


class TestApplyDeltas:
    """Tests for deposit, withdrawal and swap deltas."""

    def test_deposit(self):
        pool = make_pool(1000, 2000)
        pool.apply_deposit(100, 200)
        assert (pool.reserve0, pool.reserve1) == (1100, 2200)

    def test_deposit_overflow_leaves_pool_untouched(self):
        pool = make_pool(900, 50, max_amount=1000)
        with pytest.raises(Overflow):
            pool.apply_deposit(50, 951)
        assert (pool.reserve0, pool.reserve1) == (900, 50)

    def test_deposit_at_bound(self):
        pool = make_pool(900, 50, max_amount=1000)
        pool.apply_deposit(100, 950)
        assert (pool.reserve0, pool.reserve1) == (1000, 1000)

    def test_withdrawal(self):
        pool = make_pool(1000, 2000)
        pool.apply_withdrawal(1000, 1)
        assert (pool.reserve0, pool.reserve1) == (0, 1999)

    def test_withdrawal_exceeding_reserve(self):
        pool = make_pool(1000, 2000)
        with pytest.raises(InsufficientReserves):
            pool.apply_withdrawal(1, 2001)
        assert (pool.reserve0, pool.reserve1) == (1000, 2000)

    def test_swap_token0_in(self):
        pool = make_pool(1000, 1000)
        pool.apply_swap_delta(100, 90, input_is_token0=True)
        assert (pool.reserve0, pool.reserve1) == (1100, 910)

    def test_swap_token1_in(self):
        pool = make_pool(1000, 1000)
        pool.apply_swap_delta(100, 90, input_is_token0=False)
        assert (pool.reserve0, pool.reserve1) == (910, 1100)

    def test_swap_output_exceeding_reserve(self):
        pool = make_pool(1000, 1000)
        with pytest.raises(InsufficientReserves):
            pool.apply_swap_delta(10, 1001, input_is_token0=True)

    def test_swap_input_overflow(self):
        pool = make_pool(900, 50, max_amount=1000)
        with pytest.raises(Overflow):
            pool.apply_swap_delta(200, 9, input_is_token0=True)
        assert (pool.reserve0, pool.reserve1) == (900, 50)


class TestShares:
    """Tests for share minting and burning."""

    def test_mint_and_burn(self):
        pool = make_pool()
        pool.mint_shares("alice", 300)
        pool.mint_shares("bob", 200)
        pool.burn_shares("alice", 100)
        assert pool.share_balance("alice") == 200
        assert pool.share_balance("bob") == 200
        assert pool.total_shares == 400

    def test_burn_everything_drops_holder(self):
        pool = make_pool()
        pool.mint_shares("alice", 300)
        pool.burn_shares("alice", 300)
        assert "alice" not in pool.shares
        assert pool.total_shares == 0

    def test_burn_more_than_held(self):
        pool = make_pool()
        pool.mint_shares("alice", 300)
        with pytest.raises(InsufficientShares):
            pool.burn_shares("alice", 301)
        with pytest.raises(InsufficientShares):
            pool.burn_shares("mallory", 1)
        assert pool.total_shares == 300

    def test_mint_overflow(self):
        pool = make_pool(max_amount=1000)
        pool.mint_shares("alice", 900)
        with pytest.raises(Overflow):
            pool.mint_shares("bob", 101)
        assert pool.total_shares == 900
        assert pool.share_balance("bob") == 0


class TestCheckpoint:
    """Tests for checkpoint, restore and snapshot."""

    def test_restore_undoes_changes(self):
        pool = make_pool(1000, 2000)
        pool.mint_shares("alice", 3000)
        checkpoint = pool.checkpoint()

        pool.apply_deposit(10, 20)
        pool.mint_shares("bob", 30)
        pool.burn_shares("alice", 3000)
        pool.restore(checkpoint)

        assert (pool.reserve0, pool.reserve1, pool.total_shares) == (1000, 2000, 3000)
        assert pool.shares == {"alice": 3000}

    def test_checkpoint_is_a_copy(self):
        pool = make_pool()
        pool.mint_shares("alice", 10)
        checkpoint = pool.checkpoint()
        pool.mint_shares("alice", 5)
        assert dict(checkpoint.shares) == {"alice": 10}

    def test_snapshot(self):
        pool = make_pool(1000, 2000)
        pool.mint_shares("alice", 3000)
        assert pool.snapshot("0xabc") == PoolSnapshot(
            pair="0xabc",
            token0=TOKEN_A,
            token1=TOKEN_B,
            reserve0=1000,
            reserve1=2000,
            total_shares=3000,
        )
