"""Tests for concurrent ledger operations on shared pools."""

import threading

from pool_ledger.errors import LedgerError
from tests.helpers import DEADLINE, TOKEN_A, TOKEN_B, TOKEN_C, fund, make_ledger, seed_pool

THREADS = 8
ROUNDS = 50


def run_threads(target, count: int = THREADS) -> list[BaseException]:
    """Run target(index) on count threads started together; return uncaught errors."""
    barrier = threading.Barrier(count)
    errors: list[BaseException] = []

    def worker(index: int) -> None:
        barrier.wait()
        try:
            target(index)
        except BaseException as err:  # noqa: BLE001
            errors.append(err)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return errors


class TestConcurrentOperations:
    """Operations on one pair are serialized; custody always matches reserves."""

    def test_concurrent_swaps(self):
        ledger, assets = make_ledger()
        seed_pool(ledger, assets, TOKEN_A, TOKEN_B, 10**12, 10**12)
        k_initial = 10**24
        for i in range(THREADS):
            fund(assets, f"trader{i}", TOKEN_A, TOKEN_B)

        def trade(index: int) -> None:
            holder = f"trader{index}"
            for round_ in range(ROUNDS):
                token_in, token_out = (TOKEN_A, TOKEN_B) if round_ % 2 else (TOKEN_B, TOKEN_A)
                ledger.swap_exact_in(
                    token_in, token_out, 10**6 + index, 0, holder, holder, DEADLINE
                )

        assert run_threads(trade) == []

        reserve_a, reserve_b = ledger.get_reserves(TOKEN_A, TOKEN_B)
        assert assets.custody_balance(TOKEN_A) == reserve_a
        assert assets.custody_balance(TOKEN_B) == reserve_b
        assert reserve_a * reserve_b >= k_initial

    def test_concurrent_deposits_and_withdrawals(self):
        ledger, assets = make_ledger()
        seed_pool(ledger, assets, TOKEN_A, TOKEN_B, 2 * 10**9, 10**9)
        holders = [f"provider{i}" for i in range(THREADS)]
        for holder in holders:
            fund(assets, holder, TOKEN_A, TOKEN_B)

        def provide(index: int) -> None:
            holder = holders[index]
            for _ in range(ROUNDS):
                _, _, shares = ledger.add_liquidity(
                    TOKEN_A, TOKEN_B, 2000, 1000, 0, 0, holder, holder, DEADLINE
                )
                ledger.remove_liquidity(TOKEN_A, TOKEN_B, shares, 0, 0, holder, holder, DEADLINE)

        assert run_threads(provide) == []

        snapshot = ledger.get_pool(TOKEN_A, TOKEN_B)
        share_sum = sum(ledger.share_balance(TOKEN_A, TOKEN_B, h) for h in holders + ["seeder"])
        assert share_sum == snapshot.total_shares
        assert assets.custody_balance(TOKEN_A) == snapshot.reserve0
        assert assets.custody_balance(TOKEN_B) == snapshot.reserve1

    def test_first_deposits_race_to_one_pool(self):
        ledger, assets = make_ledger()
        holders = [f"seeder{i}" for i in range(THREADS)]
        for holder in holders:
            fund(assets, holder, TOKEN_A, TOKEN_C)

        def seed(index: int) -> None:
            ledger.add_liquidity(
                TOKEN_A, TOKEN_C, 1000, 1000, 0, 0, holders[index], holders[index], DEADLINE
            )

        assert run_threads(seed) == []

        assert len(ledger.registry) == 1
        assert ledger.get_reserves(TOKEN_A, TOKEN_C) == (8000, 8000)
        assert ledger.get_pool(TOKEN_A, TOKEN_C).total_shares == 16_000

    def test_rejections_under_contention_leave_no_trace(self):
        ledger, assets = make_ledger()
        seed_pool(ledger, assets, TOKEN_A, TOKEN_B, 10**6, 10**6)
        rejected = []

        def overdraw(index: int) -> None:
            # unfunded traders: every pull fails and must be rolled back
            for _ in range(ROUNDS):
                try:
                    ledger.swap_exact_in(
                        TOKEN_A, TOKEN_B, 1000, 0, f"broke{index}", "x", DEADLINE
                    )
                except LedgerError as err:
                    rejected.append(err.code)

        assert run_threads(overdraw) == []
        assert set(rejected) == {"TransferFailed"}
        assert len(rejected) == THREADS * ROUNDS
        assert ledger.get_reserves(TOKEN_A, TOKEN_B) == (10**6, 10**6)
        assert assets.custody_balance(TOKEN_B) == 10**6
