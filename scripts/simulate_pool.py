#!/usr/bin/env python3
"""Run a seeded random sequence of ledger operations and check invariants.

Several traders and liquidity providers hammer one pool with deposits,
withdrawals and swaps, some of them deliberately bad (tight slippage,
oversized burns, expired deadlines). After every step the script checks:
- reserves equal the custody balances of the pool
- share balances sum to the share total
- reserves are both zero exactly when the share total is zero
- reserve0 * reserve1 never decreases across a deposit or swap

Usage:
    python scripts/simulate_pool.py --steps 2000 --seed 7
    python scripts/simulate_pool.py --steps 200 --verbose
"""

import argparse
import random
import sys
from dataclasses import dataclass, field
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pool_ledger import InMemoryAssetLedger, LedgerConfig, PoolLedger  # noqa: E402
from pool_ledger.errors import LedgerError  # noqa: E402

logger = structlog.get_logger()

TOKEN_A = "0x" + "aa" * 20
TOKEN_B = "0x" + "bb" * 20
ACTORS = ["alice", "bob", "carol", "dave"]
START_BALANCE = 10**24
NOW = 1_700_000_000


@dataclass
class SimulationSummary:
    """Outcome counts of a simulation run."""

    steps: int = 0
    succeeded: dict[str, int] = field(default_factory=dict)
    rejected: dict[str, int] = field(default_factory=dict)
    violations: list[str] = field(default_factory=list)

    def record(self, op: str, error: LedgerError | None) -> None:
        bucket = self.succeeded if error is None else self.rejected
        name = op if error is None else f"{op}:{error.code}"
        bucket[name] = bucket.get(name, 0) + 1


def check_invariants(
    ledger: PoolLedger,
    assets: InMemoryAssetLedger,
    k_floor: int,
) -> list[str]:
    """Return a description of every invariant the current state violates."""
    problems = []
    snapshot = ledger.get_pool(TOKEN_A, TOKEN_B)
    if snapshot is None:
        return problems

    if snapshot.reserve0 != assets.custody_balance(snapshot.token0):
        problems.append(f"reserve0 {snapshot.reserve0} != custody")
    if snapshot.reserve1 != assets.custody_balance(snapshot.token1):
        problems.append(f"reserve1 {snapshot.reserve1} != custody")

    share_sum = sum(ledger.share_balance(TOKEN_A, TOKEN_B, who) for who in ACTORS)
    if share_sum != snapshot.total_shares:
        problems.append(f"share sum {share_sum} != total {snapshot.total_shares}")

    empty_reserves = snapshot.reserve0 == 0 and snapshot.reserve1 == 0
    if empty_reserves != (snapshot.total_shares == 0):
        problems.append("reserves and share total disagree on emptiness")

    if snapshot.reserve0 * snapshot.reserve1 < k_floor:
        problems.append(f"k decreased below {k_floor}")
    return problems


def random_step(rng: random.Random, ledger: PoolLedger) -> tuple[str, bool]:
    """Perform one random operation.

    Returns:
        (operation name, True if k may legitimately shrink afterwards)
    """
    actor = rng.choice(ACTORS)
    deadline = NOW + 60 if rng.random() > 0.05 else NOW - 1
    roll = rng.random()

    if roll < 0.3:
        ledger.add_liquidity(
            TOKEN_A,
            TOKEN_B,
            rng.randint(1, 10**21),
            rng.randint(1, 10**21),
            0,
            0,
            actor,
            actor,
            deadline,
        )
        return "add_liquidity", False

    if roll < 0.5:
        held = ledger.share_balance(TOKEN_A, TOKEN_B, actor)
        shares = rng.randint(1, held * 2 + 1)
        ledger.remove_liquidity(TOKEN_A, TOKEN_B, shares, 0, 0, actor, actor, deadline)
        return "remove_liquidity", True

    token_in, token_out = (TOKEN_A, TOKEN_B) if rng.random() < 0.5 else (TOKEN_B, TOKEN_A)
    amount_in = rng.randint(1, 10**20)
    min_out = 0
    if rng.random() < 0.1:
        reserve_in, reserve_out = ledger.get_reserves(token_in, token_out)
        if reserve_in and reserve_out:
            min_out = ledger.get_amount_out(amount_in, reserve_in, reserve_out) + 1
    ledger.swap_exact_in(token_in, token_out, amount_in, min_out, actor, actor, deadline)
    return "swap_exact_in", False


def run_simulation(steps: int, seed: int) -> SimulationSummary:
    rng = random.Random(seed)
    assets = InMemoryAssetLedger()
    for actor in ACTORS:
        assets.credit(TOKEN_A, actor, START_BALANCE)
        assets.credit(TOKEN_B, actor, START_BALANCE)
    ledger = PoolLedger(assets, LedgerConfig(clock=lambda: NOW))

    summary = SimulationSummary()
    for _ in range(steps):
        before = ledger.get_pool(TOKEN_A, TOKEN_B)
        k_before = 0 if before is None else before.reserve0 * before.reserve1
        op = "unknown"
        try:
            op, shrinks = random_step(rng, ledger)
            summary.record(op, None)
            k_floor = 0 if shrinks else k_before
        except LedgerError as err:
            summary.record(op, err)
            k_floor = k_before
        summary.steps += 1

        problems = check_invariants(ledger, assets, k_floor)
        for problem in problems:
            logger.error("invariant_violated", step=summary.steps, problem=problem)
        summary.violations.extend(problems)

    return summary


def print_summary(summary: SimulationSummary) -> None:
    print(f"Steps: {summary.steps}")
    print("Succeeded:")
    for name, count in sorted(summary.succeeded.items()):
        print(f"  {name:<40} {count}")
    print("Rejected:")
    for name, count in sorted(summary.rejected.items()):
        print(f"  {name:<40} {count}")
    print(f"Invariant violations: {len(summary.violations)}")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Random-operation invariant check for the pool ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--steps", type=int, default=1000, help="Number of operations")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every ledger operation",
    )
    args = parser.parse_args()

    # Configure logging
    import logging

    log_level = logging.DEBUG if args.verbose else logging.ERROR
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    summary = run_simulation(args.steps, args.seed)
    print_summary(summary)
    return 0 if not summary.violations else 1


if __name__ == "__main__":
    sys.exit(main())
