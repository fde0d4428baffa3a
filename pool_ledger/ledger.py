"""Pool ledger: the public entry point for liquidity and swap operations.

Each mutating operation:
1. checks its deadline,
2. resolves the canonical pair and takes that pair's lock,
3. computes amounts from the current reserves (checks),
4. pulls inbound assets, updates reserves and shares (effects),
5. pushes outbound assets last (interactions).

Steps 4-5 run inside an operation journal. If anything raises, the pool is
restored from its checkpoint and completed transfers are reversed, so every
operation is all-or-nothing.
"""

from __future__ import annotations

import contextlib
import functools
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import ParamSpec, TypeVar

import structlog

from pool_ledger.config import DEFAULT_LEDGER_CONFIG, LedgerConfig
from pool_ledger.errors import (
    Expired,
    InsufficientReserves,
    InvalidAmount,
    LedgerError,
    NoLiquidity,
    NoReserves,
    SlippageExceeded,
)
from pool_ledger.liquidity import optimal_deposit, redemption_amounts, shares_for_deposit
from pool_ledger.pricing import get_amount_in, get_amount_out, get_price
from pool_ledger.registry import PairKey, PairRegistry, pair_key
from pool_ledger.reserves import Pool, PoolSnapshot
from pool_ledger.transfer import AssetTransfer

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


def _logged_operation(name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log ledger errors raised by an operation, then re-raise them."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except LedgerError as err:
                logger.warning(
                    "operation_rejected", operation=name, error=err.code, detail=str(err)
                )
                raise

        return wrapper

    return decorator


@dataclass
class _Journal:
    """Transfers completed so far by one operation, in order."""

    transfer: AssetTransfer
    completed: list[tuple[str, str, str, int]] = field(default_factory=list)

    def pull(self, asset: str, holder: str, amount: int) -> None:
        self.transfer.pull(asset, holder, amount)
        self.completed.append(("pull", asset, holder, amount))

    def push(self, asset: str, holder: str, amount: int) -> None:
        self.transfer.push(asset, holder, amount)
        self.completed.append(("push", asset, holder, amount))

    def reverse(self) -> None:
        """Undo completed transfers, most recent first."""
        for kind, asset, holder, amount in reversed(self.completed):
            try:
                if kind == "pull":
                    self.transfer.push(asset, holder, amount)
                else:
                    self.transfer.pull(asset, holder, amount)
            except LedgerError:
                logger.exception(
                    "transfer_reversal_failed",
                    kind=kind,
                    asset=asset[-8:],
                    holder=holder,
                    amount=amount,
                )
        self.completed.clear()


class PoolLedger:
    """Two-asset constant-product pool ledger.

    Owns every pool's reserves and share balances. Asset movement is
    delegated to an AssetTransfer collaborator.

    Amounts passed in and returned are in the caller's argument order
    (token_a, token_b), regardless of the pair's canonical order.
    """

    def __init__(
        self,
        transfer: AssetTransfer,
        config: LedgerConfig = DEFAULT_LEDGER_CONFIG,
    ) -> None:
        self._transfer = transfer
        self._config = config
        self._registry = PairRegistry(max_amount=config.max_amount)

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def registry(self) -> PairRegistry:
        return self._registry

    # --- Internals ---

    def _check_deadline(self, deadline: float) -> None:
        now = self._config.clock()
        if now > deadline:
            raise Expired(f"Deadline {deadline} passed (now {now})")

    @contextlib.contextmanager
    def _journaled(self, key: PairKey, pool: Pool) -> Iterator[_Journal]:
        checkpoint = pool.checkpoint()
        journal = _Journal(self._transfer)
        try:
            yield journal
        except Exception as err:
            pool.restore(checkpoint)
            journal.reverse()
            logger.warning(
                "operation_rolled_back",
                pair=key.id[:18],
                error=type(err).__name__,
            )
            raise

    # --- Liquidity ---

    @_logged_operation("add_liquidity")
    def add_liquidity(
        self,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        sender: str,
        recipient: str,
        deadline: float,
    ) -> tuple[int, int, int]:
        """Deposit a matched pair of assets and mint shares to recipient.

        Args:
            token_a: First asset address
            token_b: Second asset address
            amount_a_desired: Most of token_a to deposit
            amount_b_desired: Most of token_b to deposit
            amount_a_min: Least of token_a the caller accepts depositing
            amount_b_min: Least of token_b the caller accepts depositing
            sender: Identity the assets are pulled from
            recipient: Identity credited with the new shares
            deadline: Unix time after which the operation is rejected

        Returns:
            (amount_a, amount_b, shares_issued)

        Raises:
            Expired, InvalidPair, InvalidAmount, SlippageExceeded, Overflow, TransferFailed
        """
        self._check_deadline(deadline)
        key = pair_key(token_a, token_b)
        a_is_token0 = key.is_token0(token_a)
        asset_a, asset_b = (key.token0, key.token1) if a_is_token0 else (key.token1, key.token0)

        with self._registry.lock(key):
            pool = self._registry.get(key)
            created = pool is None
            if pool is None:
                pool = self._registry.create(key)

            reserve_a, reserve_b = pool.reserves_for(asset_a)
            amounts = optimal_deposit(
                amount_a_desired,
                amount_b_desired,
                amount_a_min,
                amount_b_min,
                reserve_a,
                reserve_b,
                pool.total_shares,
            )
            amount_a, amount_b = amounts.amount_a, amounts.amount_b
            shares = shares_for_deposit(amount_a, amount_b)

            with self._journaled(key, pool) as journal:
                journal.pull(asset_a, sender, amount_a)
                journal.pull(asset_b, sender, amount_b)
                pool.mint_shares(recipient, shares)
                if a_is_token0:
                    pool.apply_deposit(amount_a, amount_b)
                else:
                    pool.apply_deposit(amount_b, amount_a)

            if created:
                self._registry.add(key, pool)

            logger.info(
                "liquidity_added",
                pair=key.id[:18],
                amount_a=amount_a,
                amount_b=amount_b,
                shares=shares,
                recipient=recipient,
                reserve0=pool.reserve0,
                reserve1=pool.reserve1,
            )
        return amount_a, amount_b, shares

    @_logged_operation("remove_liquidity")
    def remove_liquidity(
        self,
        token_a: str,
        token_b: str,
        shares: int,
        amount_a_min: int,
        amount_b_min: int,
        sender: str,
        recipient: str,
        deadline: float,
    ) -> tuple[int, int]:
        """Burn sender's shares and pay the proportional reserves to recipient.

        Returns:
            (amount_a, amount_b)

        Raises:
            Expired, InvalidPair, InvalidAmount, NoLiquidity, SlippageExceeded,
            InsufficientShares, TransferFailed
        """
        self._check_deadline(deadline)
        key = pair_key(token_a, token_b)
        a_is_token0 = key.is_token0(token_a)
        asset_a, asset_b = (key.token0, key.token1) if a_is_token0 else (key.token1, key.token0)
        if shares <= 0:
            raise InvalidAmount(f"shares must be positive: {shares}")

        with self._registry.lock(key):
            pool = self._registry.get(key)
            if pool is None or pool.is_empty:
                raise NoLiquidity(f"Pair {key.id} has no liquidity")

            amount0, amount1 = redemption_amounts(
                shares, pool.reserve0, pool.reserve1, pool.total_shares
            )
            amount_a, amount_b = (amount0, amount1) if a_is_token0 else (amount1, amount0)
            if amount_a < amount_a_min:
                raise SlippageExceeded(f"amount_a {amount_a} below minimum {amount_a_min}")
            if amount_b < amount_b_min:
                raise SlippageExceeded(f"amount_b {amount_b} below minimum {amount_b_min}")

            with self._journaled(key, pool) as journal:
                pool.burn_shares(sender, shares)
                pool.apply_withdrawal(amount0, amount1)
                journal.push(asset_a, recipient, amount_a)
                journal.push(asset_b, recipient, amount_b)

            logger.info(
                "liquidity_removed",
                pair=key.id[:18],
                shares=shares,
                amount_a=amount_a,
                amount_b=amount_b,
                recipient=recipient,
                reserve0=pool.reserve0,
                reserve1=pool.reserve1,
            )
        return amount_a, amount_b

    # --- Swaps ---

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Output for amount_in at the given reserves, using this ledger's fee."""
        return get_amount_out(amount_in, reserve_in, reserve_out, self._config.fee_multiplier)

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Smallest input that yields at least amount_out, using this ledger's fee."""
        return get_amount_in(amount_out, reserve_in, reserve_out, self._config.fee_multiplier)

    @_logged_operation("swap_exact_in")
    def swap_exact_in(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        amount_out_min: int,
        sender: str,
        recipient: str,
        deadline: float,
    ) -> int:
        """Swap exactly amount_in of token_in for as much token_out as the curve gives.

        Returns:
            amount_out paid to recipient

        Raises:
            Expired, InvalidPair, InvalidAmount, SlippageExceeded, Overflow, TransferFailed
        """
        self._check_deadline(deadline)
        key = pair_key(token_in, token_out)
        input_is_token0 = key.is_token0(token_in)
        if input_is_token0:
            asset_in, asset_out = key.token0, key.token1
        else:
            asset_in, asset_out = key.token1, key.token0

        with self._registry.lock(key):
            pool = self._registry.get(key)
            if pool is None:
                raise InvalidAmount(f"No reserves to swap against for pair {key.id[:18]}")
            reserve_in, reserve_out = pool.reserves_for(asset_in)
            amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out)
            if amount_out < amount_out_min:
                raise SlippageExceeded(f"amount_out {amount_out} below minimum {amount_out_min}")

            k_before = pool.constant_product
            with self._journaled(key, pool) as journal:
                journal.pull(asset_in, sender, amount_in)
                pool.apply_swap_delta(amount_in, amount_out, input_is_token0)
                if pool.constant_product < k_before:
                    raise InsufficientReserves(
                        f"Swap would shrink k: {pool.constant_product} < {k_before}"
                    )
                journal.push(asset_out, recipient, amount_out)

            logger.info(
                "swap_executed",
                pair=key.id[:18],
                token_in=asset_in[-8:],
                amount_in=amount_in,
                amount_out=amount_out,
                recipient=recipient,
                reserve0=pool.reserve0,
                reserve1=pool.reserve1,
            )
        return amount_out

    # --- Views ---

    def get_price(self, token_a: str, token_b: str) -> int:
        """Price of the pair's token0 in token1, scaled by config.price_scale.

        Raises:
            InvalidPair: If the addresses are equal or malformed
            NoReserves: If the pool does not exist or has a zero reserve
        """
        key = pair_key(token_a, token_b)
        with self._registry.lock(key):
            pool = self._registry.get(key)
            if pool is None:
                raise NoReserves(f"Pair {key.id} has no pool")
            return get_price(pool.reserve0, pool.reserve1, self._config.price_scale)

    def get_pool(self, token_a: str, token_b: str) -> PoolSnapshot | None:
        """Read-only snapshot of a pair's pool, or None if it was never seeded."""
        key = pair_key(token_a, token_b)
        with self._registry.lock(key):
            pool = self._registry.get(key)
            return None if pool is None else pool.snapshot(key.id)

    def get_reserves(self, token_a: str, token_b: str) -> tuple[int, int]:
        """Reserves ordered as (reserve of token_a, reserve of token_b); zeros if no pool."""
        key = pair_key(token_a, token_b)
        a_is_token0 = key.is_token0(token_a)
        with self._registry.lock(key):
            pool = self._registry.get(key)
            if pool is None:
                return 0, 0
            if a_is_token0:
                return pool.reserve0, pool.reserve1
            return pool.reserve1, pool.reserve0

    def share_balance(self, token_a: str, token_b: str, holder: str) -> int:
        """Shares holder owns in the pair's pool."""
        key = pair_key(token_a, token_b)
        with self._registry.lock(key):
            pool = self._registry.get(key)
            return 0 if pool is None else pool.share_balance(holder)


__all__ = ["PoolLedger"]
