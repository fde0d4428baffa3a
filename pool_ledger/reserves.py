"""Reserve accounting for a single pool.

A Pool holds the two reserves, the share total and per-holder share balances
for one asset pair. Every apply-* method validates all bounds before it
assigns anything, so a call that raises leaves the pool untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pool_ledger.constants import MAX_AMOUNT
from pool_ledger.errors import InsufficientReserves, InsufficientShares, Overflow
from pool_ledger.safe_int import S, Uint256Overflow


@dataclass(frozen=True)
class PoolCheckpoint:
    """Copy of a pool's mutable fields, used to roll back a failed operation."""

    reserve0: int
    reserve1: int
    total_shares: int
    shares: tuple[tuple[str, int], ...]


@dataclass(frozen=True)
class PoolSnapshot:
    """Read-only view of a pool handed out to callers."""

    pair: str
    token0: str
    token1: str
    reserve0: int
    reserve1: int
    total_shares: int


@dataclass
class Pool:
    """Reserve and share state of one asset pair.

    Attributes:
        token0: Lower asset address of the pair
        token1: Higher asset address of the pair
        reserve0: Pool custody balance of token0
        reserve1: Pool custody balance of token1
        total_shares: Outstanding claim units
        shares: Claim units per holder; sums to total_shares
        max_amount: Bound for reserves and total_shares
    """

    token0: str
    token1: str
    reserve0: int = 0
    reserve1: int = 0
    total_shares: int = 0
    shares: dict[str, int] = field(default_factory=dict)
    max_amount: int = MAX_AMOUNT

    def __post_init__(self) -> None:
        if self.reserve0 < 0 or self.reserve1 < 0:
            raise ValueError(f"Reserves must be non-negative: ({self.reserve0}, {self.reserve1})")
        if self.total_shares < 0:
            raise ValueError(f"Share total must be non-negative: {self.total_shares}")

    @property
    def is_empty(self) -> bool:
        """True when no shares are outstanding."""
        return self.total_shares == 0

    @property
    def constant_product(self) -> int:
        """k = reserve0 * reserve1."""
        return self.reserve0 * self.reserve1

    def reserves_for(self, token_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if token_in == self.token0:
            return self.reserve0, self.reserve1
        elif token_in == self.token1:
            return self.reserve1, self.reserve0
        else:
            raise ValueError(f"Token {token_in} not in pool")

    def share_balance(self, holder: str) -> int:
        return self.shares.get(holder, 0)

    # --- Apply-delta operations ---

    def _bounded(self, value: int, what: str) -> int:
        try:
            return S(value).bounded(self.max_amount)
        except Uint256Overflow as err:
            raise Overflow(f"{what} would exceed {self.max_amount}: {value}") from err

    def apply_deposit(self, delta0: int, delta1: int) -> None:
        """Increase both reserves.

        Raises:
            Overflow: If either resulting reserve exceeds max_amount
        """
        new0 = self._bounded(self.reserve0 + delta0, "reserve0")
        new1 = self._bounded(self.reserve1 + delta1, "reserve1")
        self.reserve0, self.reserve1 = new0, new1

    def apply_withdrawal(self, delta0: int, delta1: int) -> None:
        """Decrease both reserves.

        Raises:
            InsufficientReserves: If either delta exceeds its reserve
        """
        if delta0 > self.reserve0 or delta1 > self.reserve1:
            raise InsufficientReserves(
                f"Withdrawal ({delta0}, {delta1}) exceeds reserves "
                f"({self.reserve0}, {self.reserve1})"
            )
        self.reserve0 -= delta0
        self.reserve1 -= delta1

    def apply_swap_delta(self, amount_in: int, amount_out: int, input_is_token0: bool) -> None:
        """Move amount_in into the input reserve and amount_out out of the other.

        Raises:
            InsufficientReserves: If amount_out exceeds the output reserve
            Overflow: If the input reserve would exceed max_amount
        """
        reserve_in, reserve_out = (
            (self.reserve0, self.reserve1) if input_is_token0 else (self.reserve1, self.reserve0)
        )
        if amount_out > reserve_out:
            raise InsufficientReserves(
                f"Swap output {amount_out} exceeds output reserve {reserve_out}"
            )
        new_in = self._bounded(reserve_in + amount_in, "input reserve")
        new_out = reserve_out - amount_out
        if input_is_token0:
            self.reserve0, self.reserve1 = new_in, new_out
        else:
            self.reserve0, self.reserve1 = new_out, new_in

    def mint_shares(self, holder: str, amount: int) -> None:
        """Credit new shares to holder and grow the share total.

        Raises:
            Overflow: If total_shares would exceed max_amount
        """
        new_total = self._bounded(self.total_shares + amount, "total_shares")
        self.total_shares = new_total
        self.shares[holder] = self.shares.get(holder, 0) + amount

    def burn_shares(self, holder: str, amount: int) -> None:
        """Debit shares from holder and shrink the share total.

        Raises:
            InsufficientShares: If holder owns fewer than amount shares
        """
        balance = self.shares.get(holder, 0)
        if balance < amount:
            raise InsufficientShares(f"Holder {holder} has {balance} shares, needs {amount}")
        remaining = balance - amount
        if remaining:
            self.shares[holder] = remaining
        else:
            self.shares.pop(holder, None)
        self.total_shares -= amount

    # --- Rollback ---

    def checkpoint(self) -> PoolCheckpoint:
        return PoolCheckpoint(
            reserve0=self.reserve0,
            reserve1=self.reserve1,
            total_shares=self.total_shares,
            shares=tuple(self.shares.items()),
        )

    def restore(self, checkpoint: PoolCheckpoint) -> None:
        self.reserve0 = checkpoint.reserve0
        self.reserve1 = checkpoint.reserve1
        self.total_shares = checkpoint.total_shares
        self.shares = dict(checkpoint.shares)

    def snapshot(self, pair: str) -> PoolSnapshot:
        return PoolSnapshot(
            pair=pair,
            token0=self.token0,
            token1=self.token1,
            reserve0=self.reserve0,
            reserve1=self.reserve1,
            total_shares=self.total_shares,
        )
