"""Pair registry for the pool ledger.

Derives the canonical, order-independent key for an asset pair and owns the
store of pools keyed by it. Each pool gets its own exclusive lock; the ledger
holds that lock for the full duration of every operation on the pair.
"""

from __future__ import annotations

import hashlib
import threading
from collections.abc import Iterator
from dataclasses import dataclass

import structlog

from pool_ledger.errors import InvalidPair
from pool_ledger.models.types import is_valid_address, normalize_address
from pool_ledger.reserves import Pool

logger = structlog.get_logger()


@dataclass(frozen=True)
class PairKey:
    """Canonical identifier for an unordered asset pair.

    Attributes:
        id: 0x-prefixed SHA-256 digest of the two sorted 20-byte addresses
        token0: Lower address of the pair (lowercase)
        token1: Higher address of the pair (lowercase)
    """

    id: str
    token0: str
    token1: str

    def is_token0(self, token: str) -> bool:
        """Return True if token is the pair's token0, False if token1.

        Raises:
            InvalidPair: If token is not part of this pair
        """
        token_norm = normalize_address(token)
        if token_norm == self.token0:
            return True
        if token_norm == self.token1:
            return False
        raise InvalidPair(f"Token {token} not in pair {self.token0}/{self.token1}")


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Normalize two asset addresses and return them in canonical order.

    Addresses are compared by their byte value, which for lowercase hex
    strings of equal length is the same as string order.

    Raises:
        InvalidPair: If an address is malformed or both are the same asset
    """
    token_a_norm = normalize_address(token_a)
    token_b_norm = normalize_address(token_b)
    for raw, norm in ((token_a, token_a_norm), (token_b, token_b_norm)):
        if not is_valid_address(norm):
            raise InvalidPair(f"Invalid asset address: {raw}")
    if token_a_norm == token_b_norm:
        raise InvalidPair(f"Identical assets: {token_a_norm}")
    if token_a_norm > token_b_norm:
        return token_b_norm, token_a_norm
    return token_a_norm, token_b_norm


def pair_key(token_a: str, token_b: str) -> PairKey:
    """Compute the canonical key for a pair (order independent).

    Args:
        token_a: First asset address (any case)
        token_b: Second asset address (any case)

    Returns:
        PairKey with pair_key(a, b) == pair_key(b, a)

    Raises:
        InvalidPair: If the addresses are equal or malformed
    """
    token0, token1 = sort_tokens(token_a, token_b)
    digest = hashlib.sha256(bytes.fromhex(token0[2:]) + bytes.fromhex(token1[2:])).hexdigest()
    return PairKey(id="0x" + digest, token0=token0, token1=token1)


class PairRegistry:
    """Store of pools keyed by canonical pair key.

    Pools are registered on their first successful deposit and never removed.
    Registration is serialized by a registry-wide lock; operations on a pool
    are serialized by that pair's own lock (see ``lock``).
    """

    def __init__(self, max_amount: int) -> None:
        """Initialize an empty registry.

        Args:
            max_amount: Bound applied to reserves and share totals of new pools
        """
        self._max_amount = max_amount
        self._pools: dict[str, Pool] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def get(self, key: PairKey) -> Pool | None:
        """Get the pool for a pair, or None if no deposit has created it."""
        return self._pools.get(key.id)

    def create(self, key: PairKey) -> Pool:
        """Build an empty, unregistered pool for a pair.

        The ledger seeds it inside an operation and registers it with
        ``add`` only once the operation succeeds, so a failed first deposit
        leaves no pool behind.
        """
        return Pool(token0=key.token0, token1=key.token1, max_amount=self._max_amount)

    def add(self, key: PairKey, pool: Pool) -> None:
        """Register a pool for a pair.

        Raises:
            ValueError: If the pair already has a pool or the pool's tokens differ
        """
        if (pool.token0, pool.token1) != (key.token0, key.token1):
            raise ValueError(f"Pool tokens do not match pair {key.id}")
        with self._registry_lock:
            if key.id in self._pools:
                raise ValueError(f"Pair {key.id} already has a pool")
            self._pools[key.id] = pool
        logger.debug(
            "pool_created",
            pair=key.id[:18],
            token0=key.token0[-8:],
            token1=key.token1[-8:],
        )

    def lock(self, key: PairKey) -> threading.RLock:
        """Get the exclusive lock for a pair, creating it if needed."""
        lock = self._locks.get(key.id)
        if lock is not None:
            return lock
        with self._registry_lock:
            return self._locks.setdefault(key.id, threading.RLock())

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[Pool]:
        return iter(list(self._pools.values()))

    def __contains__(self, key: object) -> bool:
        if isinstance(key, PairKey):
            return key.id in self._pools
        return False


__all__ = ["PairKey", "PairRegistry", "pair_key", "sort_tokens"]
