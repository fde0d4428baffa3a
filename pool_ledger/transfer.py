"""Asset transfer collaborator.

The ledger never moves balances itself. It asks an AssetTransfer to pull
assets from a holder into pool custody and to push assets out of custody.
Both calls either complete or raise TransferFailed.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Protocol, runtime_checkable

import structlog

from pool_ledger.errors import TransferFailed
from pool_ledger.models.types import normalize_address

logger = structlog.get_logger()


@runtime_checkable
class AssetTransfer(Protocol):
    """Protocol for moving assets between holders and pool custody."""

    def pull(self, asset: str, holder: str, amount: int) -> None:
        """Move amount of asset from holder into pool custody.

        Raises:
            TransferFailed: On insufficient balance or allowance
        """
        ...

    def push(self, asset: str, holder: str, amount: int) -> None:
        """Move amount of asset from pool custody to holder.

        Raises:
            TransferFailed: On a custody shortfall
        """
        ...


class InMemoryAssetLedger:
    """Dict-backed AssetTransfer for tests, simulations and the demo API.

    Keeps one balance per (asset, holder) plus one custody balance per
    asset. Asset addresses are keyed lowercased, so checksummed and
    lowercase spellings share a balance. Transfers are atomic under an
    internal lock.

    Usage:
        assets = InMemoryAssetLedger()
        assets.credit(WETH, "alice", 10**18)
        ledger = PoolLedger(assets)
    """

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._custody: dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    def credit(self, asset: str, holder: str, amount: int) -> None:
        """Mint amount of asset to holder out of thin air."""
        if amount < 0:
            raise ValueError(f"Credit amount must be non-negative: {amount}")
        asset = normalize_address(asset)
        with self._lock:
            self._balances[(asset, holder)] += amount

    def balance_of(self, asset: str, holder: str) -> int:
        return self._balances.get((normalize_address(asset), holder), 0)

    def custody_balance(self, asset: str) -> int:
        return self._custody.get(normalize_address(asset), 0)

    def pull(self, asset: str, holder: str, amount: int) -> None:
        asset = normalize_address(asset)
        with self._lock:
            balance = self._balances.get((asset, holder), 0)
            if amount < 0 or balance < amount:
                logger.warning(
                    "pull_rejected",
                    asset=asset[-8:],
                    holder=holder,
                    amount=amount,
                    balance=balance,
                )
                raise TransferFailed(
                    f"Pull of {amount} {asset} from {holder} failed: balance {balance}"
                )
            self._balances[(asset, holder)] = balance - amount
            self._custody[asset] += amount

    def push(self, asset: str, holder: str, amount: int) -> None:
        asset = normalize_address(asset)
        with self._lock:
            custody = self._custody.get(asset, 0)
            if amount < 0 or custody < amount:
                logger.warning(
                    "push_rejected",
                    asset=asset[-8:],
                    holder=holder,
                    amount=amount,
                    custody=custody,
                )
                raise TransferFailed(
                    f"Push of {amount} {asset} to {holder} failed: custody {custody}"
                )
            self._custody[asset] = custody - amount
            self._balances[(asset, holder)] += amount


__all__ = ["AssetTransfer", "InMemoryAssetLedger"]
