"""Ledger configuration."""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from pool_ledger.constants import BPS_DENOMINATOR, DEFAULT_FEE_BPS, MAX_AMOUNT, PRICE_SCALE

_TRUTHY = ("true", "1", "yes")


@dataclass(frozen=True)
class LedgerConfig:
    """Centralized configuration for the pool ledger.

    Holds the curve parameters and behavior flags so tests can build a ledger
    with a different fee, a narrower amount bound or a fake clock.

    Attributes:
        fee_bps: Swap fee in basis points (default: 30 = 0.3%)
        price_scale: Fixed-point scale for get_price (default: 1e18)
        max_amount: Upper bound for any reserve or share total (default: 2^256-1)
        allow_credit: If True, the HTTP API exposes the balance credit endpoint
            of the in-memory custody ledger. Never enable in production.
        clock: Returns the current unix time in seconds; checked against
            operation deadlines.
    """

    fee_bps: int = DEFAULT_FEE_BPS
    price_scale: int = PRICE_SCALE
    max_amount: int = MAX_AMOUNT
    allow_credit: bool = False
    clock: Callable[[], float] = field(default=time.time, compare=False)

    def __post_init__(self) -> None:
        if not (0 <= self.fee_bps < BPS_DENOMINATOR):
            raise ValueError(f"fee_bps must be in [0, {BPS_DENOMINATOR}): {self.fee_bps}")
        if self.price_scale <= 0:
            raise ValueError(f"price_scale must be positive: {self.price_scale}")
        if not (0 < self.max_amount <= MAX_AMOUNT):
            raise ValueError(f"max_amount must be in (0, 2^256-1]: {self.max_amount}")

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps).

        For 30 bps (0.3%), this returns 9970.
        """
        return BPS_DENOMINATOR - self.fee_bps

    @classmethod
    def from_env(cls) -> LedgerConfig:
        """Build a config from environment variables.

        - POOL_LEDGER_FEE_BPS: Swap fee in basis points (default: 30)
        - POOL_LEDGER_MAX_AMOUNT: Amount bound as a decimal integer (default: 2^256-1)
        - POOL_LEDGER_ALLOW_CREDIT: Enable the credit endpoint (default: false)
        """
        return cls(
            fee_bps=int(os.environ.get("POOL_LEDGER_FEE_BPS", str(DEFAULT_FEE_BPS))),
            max_amount=int(os.environ.get("POOL_LEDGER_MAX_AMOUNT", str(MAX_AMOUNT))),
            allow_credit=os.environ.get("POOL_LEDGER_ALLOW_CREDIT", "false").lower() in _TRUTHY,
        )


# Default configuration instance
DEFAULT_LEDGER_CONFIG = LedgerConfig()
