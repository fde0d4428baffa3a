"""Test helpers module for shared test utilities.

- constants: Asset addresses, clock values and funding amounts
- factories: Ledger and pool factory functions
- mocks: Transfer collaborators with injected failures
"""

from tests.helpers.constants import (
    DEADLINE,
    FUNDING,
    NOW,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    USDC,
    WETH,
)
from tests.helpers.factories import fund, make_ledger, seed_pool
from tests.helpers.mocks import FailingTransfer

__all__ = [
    # Constants
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "WETH",
    "USDC",
    "NOW",
    "DEADLINE",
    "FUNDING",
    # Factories
    "make_ledger",
    "fund",
    "seed_pool",
    # Mocks
    "FailingTransfer",
]
