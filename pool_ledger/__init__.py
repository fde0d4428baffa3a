"""Pool Ledger - two-asset constant-product AMM accounting."""

from pool_ledger.config import DEFAULT_LEDGER_CONFIG, LedgerConfig
from pool_ledger.ledger import PoolLedger
from pool_ledger.transfer import AssetTransfer, InMemoryAssetLedger

__version__ = "0.1.0"
__all__ = [
    "PoolLedger",
    "LedgerConfig",
    "DEFAULT_LEDGER_CONFIG",
    "AssetTransfer",
    "InMemoryAssetLedger",
    "__version__",
]
