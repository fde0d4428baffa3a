"""Wire models for the ledger API."""

from pool_ledger.models.operations import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    AmountInResponse,
    AmountOutResponse,
    CreditRequest,
    ErrorResponse,
    PoolResponse,
    PriceResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    ShareBalanceResponse,
    SwapRequest,
    SwapResponse,
)
from pool_ledger.models.types import Address, Uint256, is_valid_address, normalize_address

__all__ = [
    "AddLiquidityRequest",
    "AddLiquidityResponse",
    "RemoveLiquidityRequest",
    "RemoveLiquidityResponse",
    "SwapRequest",
    "SwapResponse",
    "PoolResponse",
    "PriceResponse",
    "ShareBalanceResponse",
    "AmountInResponse",
    "AmountOutResponse",
    "CreditRequest",
    "ErrorResponse",
    "Address",
    "Uint256",
    "is_valid_address",
    "normalize_address",
]
