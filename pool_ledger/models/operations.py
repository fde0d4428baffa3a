"""Pydantic models for ledger API requests and responses.

Amounts travel as uint256 decimal strings and addresses as 0x-prefixed hex,
both validated on the way in. Field names are camelCase on the wire.
"""

from pydantic import BaseModel, Field

from pool_ledger.models.types import Address, Identity, Uint256


class AddLiquidityRequest(BaseModel):
    """Deposit a matched pair of assets into a pool."""

    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")
    amount_a_desired: Uint256 = Field(alias="amountADesired")
    amount_b_desired: Uint256 = Field(alias="amountBDesired")
    amount_a_min: Uint256 = Field(default="0", alias="amountAMin")
    amount_b_min: Uint256 = Field(default="0", alias="amountBMin")
    sender: Identity = Field(description="Identity the assets are pulled from.")
    recipient: Identity = Field(description="Identity credited with the new shares.")
    deadline: int = Field(ge=0, description="Unix time after which the request is rejected.")

    model_config = {"populate_by_name": True}


class AddLiquidityResponse(BaseModel):
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")
    shares_issued: Uint256 = Field(alias="sharesIssued")

    model_config = {"populate_by_name": True}


class RemoveLiquidityRequest(BaseModel):
    """Burn shares and withdraw the proportional reserves."""

    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")
    shares: Uint256
    amount_a_min: Uint256 = Field(default="0", alias="amountAMin")
    amount_b_min: Uint256 = Field(default="0", alias="amountBMin")
    sender: Identity = Field(description="Identity whose shares are burned.")
    recipient: Identity = Field(description="Identity paid the withdrawn assets.")
    deadline: int = Field(ge=0)

    model_config = {"populate_by_name": True}


class RemoveLiquidityResponse(BaseModel):
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Swap an exact input amount for at least amountOutMin of the other asset."""

    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out_min: Uint256 = Field(default="0", alias="amountOutMin")
    sender: Identity
    recipient: Identity
    deadline: int = Field(ge=0)

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class PoolResponse(BaseModel):
    """Current state of a pair's pool."""

    pair: str
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    total_shares: Uint256 = Field(alias="totalShares")

    model_config = {"populate_by_name": True}


class PriceResponse(BaseModel):
    """Price of token0 in token1 as a fixed-point integer."""

    token0: Address
    token1: Address
    price: Uint256
    scale: Uint256


class ShareBalanceResponse(BaseModel):
    holder: str
    shares: Uint256


class AmountOutResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class AmountInResponse(BaseModel):
    amount_in: Uint256 = Field(alias="amountIn")

    model_config = {"populate_by_name": True}


class CreditRequest(BaseModel):
    """Seed a holder balance in the in-memory custody ledger (demo only)."""

    asset: Address
    holder: Identity
    amount: Uint256


class ErrorResponse(BaseModel):
    error: str = Field(description="Ledger error name, e.g. SlippageExceeded.")
    detail: str
