"""API endpoints for the pool ledger."""

import asyncio
import functools
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from pool_ledger.config import LedgerConfig
from pool_ledger.ledger import PoolLedger
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
from pool_ledger.models.types import normalize_address
from pool_ledger.transfer import InMemoryAssetLedger

logger = structlog.get_logger()

router = APIRouter()

T = TypeVar("T")

# Documented error bodies; the LedgerError handler in main.py produces them
LEDGER_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Rejected by the ledger"},
}
MUTATION_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    **LEDGER_ERROR_RESPONSES,
    409: {"model": ErrorResponse, "description": "Slippage bound missed or deadline passed"},
}


def _create_default_ledger() -> tuple[PoolLedger, InMemoryAssetLedger]:
    """Create the process-wide ledger backed by in-memory custody.

    Configuration is read from POOL_LEDGER_* environment variables.
    """
    config = LedgerConfig.from_env()
    assets = InMemoryAssetLedger()
    logger.info(
        "ledger_created",
        fee_bps=config.fee_bps,
        allow_credit=config.allow_credit,
    )
    return PoolLedger(assets, config), assets


_default_ledger, _default_assets = _create_default_ledger()


def get_ledger() -> PoolLedger:
    """Dependency provider for the ledger instance.

    Override this in tests to inject a fresh ledger:
        app.dependency_overrides[get_ledger] = lambda: ledger
    """
    return _default_ledger


def get_assets() -> InMemoryAssetLedger:
    """Dependency provider for the custody ledger used by the credit endpoint."""
    return _default_assets


async def _run(func: Callable[..., T], *args: object) -> T:
    """Run a blocking ledger call in the default executor.

    Ledger operations take per-pair locks, so they stay off the event loop.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args))


@router.post(
    "/liquidity/add",
    response_model=AddLiquidityResponse,
    responses=MUTATION_ERROR_RESPONSES,
)
async def add_liquidity(
    request: AddLiquidityRequest,
    ledger: PoolLedger = Depends(get_ledger),
) -> AddLiquidityResponse:
    """Deposit into a pool and mint shares to the recipient."""
    amount_a, amount_b, shares = await _run(
        ledger.add_liquidity,
        request.token_a,
        request.token_b,
        int(request.amount_a_desired),
        int(request.amount_b_desired),
        int(request.amount_a_min),
        int(request.amount_b_min),
        request.sender,
        request.recipient,
        request.deadline,
    )
    return AddLiquidityResponse(amount_a=amount_a, amount_b=amount_b, shares_issued=shares)


@router.post(
    "/liquidity/remove",
    response_model=RemoveLiquidityResponse,
    responses=MUTATION_ERROR_RESPONSES,
)
async def remove_liquidity(
    request: RemoveLiquidityRequest,
    ledger: PoolLedger = Depends(get_ledger),
) -> RemoveLiquidityResponse:
    """Burn shares and pay out the proportional reserves."""
    amount_a, amount_b = await _run(
        ledger.remove_liquidity,
        request.token_a,
        request.token_b,
        int(request.shares),
        int(request.amount_a_min),
        int(request.amount_b_min),
        request.sender,
        request.recipient,
        request.deadline,
    )
    return RemoveLiquidityResponse(amount_a=amount_a, amount_b=amount_b)


@router.post("/swap", response_model=SwapResponse, responses=MUTATION_ERROR_RESPONSES)
async def swap(
    request: SwapRequest,
    ledger: PoolLedger = Depends(get_ledger),
) -> SwapResponse:
    """Swap an exact input amount against the pool."""
    amount_out = await _run(
        ledger.swap_exact_in,
        request.token_in,
        request.token_out,
        int(request.amount_in),
        int(request.amount_out_min),
        request.sender,
        request.recipient,
        request.deadline,
    )
    return SwapResponse(amount_out=amount_out)


@router.get(
    "/pools/{token_a}/{token_b}", response_model=PoolResponse, responses=LEDGER_ERROR_RESPONSES
)
async def get_pool(
    token_a: str,
    token_b: str,
    ledger: PoolLedger = Depends(get_ledger),
) -> PoolResponse:
    """Current reserves and share total of a pair's pool."""
    snapshot = await _run(ledger.get_pool, token_a, token_b)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Pool not found")
    return PoolResponse(
        pair=snapshot.pair,
        token0=snapshot.token0,
        token1=snapshot.token1,
        reserve0=snapshot.reserve0,
        reserve1=snapshot.reserve1,
        total_shares=snapshot.total_shares,
    )


@router.get(
    "/pools/{token_a}/{token_b}/price",
    response_model=PriceResponse,
    responses=LEDGER_ERROR_RESPONSES,
)
async def get_price(
    token_a: str,
    token_b: str,
    ledger: PoolLedger = Depends(get_ledger),
) -> PriceResponse:
    """Price of the pair's token0 in token1, scaled by the ledger's price scale."""
    price = await _run(ledger.get_price, token_a, token_b)
    token0, token1 = sorted((normalize_address(token_a), normalize_address(token_b)))
    return PriceResponse(
        token0=token0,
        token1=token1,
        price=price,
        scale=ledger.config.price_scale,
    )


@router.get(
    "/pools/{token_a}/{token_b}/shares/{holder}",
    response_model=ShareBalanceResponse,
    responses=LEDGER_ERROR_RESPONSES,
)
async def get_share_balance(
    token_a: str,
    token_b: str,
    holder: str,
    ledger: PoolLedger = Depends(get_ledger),
) -> ShareBalanceResponse:
    """Shares a holder owns in a pair's pool."""
    shares = await _run(ledger.share_balance, token_a, token_b, holder)
    return ShareBalanceResponse(holder=holder, shares=shares)


@router.get(
    "/quote/amount-out",
    response_model=AmountOutResponse,
    responses=LEDGER_ERROR_RESPONSES,
)
async def quote_amount_out(
    amount_in: int = Query(alias="amountIn", ge=0),
    reserve_in: int = Query(alias="reserveIn", ge=0),
    reserve_out: int = Query(alias="reserveOut", ge=0),
    ledger: PoolLedger = Depends(get_ledger),
) -> AmountOutResponse:
    """Constant-product output for an input at arbitrary reserves."""
    amount_out = ledger.get_amount_out(amount_in, reserve_in, reserve_out)
    return AmountOutResponse(amount_out=amount_out)


@router.get(
    "/quote/amount-in",
    response_model=AmountInResponse,
    responses=LEDGER_ERROR_RESPONSES,
)
async def quote_amount_in(
    amount_out: int = Query(alias="amountOut", ge=0),
    reserve_in: int = Query(alias="reserveIn", ge=0),
    reserve_out: int = Query(alias="reserveOut", ge=0),
    ledger: PoolLedger = Depends(get_ledger),
) -> AmountInResponse:
    """Smallest input that buys at least amountOut at arbitrary reserves."""
    amount_in = ledger.get_amount_in(amount_out, reserve_in, reserve_out)
    return AmountInResponse(amount_in=amount_in)


@router.post("/balances/credit", status_code=204)
async def credit_balance(
    request: CreditRequest,
    ledger: PoolLedger = Depends(get_ledger),
    assets: InMemoryAssetLedger = Depends(get_assets),
) -> None:
    """Seed a holder balance in the in-memory custody ledger.

    Only available when the ledger is configured with allow_credit.
    """
    if not ledger.config.allow_credit:
        raise HTTPException(status_code=403, detail="Credit endpoint disabled")
    assets.credit(normalize_address(request.asset), request.holder, int(request.amount))
    logger.info(
        "balance_credited",
        asset=request.asset[-8:],
        holder=request.holder,
        amount=request.amount,
    )
