"""FastAPI application for the pool ledger.

Note: Rate limiting and caller authentication are intentionally not
implemented here. Both belong to the infrastructure layer in front of the
ledger; the sender identity in each request is trusted as given.
"""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pool_ledger.api.endpoints import router
from pool_ledger.errors import Expired, LedgerError, SlippageExceeded
from pool_ledger.models import ErrorResponse

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("POOL_LEDGER_HOST", "0.0.0.0")
PORT = int(os.environ.get("POOL_LEDGER_PORT", "8000"))
DEBUG = os.environ.get("POOL_LEDGER_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (64 KB); ledger requests are small
MAX_REQUEST_SIZE = 64 * 1024

# Errors the caller can fix by retrying with new parameters
CONFLICT_ERRORS = (SlippageExceeded, Expired)

app = FastAPI(
    title="Pool Ledger",
    description="Two-asset constant-product AMM pool ledger",
    version="0.1.0",
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(LedgerError)
async def ledger_error_handler(_request: Request, exc: LedgerError) -> JSONResponse:
    """Map ledger errors to 400 (409 for slippage and expiry)."""
    status_code = 409 if isinstance(exc, CONFLICT_ERRORS) else 400
    body = ErrorResponse(error=exc.code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the ledger API server.

    Configuration via environment variables:
    - POOL_LEDGER_HOST: Host to bind to (default: 0.0.0.0)
    - POOL_LEDGER_PORT: Port to bind to (default: 8000)
    - POOL_LEDGER_DEBUG: Enable debug/reload mode (default: false)
    - POOL_LEDGER_FEE_BPS, POOL_LEDGER_MAX_AMOUNT, POOL_LEDGER_ALLOW_CREDIT:
      see LedgerConfig.from_env
    """
    uvicorn.run(
        "pool_ledger.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
