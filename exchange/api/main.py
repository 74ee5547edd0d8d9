"""FastAPI application for the exchange.

Note: Authentication and rate limiting are intentionally not implemented at
the application level. They belong to the infrastructure layer in front of
this service.
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from exchange import __version__
from exchange.api.endpoints import router
from exchange.errors import ExchangeError, PoolAlreadyExists, PoolNotFound
from exchange.safe_int import SafeIntError

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("EXCHANGE_HOST", "0.0.0.0")
PORT = int(os.environ.get("EXCHANGE_PORT", "8000"))
DEBUG = os.environ.get("EXCHANGE_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("EXCHANGE_LOG_LEVEL", "INFO").upper()

# Maximum request body size (64 KB); every request body is a handful of fields
MAX_REQUEST_SIZE = 64 * 1024

logger = structlog.get_logger()

app = FastAPI(
    title="Constant-product exchange",
    description="Pooled-liquidity exchange of paired assets against a shared base asset",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(ExchangeError)
async def exchange_error_handler(request: Request, exc: ExchangeError) -> JSONResponse:
    """Map engine errors to 4xx responses; the operation was already rolled back."""
    if isinstance(exc, PoolNotFound):
        status_code = 404
    elif isinstance(exc, PoolAlreadyExists):
        status_code = 409
    else:
        status_code = 400
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=exc.code,
        detail=str(exc),
    )
    return JSONResponse(status_code=status_code, content={"error": exc.code, "detail": str(exc)})


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, exc: SafeIntError) -> JSONResponse:
    logger.warning("arithmetic_error", path=request.url.path, detail=str(exc))
    return JSONResponse(status_code=400, content={"error": "arithmetic_error", "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging(level: str = LOG_LEVEL) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(level, logging.INFO)
        ),
    )


def run() -> None:
    """Run the exchange API server.

    Configuration via environment variables:
    - EXCHANGE_HOST: Host to bind to (default: 0.0.0.0)
    - EXCHANGE_PORT: Port to bind to (default: 8000)
    - EXCHANGE_DEBUG: Enable debug/reload mode (default: false)
    - EXCHANGE_LOG_LEVEL: Log level (default: INFO)
    - EXCHANGE_ENABLE_FAUCET: Expose POST /faucet (default: true)
    - EXCHANGE_FEE_MULTIPLIER / EXCHANGE_FEE_DENOMINATOR: Fee policy
    """
    configure_logging()
    uvicorn.run(
        "exchange.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
