"""FastAPI application for the Aerodrome connector."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from aggregator.api.endpoints import router
from aggregator.errors import (
    AggregatorError,
    InvalidPoolAddressError,
    InvalidPositionError,
    InvalidTokenError,
    NoRouteFoundError,
    PoolNotFoundError,
    PositionApprovalError,
    PositionOwnershipError,
    UnsupportedNetworkError,
)
from aggregator.lifecycle import close_default_registry, get_default_registry
from aggregator.models.api import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AERODROME_HOST", "0.0.0.0")
PORT = int(os.environ.get("AERODROME_PORT", "8000"))
DEBUG = os.environ.get("AERODROME_DEBUG", "false").lower() in ("true", "1", "yes")

# HTTP status per error class; anything else is a 500
ERROR_STATUS: tuple[tuple[type[AggregatorError], int], ...] = (
    (InvalidTokenError, 400),
    (InvalidPoolAddressError, 400),
    (InvalidPositionError, 400),
    (UnsupportedNetworkError, 400),
    (PoolNotFoundError, 404),
    (NoRouteFoundError, 404),
    (PositionOwnershipError, 403),
    (PositionApprovalError, 403),
)


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog for console output."""
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def status_for(error: AggregatorError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    await close_default_registry()


app = FastAPI(
    title="Aerodrome Connector",
    description="Swap routing and quoting over Aerodrome AMM and concentrated-liquidity pools",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(AggregatorError)
async def aggregator_error_handler(request: Request, exc: AggregatorError) -> JSONResponse:
    """Map connector errors to HTTP statuses."""
    status = status_for(exc)
    if status == 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error=type(exc).__name__,
            message=exc.message,
        )
        body = ErrorResponse(error="InternalError", message="Internal server error")
    else:
        logger.info(
            "request_rejected",
            path=request.url.path,
            status=status,
            error=type(exc).__name__,
            message=exc.message,
        )
        body = ErrorResponse(error=type(exc).__name__, message=exc.message)
    return JSONResponse(status_code=status, content=body.model_dump())


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Invalid arguments that passed schema validation (amount too small, etc.)."""
    logger.info("request_rejected", path=request.url.path, status=400, message=str(exc))
    body = ErrorResponse(error="ValueError", message=str(exc))
    return JSONResponse(status_code=400, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "networks": get_default_registry().networks}


def run() -> None:
    """Run the connector API server.

    Configuration via environment variables:
    - AERODROME_HOST: Host to bind to (default: 0.0.0.0)
    - AERODROME_PORT: Port to bind to (default: 8000)
    - AERODROME_DEBUG: Enable debug logging and reload mode (default: false)
    """
    configure_logging(verbose=DEBUG)
    uvicorn.run(
        "aggregator.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
