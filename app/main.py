"""Application factory for the Finance Tracker API.

This module builds the FastAPI application: it opens the TransactionStore for the lifetime of the app, registers the exception handlers that turn store errors into JSON responses, sets up the request rate limiter, adds the CORS, security header and access log middleware, and exposes the Scalar API reference endpoint.
"""

import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from app.api.dependencies import RateLimiter
from app.api.routes import router
from app.core.db import TransactionStore
from app.core.errors import FinanceError
from app.core.settings import Settings, get_settings
from app.core.utils import get_logger, setup_logging

logger = get_logger("finance-tracker.api")
access_logger = get_logger("finance-tracker.access")

INTERNAL_ERROR = {"message": "Internal server error"}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


def finance_error_handler(request: Request, exc: FinanceError) -> JSONResponse:
    """Map validation, not-found and rate limit errors to their status codes."""
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 rather than FastAPI's default 422."""
    details = "; ".join(error.get("msg", "") for error in exc.errors())
    logger.warning(f"{request.method} {request.url.path} -> 400: {details}")
    return JSONResponse(status_code=400, content={"message": details or "Invalid request"})


def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Answer store failures with a generic server error that still passes through CORS."""
    logger.exception(f"Store failure on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and answer with a generic server error."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build a FastAPI application bound to the given (or environment) settings."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the transaction store on startup and close it on shutdown."""
        store = TransactionStore(settings.database_url)
        store.open()
        app.state.store = store
        try:
            yield
        finally:
            store.close()

    app = FastAPI(
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        title="Finance Tracker API",
        description="""
        The Finance Tracker API records income and expense transactions.

        **Endpoints:**
        - `GET /api/health`: Health check endpoint.
        - `GET /api/transactions`: List transactions, newest date first.
        - `POST /api/transactions`: Create a transaction.
        - `PATCH /api/transactions/{id}`: Update fields of a transaction.
        - `DELETE /api/transactions/{id}`: Delete a transaction.
        - `GET /scalar`: Interactive Scalar OpenAPI documentation.
        """,
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.rate_limiter = RateLimiter(settings.rate_limit)

    app.add_exception_handler(FinanceError, finance_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Last added runs first: CORS wraps the headers/access log middleware.
    @app.middleware("http")
    async def security_headers_and_access_log(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Add security headers to every response and log one line per request."""
        started = time.perf_counter()
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        elapsed_ms = (time.perf_counter() - started) * 1000
        access_logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/scalar", include_in_schema=False)
    async def scalar_docs() -> HTMLResponse:
        """Return Scalar API reference."""
        return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)

    return app


app = create_app()

