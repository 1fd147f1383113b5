from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .errors import (
    Conflict,
    InvalidCredentials,
    NotFound,
    PersistenceError,
    StoreError,
    UnknownSession,
    ValidationError,
)
from .logs import setup_logging
from .routers import auth, categories, records, users
from .services import HealthStore

logger = logging.getLogger(__name__)

# Checked in order; subclasses come before their bases.
ERROR_STATUS = (
    (UnknownSession, status.HTTP_401_UNAUTHORIZED),
    (InvalidCredentials, status.HTTP_401_UNAUTHORIZED),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Conflict, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: StoreError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error(code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=code, content={"errorMessage": message})


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        code = status_for(exc)
        if code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error(code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected payload on %s: %s", request.url.path, exc.errors())
        return _error(status.HTTP_400_BAD_REQUEST, "Missing or invalid fields")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))


def create_app(store: Optional[HealthStore] = None) -> FastAPI:
    """Build the HTTP app. Without a store, one is loaded from ``STORAGE_PATH`` on startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config.LOG_LEVEL, config.LOG_FILE)
        if app.state.store is None:
            app.state.store = HealthStore.open(config.STORAGE_PATH)
        try:
            yield
        finally:
            app.state.store.close()

    app = FastAPI(title="healthlog API", version="0.1.0", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_methods=config.CORS_ALLOW_METHODS,
        allow_headers=config.CORS_ALLOW_HEADERS,
        max_age=config.CORS_MAX_AGE,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(records.router)
    app.include_router(categories.router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "message": "healthlog server running"}

    return app


app = create_app()
