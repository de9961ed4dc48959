"""
FastAPI application entry point for the shop backend.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from http import HTTPStatus
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from shop_backend.config import Settings, get_settings
from shop_backend.dependencies import get_db_client
from shop_backend.errors import ApiError
from shop_backend.graphql_schema import create_graphql_router
from shop_backend.routes import pages_router, router
from shop_backend.seed import is_empty, reset_all

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

API_FALLBACK = {
    "code": "NotFound",
    "message": "Resource not found or method not supported",
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)


def _describe_validation_errors(errors) -> str:
    parts = []
    for error in errors:
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")
        )
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(parts) or "Invalid request"


def _is_api_path(path: str, api_prefix: str) -> bool:
    return path == api_prefix or path.startswith(api_prefix.rstrip("/") + "/")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.seed_on_startup:
        db = app.dependency_overrides.get(get_db_client, get_db_client)()
        if is_empty(db):
            logger.info("Store is empty, generating seed data")
            reset_all(db, settings.seed_counts())
    yield
    logger.info("Shop backend shutting down")


def register_exception_handlers(app: FastAPI, api_prefix: str) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.as_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "code": HTTPStatus.BAD_REQUEST.phrase,
                "message": _describe_validation_errors(exc.errors()),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if _is_api_path(request.url.path, api_prefix) and exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content=API_FALLBACK)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "code": HTTPStatus(exc.status_code).phrase,
                "message": str(exc.detail),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "code": HTTPStatus.INTERNAL_SERVER_ERROR.phrase,
                "message": "An unexpected error occurred",
            },
        )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    app = FastAPI(title="Shop Backend", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %d %.1f ms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    register_exception_handlers(app, settings.api_prefix)

    app.include_router(pages_router)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(create_graphql_router(), prefix=settings.graphql_path)

    # Mounted last so it only sees paths no route claimed.
    if Path(settings.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir), name="static")
    return app


app = create_app()
