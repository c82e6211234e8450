"""
Aymur retail service: application factory.

Middleware (outermost first): CORS, request logging, auth + permission
resolution. Every error leaves as the standard error envelope.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from aymur.access import access_router
from aymur.config import db_manager, settings
from aymur.expenses import expenses_router
from aymur.middleware import AuthPermissionMiddleware
from aymur.pos import pos_router
from aymur.utils import Logger, error_response

logger = Logger("request")

# (router, path segment under /api/{version}, tag)
ROUTERS = (
    (access_router, "access", "Access & Permissions"),
    (pos_router, "pos", "POS (Point of Sale)"),
    (expenses_router, "expenses", "Expenses"),
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line in, one line out per request, with status and duration."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        label = f"{request.method} {request.url.path}"
        shop = request.headers.get(settings.shop_header) or "-"
        logger.info(f"--> {label} (shop={shop})")

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"<-- {label} | 500 | {self._elapsed(started)}ms")
            raise

        line = f"<-- {label} | {response.status_code} | {self._elapsed(started)}ms"
        if response.status_code >= 500:
            logger.error(line)
        elif response.status_code >= 400:
            logger.warning(line)
        else:
            logger.info(line)
        return response

    @staticmethod
    def _elapsed(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await db_manager.connect()
    try:
        yield
    finally:
        db_manager.close()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        response = error_response(message=str(exc.detail), code=exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return error_response(
            message="Request validation failed",
            code=422,
            data=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        response = error_response(
            message=str(exc) if settings.debug else "Internal server error",
            code=500,
        )
        response.headers["X-Error-Timestamp"] = datetime.now(timezone.utc).isoformat()
        return response


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Multi-shop retail management for jewelry businesses",
        docs_url="/api/docs",
        lifespan=lifespan,
    )

    # add_middleware wraps, so the last one added runs first
    app.add_middleware(AuthPermissionMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allowed_methods,
        allow_headers=settings.cors_allowed_headers,
    )

    register_exception_handlers(app)

    for router, segment, tag in ROUTERS:
        app.include_router(router, prefix=f"/api/{settings.api_version}/{segment}", tags=[tag])

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "database": db_manager.is_connected,
        }

    return app


app = create_app()
