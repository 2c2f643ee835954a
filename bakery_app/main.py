"""Main FastAPI application entry point."""

import asyncio
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sentry_sdk.integrations.fastapi import FastApiIntegration
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from bakery_app.api.v1 import api_router
from bakery_app.api.v1.endpoints import auth
from bakery_app.container import Container
from bakery_app.core.config import Settings, get_settings
from bakery_app.core.errors import AppError
from bakery_app.core.logging import bind_request_id, logger, reset_request_id
from bakery_app.core.security import RateLimiter
from bakery_app.graphql import graphql_router

RATE_LIMITED_PREFIXES = ("/api/v1", "/auth")
REQUEST_ID_HEADER = "X-Request-ID"


def _init_sentry(settings: Settings) -> None:
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            integrations=[FastApiIntegration()],
            traces_sample_rate=1.0 if settings.environment == "development" else 0.1,
            environment=settings.environment,
        )
        logger.info("Sentry initialized")


def _error_body(settings: Settings, message: str, exc: Optional[BaseException] = None) -> dict:
    body = {"success": False, "message": message}
    if exc is not None and settings.debug and not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    """
    Build the application.

    When ``container`` is given it is used as is (tests pass one wired to an
    in-memory database); otherwise the lifespan builds it from settings.
    """
    settings = settings or get_settings()
    _init_sentry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        # Startup
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")
        logger.info(f"Environment: {settings.environment}")
        owns_container = getattr(app.state, "container", None) is None
        if owns_container:
            app.state.container = Container.from_settings(settings)
        health = app.state.container.health()
        logger.info("Startup health", extra=health)

        yield

        # Shutdown
        logger.info("Shutting down application")
        if owns_container:
            app.state.container.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Bakery management API: catalog, inventory, orders and users",
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )
    app.state.settings = settings
    app.state.container = container
    app.state.rate_limiter = RateLimiter(
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        max_keys=settings.rate_limit_max_keys,
    )

    # Middlewares (the last one registered runs first)
    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if request.url.path.startswith(RATE_LIMITED_PREFIXES):
            client_id = request.client.host if request.client else "unknown"
            if not app.state.rate_limiter.is_allowed(client_id):
                logger.warning("Rate limit exceeded", extra={"client": client_id, "path": request.url.path})
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content=_error_body(settings, "Too many requests, please try again later"),
                )
        return await call_next(request)

    @app.middleware("http")
    async def request_timeout(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=settings.request_timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("Request timed out", extra={"method": request.method, "path": request.url.path})
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=_error_body(settings, "Request timed out"),
            )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = bind_request_id(request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.info(
                f"{request.method} {request.url.path} {response.status_code}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    # Exception handlers
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"Application error: {exc.message}", exc_info=exc)
        else:
            logger.warning(f"Request rejected: {exc.message}", extra={"status_code": exc.status_code})
        return JSONResponse(status_code=exc.status_code, content=_error_body(settings, exc.message, exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(settings, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors."""
        logger.warning(f"Validation error: {exc.errors()}")
        body = _error_body(settings, "Invalid request data")
        body["errors"] = jsonable_errors(exc)
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(settings, "Internal server error", exc),
        )

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint for monitoring."""
        checks = await run_in_threadpool(request.app.state.container.health)
        healthy = checks["database"]
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "checks": checks,
                "version": settings.app_version,
                "environment": settings.environment,
            },
        )

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs" if not settings.is_production else "Documentation disabled in production",
            "graphql": "/graphql",
        }

    # Mount Prometheus metrics
    app.mount("/metrics", make_asgi_app())

    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(graphql_router(), prefix="/graphql", include_in_schema=False)

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the non-serializable ``ctx``/``input`` payloads."""
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]


app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("bakery_app.main:app", host=settings.api_host, port=settings.api_port, reload=settings.api_reload)


if __name__ == "__main__":
    run()
