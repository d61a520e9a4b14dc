"""
Main FastAPI application for the ProcessHub API.

This module provides the core FastAPI application with middleware,
CORS configuration, exception handlers and router registration.
"""

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional, cast

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from redis.exceptions import RedisError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from ..core.config import Environment, ProcessHubConfig, get_config
from ..core.database import close_tortoise, init_tortoise
from ..core.errors import ErrorType, create_error_response
from ..core.logging import get_logger, security_logger
from ..core.redis import close_redis, initialize_redis
from .versioning import get_version_info

AUTH_PATH_PREFIX = "/api/auth"

_STATUS_ERROR_TYPES = {
    status.HTTP_400_BAD_REQUEST: ErrorType.VALIDATION_ERROR,
    status.HTTP_401_UNAUTHORIZED: ErrorType.AUTHENTICATION_ERROR,
    status.HTTP_403_FORBIDDEN: ErrorType.AUTHORIZATION_ERROR,
    status.HTTP_404_NOT_FOUND: ErrorType.NOT_FOUND_ERROR,
    status.HTTP_409_CONFLICT: ErrorType.CONFLICT_ERROR,
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        """Dispatch request with security headers."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=()"
        )

        if "server" in response.headers:
            del response.headers["server"]

        return cast(Response, response)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Simple per-client rate limiting for the auth endpoints."""

    def __init__(
        self, app: ASGIApp, max_requests: int = 10, window_seconds: int = 60
    ) -> None:
        """Initialize rate limiting middleware."""
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.requests: Dict[str, List[float]] = {}

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        """Dispatch request with rate limiting for auth endpoints."""
        if request.url.path.startswith(AUTH_PATH_PREFIX):
            client_ip = request.client.host if request.client else "unknown"
            current_time = time.time()

            # Drop clients whose newest request left the window
            self.requests = {
                ip: timestamps
                for ip, timestamps in self.requests.items()
                if timestamps and current_time - timestamps[-1] < self.window_seconds
            }

            recent = [
                ts
                for ts in self.requests.get(client_ip, [])
                if current_time - ts < self.window_seconds
            ]

            if len(recent) >= self.max_requests:
                security_logger.log_rate_limit_exceeded(
                    endpoint=request.url.path, request=request
                )
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content=create_error_response(
                        f"Too many requests. Limit: {self.max_requests} "
                        f"per {self.window_seconds} seconds",
                        ErrorType.VALIDATION_ERROR,
                        path=request.url.path,
                    ),
                )

            recent.append(current_time)
            self.requests[client_ip] = recent

        return cast(Response, await call_next(request))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger = get_logger("api.app")
    config = get_config()
    logger.info(
        "Starting ProcessHub API server", environment=config.environment.value
    )

    await init_tortoise()
    try:
        await initialize_redis()
    except (RedisError, OSError) as e:
        # Sign-up codes are unavailable until Redis comes back
        logger.warning("Redis unavailable at startup", error=str(e))

    yield

    logger.info("Shutting down ProcessHub API server")
    await close_redis()
    await close_tortoise()


def create_app(environment: Optional[str] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        environment: Optional environment override. If provided, this will
                    override the environment from config for this app instance.
    """
    config = get_config()

    if environment:
        config.environment = Environment(environment)

    app = FastAPI(
        title="ProcessHub API",
        description="""
        ## ProcessHub Business Process Management API

        JSON endpoints for BPMN diagram storage, decision rules, KPI tracking,
        approval notifications and AI chat history.

        ### Authentication
        Sign in through `/api/auth/signin`. The session token is returned in an
        HTTP-only `token` cookie and validated on every protected request.

        ### Rate Limiting
        Authentication endpoints are rate-limited per client IP address.
        """,
        version="0.1.0",
        docs_url="/docs" if not config.is_production() else None,
        redoc_url="/redoc" if not config.is_production() else None,
        lifespan=lifespan,
    )

    @app.get("/api/version", tags=["version"])
    async def get_api_version_info() -> Dict[str, Any]:
        """Get API version information."""
        return get_version_info()

    _setup_middleware(app, config)
    _setup_exception_handlers(app)
    _setup_routes(app)
    _setup_uploads(app, config)

    return app


def _setup_middleware(app: FastAPI, config: ProcessHubConfig) -> None:
    """Set up application middleware."""
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=config.api.auth_rate_limit_requests,
        window_seconds=config.api.auth_rate_limit_window,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_resolved,
        allow_credentials=config.api.cors_credentials,
        allow_methods=config.cors_methods_resolved,
        allow_headers=config.cors_headers_resolved,
        max_age=config.api.cors_max_age,
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Any:
        logger = get_logger("api.middleware")
        start_time = time.time()

        response = await call_next(request)

        logger.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else "unknown",
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return response


def _setup_exception_handlers(app: FastAPI) -> None:
    """Set up exception handlers."""
    logger = get_logger("api.exceptions")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        logger.warning("Validation error", path=request.url.path, errors=errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=create_error_response(
                "Invalid request",
                ErrorType.VALIDATION_ERROR,
                path=request.url.path,
                context={"errors": errors},
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger.info(
            "HTTP exception",
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail,
        )

        if isinstance(exc.detail, dict):
            content = {**exc.detail, "path": request.url.path}
        else:
            content = create_error_response(
                str(exc.detail),
                _STATUS_ERROR_TYPES.get(exc.status_code, ErrorType.UNKNOWN_ERROR),
                path=request.url.path,
            )

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unexpected error", path=request.url.path, error=str(exc), exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Internal server error",
                "path": request.url.path,
            },
        )


def _setup_routes(app: FastAPI) -> None:
    """Set up application routes."""
    from .routes import (
        admin,
        ai_chats,
        auth,
        bpmn_nodes,
        dashboard,
        decision,
        health,
        kpis,
        latex_files,
        notifications,
        standards,
        users,
    )

    app.include_router(health.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(users.profile_router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(standards.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")
    app.include_router(bpmn_nodes.router, prefix="/api")
    app.include_router(decision.router, prefix="/api")
    app.include_router(notifications.router, prefix="/api")
    app.include_router(kpis.router, prefix="/api")
    app.include_router(ai_chats.router, prefix="/api")
    app.include_router(latex_files.router, prefix="/api")
    app.include_router(dashboard.router, prefix="/api")



def _setup_uploads(app: FastAPI, config: ProcessHubConfig) -> None:
    """Serve uploaded profile pictures from the upload directory."""
    upload_dir = Path(config.api.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")


# Create the main application instance
app = create_app()


def main() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "processhub.api.app:app",
        host=config.api.host,
        port=config.api.port,
        reload=config.api.reload and config.is_development(),
        log_level="info",
    )


if __name__ == "__main__":
    main()
