import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from referral_backend.app.api import auth, referrals
from referral_backend.app.api.deps import get_session
from referral_backend.app.core.auth import TokenIssuer
from referral_backend.app.core.database import create_engine_from_settings, create_session_factory
from referral_backend.app.core.exceptions import InternalServiceError, ServiceError
from referral_backend.app.core.limiter import limiter
from referral_backend.app.core.logging import setup_logging, get_logger
from referral_backend.app.core.metrics import PrometheusMiddleware, get_metrics_response
from referral_backend.app.core.settings import Settings, load_settings

logger = get_logger(__name__)

APP_VERSION = "1.0.0"


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render service errors as {"error": message} with the error's status."""
    if isinstance(exc, InternalServiceError):
        # Клиенту уходит только общий текст, подробности остаются в логах
        logger.error(
            "Internal service error",
            path=request.url.path,
            error_type=type(exc).__name__,
            detail=exc.detail,
        )
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            error_type=type(exc).__name__,
            status_code=exc.status_code,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request fields answer 400 with the first problem."""
    errors = exc.errors()
    message = "invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"error": message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Settings are loaded once here (or passed in by tests) and everything that
    needs configuration receives it from this function.
    """
    if settings is None:
        settings = load_settings()

    setup_logging(log_level=settings.LOG_LEVEL, json_format=settings.is_production)

    engine = create_engine_from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.
        - Startup: log configuration
        - Shutdown: dispose of the connection pool
        """
        logger.info("Application starting up", version=APP_VERSION, environment=settings.ENVIRONMENT)
        yield
        logger.info("Application shutting down")
        await engine.dispose()

    app = FastAPI(title="Referral System API", version=APP_VERSION, lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.token_issuer = TokenIssuer.from_settings(settings)

    # Use shared limiter (routers use the same instance for @limiter.limit)
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    allowed_origins = settings.allowed_origins_list
    if not allowed_origins:
        # Production refuses to start without origins (see Settings.validate_production_settings)
        allowed_origins = ["*"]
        logger.warning("CORS: Allowing all origins (development mode). Set ALLOWED_ORIGINS in production!")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allowed_origins != ["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(PrometheusMiddleware)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(referrals.router, tags=["referral"])

    @app.get("/")
    async def root():
        return {"status": "ok"}

    @app.get("/health")
    async def health_check(session: AsyncSession = Depends(get_session)):
        """
        Health check endpoint for monitoring and orchestration.
        Checks database connectivity.
        """
        health_status = {
            "status": "healthy",
            "version": APP_VERSION,
            "checks": {"database": "ok"},
        }
        try:
            await session.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            health_status["status"] = "unhealthy"
            health_status["checks"]["database"] = "error"
        return health_status

    @app.get("/metrics")
    async def metrics_endpoint(openmetrics: bool = False):
        """Prometheus metrics endpoint."""
        return get_metrics_response(openmetrics=openmetrics)

    return app


def _build_default_app() -> FastAPI:
    try:
        return create_app()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


app = _build_default_app()
