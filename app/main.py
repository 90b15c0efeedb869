"""
PakAir API - FastAPI Application Entry Point

Citizen air-quality reporting backend.

DESIGN PRINCIPLES:
- Citizens submit reports, officials review them
- Reports are soft-deleted, never physically removed
- Model output and recommendations are relayed read-only, unmodified
- One entrypoint; CORS strictness is a configuration option
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from google.api_core.exceptions import GoogleAPICallError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config.firebase import initialize_firestore
from app.core.errors import AppError, InternalError, UpstreamFailure
from app.core.logging_config import configure_logging
from app.core.settings import CorsPolicy, Settings, settings
from app.routes import auth, features, health, model_data, recommendations, reports

logger = logging.getLogger(__name__)


def bootstrap(app: FastAPI) -> None:
    """
    One-time process initialization: logging and the Firestore client.
    Idempotent; repeated calls on an initialized app are no-ops.
    """
    if getattr(app.state, "initialized", False):
        return

    configure_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    initialize_firestore()
    app.state.initialized = True


@asynccontextmanager
async def lifespan(app: FastAPI):
    bootstrap(app)
    yield
    logger.info(f"Shutting down {settings.APP_NAME}")


def cors_options(config: Settings) -> dict:
    """CORSMiddleware keyword arguments for the configured CORS policy."""
    common = {
        "allow_methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        "allow_headers": ["Content-Type", "Authorization", "X-Requested-With"],
    }

    if config.CORS_POLICY is CorsPolicy.ALLOW_ALL:
        return {**common, "allow_origins": ["*"], "allow_credentials": False}

    if config.CORS_POLICY is CorsPolicy.ALLOW_LISTED:
        return {
            **common,
            "allow_origins": config.cors_origins,
            "allow_origin_regex": config.CORS_ORIGIN_REGEX,
            "allow_credentials": True,
        }

    if config.CORS_POLICY is CorsPolicy.DEV_PERMISSIVE:
        if config.is_production:
            logger.warning("CORS_POLICY=dev_permissive in production: every origin is allowed with credentials")
        return {**common, "allow_origin_regex": ".*", "allow_credentials": True}

    raise ValueError(f"Unhandled CORS policy: {config.CORS_POLICY}")


def _error_response(request: Request, status_code: int, body: dict, exc: Exception = None) -> JSONResponse:
    if exc is not None and not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.error})")
            return _error_response(request, exc.status_code, exc.to_dict(), exc)
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
        return _error_response(request, exc.status_code, exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        logger.info(f"{request.method} {request.url.path} -> 400 validation_error: {details}")
        return _error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            {"success": False, "message": "Invalid request data", "code": "validation_error", "error": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        code = "not_found" if exc.status_code == 404 else f"http_{exc.status_code}"
        return _error_response(request, exc.status_code, {"success": False, "message": message, "code": code})

    @app.exception_handler(GoogleAPICallError)
    async def upstream_exception_handler(request: Request, exc: GoogleAPICallError):
        logger.error(f"{request.method} {request.url.path} Firestore call failed: {exc}", exc_info=True)
        failure = UpstreamFailure("Database operation failed", error=str(exc))
        return _error_response(request, failure.status_code, failure.to_dict(), exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions and log them with full traceback."""
        logger.error(f"🔥 Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
        failure = InternalError(error=str(exc))
        return _error_response(request, failure.status_code, failure.to_dict(), exc)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Citizen air-quality reporting API",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    app.add_middleware(CORSMiddleware, **cors_options(settings))

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(reports.router)
    app.include_router(model_data.router)
    app.include_router(recommendations.router)
    app.include_router(features.router)

    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()
