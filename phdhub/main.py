from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager

from phdhub import __version__
from phdhub.core.config import settings
from phdhub.core.database import init_db, close_db
from phdhub.core.exceptions import PhdHubError, InvalidRequestError, InternalError, error_response
from phdhub.core.logging_config import logger
from phdhub.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from phdhub.api.v1.router import api_router


def validate_config() -> None:
    """Warn about collaborators that are not configured"""
    if not settings.IDENTITY_JWT_KEY:
        logger.warning("[Startup] IDENTITY_JWT_KEY not set - every authenticated request will be rejected")
    if not settings.IDENTITY_SECRET_KEY:
        logger.warning("[Startup] IDENTITY_SECRET_KEY not set - author display fields will be empty")
    if not settings.WEBHOOK_SECRET:
        logger.warning("[Startup] WEBHOOK_SECRET not set - identity webhooks will be skipped")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    validate_config()
    await init_db()
    logger.info("[Startup] Database tables ready")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Community forum, events calendar and research groups for doctoral students",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

# Add middleware (order matters - last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=1024 * 1024)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


# Exception handlers
@app.exception_handler(PhdHubError)
async def phdhub_error_handler(request: Request, exc: PhdHubError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message} ({request.method} {request.url.path})")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = str(first.get("loc", ["", ""])[-1]) if first.get("loc") else None
    message = f"Invalid or missing field: {field}" if field else "Invalid request"
    error = InvalidRequestError(message, field=field)
    return JSONResponse(status_code=error.status_code, content=error_response(error))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=True)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error_response(error))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error_response(error))


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "phdhub",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": __version__,
        "docs": "/docs",
    }


# Include API router
app.include_router(api_router, prefix=settings.API_PREFIX)


def run():
    """Console entry point"""
    import uvicorn
    uvicorn.run(
        "phdhub.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run()
