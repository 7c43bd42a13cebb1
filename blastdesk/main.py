from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from blastdesk import __version__
from blastdesk.core.config import settings
from blastdesk.core.database import init_db, close_db
from blastdesk.core.exceptions import BlastDeskError, error_response
from blastdesk.core.logging_config import logger
from blastdesk.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from blastdesk.core.rate_limiter import limiter, rate_limit_exceeded_handler
from blastdesk.api.v1.router import api_router
from blastdesk.db.seed_data import run_seeders
from blastdesk.services.backdrop_storage import backdrop_storage
from blastdesk.services.blast_scheduler import blast_scheduler


PLACEHOLDER_SECRETS = {"", "CHANGE_ME"}


def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if settings.SECRET_KEY in PLACEHOLDER_SECRETS:
        errors.append("SECRET_KEY is not set or using default value")

    if settings.JWT_SECRET_KEY in PLACEHOLDER_SECRETS:
        errors.append("JWT_SECRET_KEY is not set or using default value")

    # The app still serves the dashboard without mail, but nothing gets delivered
    if not settings.SMTP_USER or not settings.SMTP_PASSWORD:
        warnings.append("SMTP_USER/SMTP_PASSWORD not set - verification codes will not be sent")

    if not settings.BLAST_SMTP_USER or not settings.BLAST_SMTP_PASSWORD:
        warnings.append("BLAST_SMTP_USER/BLAST_SMTP_PASSWORD not set - blasts will fail to deliver")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    validate_critical_config()

    await init_db()
    logger.info("[Startup] Database tables ready")

    backdrop_storage.ensure_base_dir()
    logger.info(f"[Startup] Backdrop storage at {backdrop_storage.base_dir}")

    await run_seeders()

    if settings.BLAST_SCHEDULER_ENABLED:
        blast_scheduler.start()
    else:
        logger.info("Blast scheduler disabled")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")

    if blast_scheduler.is_running:
        await blast_scheduler.stop()

    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Participant directory, email templates, e-cards and scheduled email blasts",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Middleware (last added runs first)
# Applies RATE_LIMIT_PER_MINUTE to routes without their own @limiter.limit
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# Multipart overhead on top of the largest allowed backdrop
app.add_middleware(
    RequestSizeLimitMiddleware,
    max_size=(settings.MAX_UPLOAD_SIZE_MB + 1) * 1024 * 1024
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time", "Content-Disposition"],
)


@app.exception_handler(BlastDeskError)
async def blastdesk_exception_handler(request: Request, exc: BlastDeskError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "error": f"{field}: {message}" if field else message,
            "code": "VALIDATION_ERROR",
            "details": {"errors": [
                {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg")} for e in errors
            ]},
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": str(exc) if settings.DEBUG else "Internal server error",
            "code": "INTERNAL_ERROR",
            "details": {},
        }
    )


@app.get("/", tags=["Health"])
@limiter.exempt
async def root():
    return {"message": "Backend server is running"}


@app.get("/health", tags=["Health"])
@limiter.exempt
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": __version__,
        "environment": settings.ENVIRONMENT
    }


app.include_router(api_router, prefix=settings.API_PREFIX)


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run(
        "blastdesk.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG and settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
