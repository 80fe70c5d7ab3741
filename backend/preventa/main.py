from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from preventa.api.routes import (
    auth,
    health,
    health_data,
    insights,
    profile,
    progress,
    tracking,
)
from preventa.config import get_settings
from preventa.core.error_handlers import (
    generic_exception_handler,
    preventa_exception_handler,
    pydantic_validation_handler,
)
from preventa.core.exceptions import PreventaException
from preventa.core.logging import get_logger, setup_logging
from preventa.core.middleware import RequestLoggingMiddleware
from preventa.core.rate_limit import limiter, rate_limit_exceeded_handler
from preventa.database import init_db

settings = get_settings()

# Initialize structured logging
setup_logging(debug=settings.debug, level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("application_startup", app_name=settings.app_name, timezone=settings.timezone)
    init_db()
    logger.info("database_initialized")

    yield

    logger.info("application_shutdown")


app = FastAPI(
    title=settings.app_name,
    description="Preventive health companion: daily progress and health insights",
    version="0.1.0",
    root_path="",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
)

# CORS middleware - restrict to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

# Request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Rate limiting
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Register exception handlers
app.add_exception_handler(PreventaException, preventa_exception_handler)
app.add_exception_handler(RequestValidationError, pydantic_validation_handler)
app.add_exception_handler(PydanticValidationError, pydantic_validation_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
app.include_router(health_data.router, prefix="/api/health-data", tags=["health-data"])
app.include_router(tracking.router, prefix="/api/tracking", tags=["tracking"])
app.include_router(progress.router, prefix="/api/progress", tags=["progress"])
app.include_router(insights.router, prefix="/api/insights", tags=["insights"])


@app.get("/")
async def root():
    return {"message": "Preventa API", "version": "0.1.0"}
