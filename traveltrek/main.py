"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from traveltrek.config import settings
from traveltrek.database import init_db
from traveltrek.errors import TravelTrekError
from traveltrek.api import admin, auth, chat, destinations, health, membership, users
from traveltrek.services.stores import EphemeralStore, OtpStore, RateLimiter

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


def build_stores() -> tuple[OtpStore, RateLimiter]:
    otp_store = OtpStore(
        ttl_seconds=settings.otp_ttl_seconds,
        backend=EphemeralStore("otp", sweep_interval=settings.otp_sweep_interval_seconds),
    )
    rate_limiter = RateLimiter(
        limit=settings.chat_rate_limit,
        window_seconds=settings.chat_rate_window_seconds,
        backend=EphemeralStore(
            "rate-limit", sweep_interval=settings.rate_limit_sweep_interval_seconds
        ),
    )
    return otp_store, rate_limiter


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    # Startup
    logger.info("Starting TravelTrek API", environment=settings.environment)
    await init_db()

    app.state.otp_store, app.state.rate_limiter = build_stores()
    app.state.otp_store.start()
    app.state.rate_limiter.start()

    yield

    # Shutdown
    app.state.otp_store.stop()
    app.state.rate_limiter.stop()
    logger.info("Shutting down TravelTrek API")


app = FastAPI(
    title="TravelTrek API",
    description="Membership travel platform: enrollment, activation, travel days and concierge",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TravelTrekError)
async def travel_trek_error_handler(request: Request, exc: TravelTrekError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, error=str(exc))
    content = {"error": "Something went wrong!"}
    if not settings.is_production:
        content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix=settings.api_prefix, tags=["Auth"])
app.include_router(users.router, prefix=settings.api_prefix, tags=["User"])
app.include_router(membership.router, prefix=settings.api_prefix, tags=["Membership"])
app.include_router(destinations.router, prefix=settings.api_prefix, tags=["Destinations"])
app.include_router(chat.router, prefix=settings.api_prefix, tags=["Chat"])
app.include_router(admin.router, prefix=settings.api_prefix, tags=["Admin"])


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "name": "TravelTrek API",
        "version": "1.0.0",
        "docs": "/docs",
    }
