import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded

from common.core.config import settings
from common.core.exceptions import AppException, ProviderError
from api.v1.routes.router import api_router
from internal.routes.router import internal_router
from common.providers.rate_limiter.limiter import limiter

# Initialize Axiom OpenTelemetry exporter (must be first)
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.asgi import OpenTelemetryMiddleware
from common.core.otel_axiom_exporter import (
    _initialize_telemetry,
    get_logger,
)  # noqa


_initialize_telemetry()
# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Get logger
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting application...")
    if not settings.stripe_webhook_secret:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set; webhooks will be rejected")
    yield
    # Shutdown
    logger.info("Shutting down application...")


# Only expose OpenAPI docs in local development
docs_url = "/docs" if settings.environment == "local" else None
redoc_url = "/redoc" if settings.environment == "local" else None
openapi_url = "/openapi.json" if settings.environment == "local" else None

app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
    openapi_url=openapi_url,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    # Provider detail stays in the logs; the caller gets the safe message
    logger.error(
        f"Payment provider error: {exc.message}",
        extra={"provider_status": exc.provider_status, "path": request.url.path},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.user_message or "Payment provider request failed"},
    )


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Invalid request",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


# Instrument FastAPI with OpenTelemetry
FastAPIInstrumentor.instrument_app(app)
# Add ASGI middleware for context propagation
app.add_middleware(OpenTelemetryMiddleware)

# Add gzip compression middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Public API; tenant identity arrives in the request, auth sits in front
app.include_router(api_router, prefix="/api/v1")

# K8s probes at root level, not under /api/v1
app.include_router(internal_router)
