from typing import Any, Dict, Optional
import functools
import asyncio
import logging
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from common.core.config import settings

# Configure logging at module level
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True,  # This ensures it overrides any existing configuration
)


# Global flag to ensure initialization only happens once
_initialized = False
axiom_tracer = None


def _axiom_headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {settings.axiom_token}",
        "X-Axiom-Dataset": settings.axiom_dataset or "",
    }


def _initialize_telemetry():
    """Initialize telemetry once and only once."""
    global _initialized, axiom_tracer

    if _initialized:
        return

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.otel_service_name,
            SERVICE_VERSION: settings.otel_service_version,
        }
    )

    # TRACING SETUP
    provider = TracerProvider(resource=resource)
    if settings.axiom_token:
        otlp_trace_exporter = OTLPSpanExporter(
            endpoint="https://api.axiom.co/v1/traces",
            headers=_axiom_headers(),
        )
        provider.add_span_processor(BatchSpanProcessor(otlp_trace_exporter))
    trace.set_tracer_provider(provider)
    axiom_tracer = trace.get_tracer(settings.otel_service_name)

    # LOGGING SETUP
    if settings.axiom_token:
        logger_provider = LoggerProvider(resource=resource)
        otlp_log_exporter = OTLPLogExporter(
            endpoint="https://api.axiom.co/v1/logs",
            headers=_axiom_headers(),
        )
        logger_provider.add_log_record_processor(
            BatchLogRecordProcessor(otlp_log_exporter)
        )
        set_logger_provider(logger_provider)

    logging.getLogger().setLevel(logging.INFO)

    _initialized = True
    logging.getLogger(__name__).info(
        "Telemetry initialized",
        extra={"axiom_export": bool(settings.axiom_token)},
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance. Ensures telemetry is initialized.
    Use this instead of logging.getLogger() directly.
    """
    if not _initialized:
        _initialize_telemetry()
    return logging.getLogger(name)


# Custom decorator for automatic span naming
def trace_span(func):
    """Decorator that automatically creates a span with the function name."""

    def _span_name(args) -> str:
        if args and hasattr(args[0], func.__name__):
            # Bound method - include class name
            return f"{args[0].__class__.__name__}.{func.__name__}"
        return func.__name__

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        if axiom_tracer is None:
            _initialize_telemetry()
        with axiom_tracer.start_as_current_span(_span_name(args)):
            return func(*args, **kwargs)

    @functools.wraps(func)
    async def async_wrapper(*args, **kwargs):
        if axiom_tracer is None:
            _initialize_telemetry()
        with axiom_tracer.start_as_current_span(_span_name(args)):
            return await func(*args, **kwargs)

    # Return appropriate wrapper based on function type
    if asyncio.iscoroutinefunction(func):
        return async_wrapper
    else:
        return sync_wrapper


# Helper function to log within current span context
def log_span_event(message: str, attributes: Optional[Dict[str, Any]] = None):
    """
    Log a message as an event in the current span.
    This will make the log appear in the trace view in Axiom.
    """
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        current_span.add_event(message, attributes=attributes or {})

    # Also log normally so it appears in logs
    logger = get_logger(__name__)
    logger.info(message, extra=attributes)
