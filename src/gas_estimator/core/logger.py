# /src/gas_estimator/core/logger.py
import logging
import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars
import sentry_sdk
from prometheus_client import Counter
from gas_estimator.core.config import settings

# --- Prometheus Metrics ---
GAS_ESTIMATES = Counter("gas_estimates_total", "Total number of completed gas estimates", ["method"])
GAS_ESTIMATE_FAILURES = Counter("gas_estimate_failures_total", "Total number of failed gas estimates", ["kind"])
RPC_CALLS = Counter("rpc_calls_total", "Total eth_estimateGas calls sent upstream", ["outcome"])

def resolve_log_level(name: str) -> int | None:
    """Numeric level for a name like "INFO", or None if logging does not know it."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else None

def configure_logging():
    # An unknown LOG_LEVEL falls back to INFO here; config_validator reports it.
    level = resolve_log_level(settings.LOG_LEVEL)
    if level is None:
        level = logging.INFO

    if settings.SENTRY_DSN:
        sentry_sdk.init(dsn=settings.SENTRY_DSN.get_secret_value(), traces_sample_rate=1.0)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

def get_logger(name: str):
    return structlog.get_logger(name)

def bind_request_context(request_id: str, path: str):
    """Starts a fresh log context for one HTTP request."""
    clear_contextvars()
    bind_contextvars(request_id=request_id, path=path)

configure_logging()
log = get_logger("GasEstimator.System")
