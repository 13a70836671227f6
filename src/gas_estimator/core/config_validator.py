# /src/gas_estimator/core/config_validator.py
# Run at startup, before the RPC pool is built.
from urllib.parse import urlparse

from gas_estimator.core.config import Settings, settings as default_settings
from gas_estimator.core.logger import log, resolve_log_level

def validate(settings: Settings | None = None):
    settings = settings or default_settings
    log.info("--- CONFIG VALIDATION START ---")
    errors = []

    url = urlparse(settings.ETH_RPC_URL)
    if url.scheme not in ("http", "https") or not url.netloc:
        errors.append(f"ETH_RPC_URL is not a valid http(s) URL: {settings.ETH_RPC_URL!r}")

    for var in ("RPC_TIMEOUT_SECONDS", "RPC_KEEPALIVE_SECONDS", "RPC_MAX_CONNECTIONS_PER_HOST", "RPC_POOL_SIZE"):
        if getattr(settings, var) <= 0:
            errors.append(f"{var} must be positive")

    if settings.RPC_RETRY_ATTEMPTS < 1:
        errors.append("RPC_RETRY_ATTEMPTS must be at least 1")

    if resolve_log_level(settings.LOG_LEVEL) is None:
        errors.append(f"LOG_LEVEL is not a known level: {settings.LOG_LEVEL!r}")

    if errors:
        for error in errors:
            log.critical(error)
        raise ValueError("Service configuration is invalid. Halting.")

    log.info("--- CONFIG VALIDATION PASSED ---")

if __name__ == "__main__":
    validate()
