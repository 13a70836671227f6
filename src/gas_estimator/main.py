# /src/gas_estimator/main.py
import uvicorn

from gas_estimator.core.config import settings
from gas_estimator.core.config_validator import validate as validate_config
from gas_estimator.core.logger import configure_logging, get_logger

def main():
    configure_logging()
    log = get_logger("GasEstimator.System")
    validate_config()
    log.info("GAS_ESTIMATOR_STARTING", host=settings.BIND_HOST, port=settings.BIND_PORT, rpc_url=settings.ETH_RPC_URL)

    try:
        uvicorn.run("gas_estimator.core.api:app", host=settings.BIND_HOST, port=settings.BIND_PORT,
                    log_level=settings.LOG_LEVEL.lower())
    except KeyboardInterrupt:
        pass
    log.warning("SYSTEM_SHUTDOWN_COMPLETE")

if __name__ == "__main__":
    main()
