# /src/gas_estimator/core/config.py
from pydantic_settings import BaseSettings
from pydantic import SecretStr
from typing import List

DEFAULT_ETH_RPC_URL = "https://ethereum-rpc.publicnode.com"

class Settings(BaseSettings):
    # Upstream node
    ETH_RPC_URL: str = DEFAULT_ETH_RPC_URL

    # Connection pool shared by every request
    RPC_TIMEOUT_SECONDS: float = 10.0
    RPC_KEEPALIVE_SECONDS: float = 30.0
    RPC_MAX_CONNECTIONS_PER_HOST: int = 10
    RPC_POOL_SIZE: int = 100
    # Collaborator-level retries. 1 means a single attempt.
    RPC_RETRY_ATTEMPTS: int = 1

    # HTTP server
    BIND_HOST: str = "0.0.0.0"
    BIND_PORT: int = 3000
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Operational Settings
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: SecretStr | None = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
