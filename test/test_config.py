import pytest

from gas_estimator.core.config import DEFAULT_ETH_RPC_URL, Settings
from gas_estimator.core.config_validator import validate

def test_defaults():
    settings = Settings()
    assert settings.ETH_RPC_URL == DEFAULT_ETH_RPC_URL
    assert settings.RPC_TIMEOUT_SECONDS == 10
    assert settings.RPC_MAX_CONNECTIONS_PER_HOST == 10
    assert settings.RPC_RETRY_ATTEMPTS == 1
    validate(settings)

def test_rpc_url_from_environment(monkeypatch):
    monkeypatch.setenv("ETH_RPC_URL", "http://127.0.0.1:8545")
    assert Settings().ETH_RPC_URL == "http://127.0.0.1:8545"

@pytest.mark.parametrize("overrides", [
    {"ETH_RPC_URL": "ftp://node.local"},
    {"ETH_RPC_URL": "not a url"},
    {"RPC_TIMEOUT_SECONDS": 0},
    {"RPC_POOL_SIZE": -1},
    {"RPC_RETRY_ATTEMPTS": 0},
    {"LOG_LEVEL": "LOUD"},
])
def test_invalid_config_halts(overrides):
    with pytest.raises(ValueError):
        validate(Settings(**overrides))
