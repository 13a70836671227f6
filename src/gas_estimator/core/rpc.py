# /src/gas_estimator/core/rpc.py
# eth_estimateGas over a single pooled HTTP session.

import asyncio
from typing import Protocol

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3

from gas_estimator.core.config import Settings, settings as default_settings
from gas_estimator.core.decorators import retriable_network_call
from gas_estimator.core.errors import UpstreamFailure
from gas_estimator.core.logger import get_logger, RPC_CALLS
from gas_estimator.core.types import TransactionCallDescriptor

log = get_logger(__name__)

class GasOracle(Protocol):
    """Anything that can ask a node how much gas a call uses."""

    async def estimate(self, tx: TransactionCallDescriptor) -> int:
        ...

class Web3GasOracle:
    """
    GasOracle backed by web3.py.

    The node call is bounded by ``timeout`` seconds. Every failure, including
    a timeout or a result that is not a non-negative integer, is raised as
    UpstreamFailure. Retries are off unless ``retry_attempts`` > 1.
    """
    def __init__(self, w3, timeout: float = 10.0, retry_attempts: int = 1, session: aiohttp.ClientSession | None = None):
        self.w3 = w3
        self.timeout = timeout
        self.session = session
        self._estimate_gas = retriable_network_call(retry_attempts)(self._call_node)

    @classmethod
    async def connect(cls, settings: Settings | None = None) -> "Web3GasOracle":
        """Builds the shared connection pool and the web3 client on top of it."""
        settings = settings or default_settings
        connector = aiohttp.TCPConnector(
            limit=settings.RPC_POOL_SIZE,
            limit_per_host=settings.RPC_MAX_CONNECTIONS_PER_HOST,
            keepalive_timeout=settings.RPC_KEEPALIVE_SECONDS,
        )
        timeout = aiohttp.ClientTimeout(total=settings.RPC_TIMEOUT_SECONDS)
        session = aiohttp.ClientSession(connector=connector, timeout=timeout)

        provider = AsyncHTTPProvider(
            settings.ETH_RPC_URL,
            request_kwargs={"timeout": timeout},
            exception_retry_configuration=None,  # retries are ours to configure
        )
        await provider.cache_async_session(session)

        log.info("RPC_POOL_INITIALIZED", pool_size=settings.RPC_POOL_SIZE,
                 per_host=settings.RPC_MAX_CONNECTIONS_PER_HOST, timeout=settings.RPC_TIMEOUT_SECONDS)
        return cls.from_provider(provider, timeout=settings.RPC_TIMEOUT_SECONDS,
                                 retry_attempts=settings.RPC_RETRY_ATTEMPTS, session=session)

    @classmethod
    def from_provider(cls, provider, **kwargs) -> "Web3GasOracle":
        """
        Wraps a provider with no middleware, so each estimate is exactly one
        eth_estimateGas request (the default stack adds eth_chainId lookups).
        """
        return cls(AsyncWeb3(provider, middleware=[]), **kwargs)

    async def _call_node(self, params) -> int:
        return await asyncio.wait_for(self.w3.eth.estimate_gas(params), timeout=self.timeout)

    async def estimate(self, tx: TransactionCallDescriptor) -> int:
        params = tx.to_rpc_params()
        try:
            gas = await self._estimate_gas(params)
        except asyncio.TimeoutError as e:
            RPC_CALLS.labels("timeout").inc()
            log.error("RPC_ESTIMATE_TIMEOUT", timeout=self.timeout)
            raise UpstreamFailure(f"RPC call timed out after {self.timeout}s") from e
        except Exception as e:
            RPC_CALLS.labels("error").inc()
            log.error("RPC_ESTIMATE_FAILED", error=str(e), error_type=type(e).__name__)
            raise UpstreamFailure(f"RPC call failed: {e}") from e

        if isinstance(gas, bool) or not isinstance(gas, int) or gas < 0:
            RPC_CALLS.labels("malformed").inc()
            log.error("RPC_ESTIMATE_MALFORMED", result=repr(gas))
            raise UpstreamFailure(f"RPC call returned a malformed gas amount: {gas!r}")

        RPC_CALLS.labels("ok").inc()
        log.debug("RPC_ESTIMATE_OK", gas=gas)
        return gas

    async def close(self):
        if self.session is not None and not self.session.closed:
            await self.session.close()
            log.info("RPC_POOL_CLOSED")
