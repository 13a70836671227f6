# /src/gas_estimator/adapters/mock.py
# - Deterministic stand-in for the upstream node.
# - Lets the engine and the HTTP layer be tested without network I/O.

from typing import List

from gas_estimator.core.errors import UpstreamFailure
from gas_estimator.core.logger import get_logger
from gas_estimator.core.types import TransactionCallDescriptor

log = get_logger(__name__)

class MockGasOracle:
    """
    A mock GasOracle for testing purposes.
    Returns a fixed gas amount and records every descriptor it was asked about.
    """
    def __init__(self, gas: int = 21000):
        self.gas = gas
        self.calls: List[TransactionCallDescriptor] = []
        self._must_fail = False
        log.info("MOCK_GAS_ORACLE_INITIALIZED", gas=gas)

    def set_next_call_to_fail(self, fail: bool = True):
        """Configure the mock to raise UpstreamFailure on the next call."""
        self._must_fail = fail

    async def estimate(self, tx: TransactionCallDescriptor) -> int:
        self.calls.append(tx)
        if self._must_fail:
            self._must_fail = False # Reset after firing
            log.error("MOCK_ORACLE_FORCED_FAILURE", params=tx.to_rpc_params())
            raise UpstreamFailure("RPC call failed: forced failure for testing")
        log.info("MOCK_ORACLE_ESTIMATE", gas=self.gas)
        return self.gas
