# /src/gas_estimator/core/gas_estimator.py
# Routes each transaction to the static formula or to the node's eth_estimateGas.

from enum import Enum

from gas_estimator.core.errors import UpstreamFailure
from gas_estimator.core.logger import get_logger, GAS_ESTIMATES, GAS_ESTIMATE_FAILURES
from gas_estimator.core.rpc import GasOracle
from gas_estimator.core.types import EstimationMethod, EstimationResult, TransactionCallDescriptor

log = get_logger(__name__)

# Gas constants based on Ethereum Yellow Paper and EIPs
BASE_TX_GAS = 21000
CONTRACT_CREATION_GAS = 32000
ZERO_BYTE_GAS = 4
NONZERO_BYTE_GAS = 16  # EIP-2028
CODE_DEPOSIT_GAS_PER_BYTE = 200

# EIP-4844: Shard Blob Transactions
BLOB_TX_TYPE = 0x03

class Route(Enum):
    STATIC = "static"
    SIMULATE = "simulate"

def is_blob_transaction(tx: TransactionCallDescriptor) -> bool:
    return tx.transaction_type == BLOB_TX_TYPE

def needs_simulation(tx: TransactionCallDescriptor) -> bool:
    """True when the call data hints at contract execution."""
    if tx.data is None:
        return False
    # Function or constructor call
    if len(tx.data) > 0:
        return True
    # Value plus an explicit (empty) data field may hit receive/fallback.
    # Value with no data field at all stays static, so a payable fallback on
    # the recipient is not accounted for.
    return bool(tx.value)

def classify(tx: TransactionCallDescriptor) -> Route:
    if is_blob_transaction(tx) or needs_simulation(tx):
        return Route.SIMULATE
    return Route.STATIC

def static_gas(tx: TransactionCallDescriptor) -> int:
    """Intrinsic gas of a transaction that executes no contract code."""
    gas = BASE_TX_GAS

    if tx.recipient is None:
        gas += CONTRACT_CREATION_GAS

    if tx.data is not None:
        for byte in tx.data:
            if byte == 0:
                gas += ZERO_BYTE_GAS
            else:
                gas += NONZERO_BYTE_GAS

        if tx.recipient is None:
            gas += len(tx.data) * CODE_DEPOSIT_GAS_PER_BYTE

    return gas

class GasEstimator:
    """
    Stateless apart from the oracle handle, which is shared by every request.
    """
    def __init__(self, oracle: GasOracle):
        self.oracle = oracle
        log.info("GAS_ESTIMATOR_INITIALIZED", oracle=type(oracle).__name__)

    async def estimate(self, tx: TransactionCallDescriptor) -> EstimationResult:
        route = classify(tx)

        if route is Route.STATIC:
            result = EstimationResult(gas_limit=static_gas(tx), method=EstimationMethod.STATIC)
        else:
            try:
                gas_limit = await self.oracle.estimate(tx)
            except UpstreamFailure:
                GAS_ESTIMATE_FAILURES.labels("upstream").inc()
                raise
            except Exception as e:
                GAS_ESTIMATE_FAILURES.labels("upstream").inc()
                log.error("GAS_ORACLE_UNEXPECTED_ERROR", error=str(e), exc_info=True)
                raise UpstreamFailure(f"RPC call failed: {e}") from e
            result = EstimationResult(gas_limit=gas_limit, method=EstimationMethod.RPC)

        GAS_ESTIMATES.labels(result.method.value).inc()
        log.info("GAS_ESTIMATED", method=result.method.value, gas_limit=result.gas_limit,
                 blob=is_blob_transaction(tx), contract_creation=tx.is_contract_creation)
        return result
