import pytest

from gas_estimator.adapters.mock import MockGasOracle
from gas_estimator.core.errors import UpstreamFailure
from gas_estimator.core.gas_estimator import (
    BASE_TX_GAS,
    BLOB_TX_TYPE,
    CODE_DEPOSIT_GAS_PER_BYTE,
    CONTRACT_CREATION_GAS,
    NONZERO_BYTE_GAS,
    ZERO_BYTE_GAS,
    GasEstimator,
    Route,
    classify,
    static_gas,
)
from gas_estimator.core.types import TransactionCallDescriptor

SENDER = "0xc0ffee254729296a45a3885639ac7e10f9d54979"
RECIPIENT = "0x999999cf1046e68e36e1aa2e0e07105eddd1f08e"

def simple_transfer():
    return TransactionCallDescriptor(sender=SENDER, recipient=RECIPIENT, value=1)

def test_static_gas_simple_transfer():
    assert static_gas(simple_transfer()) == 21000

def test_static_gas_contract_creation():
    tx = TransactionCallDescriptor(recipient=None)
    assert static_gas(tx) == BASE_TX_GAS + CONTRACT_CREATION_GAS == 53000

def test_static_gas_with_data():
    tx = TransactionCallDescriptor(recipient=RECIPIENT, data=bytes([0x01, 0x00, 0x02]))
    assert static_gas(tx) == BASE_TX_GAS + NONZERO_BYTE_GAS * 2 + ZERO_BYTE_GAS == 21036

def test_static_gas_contract_creation_charges_code_deposit():
    tx = TransactionCallDescriptor(data=bytes([0x00, 0xff]))
    expected = BASE_TX_GAS + CONTRACT_CREATION_GAS + ZERO_BYTE_GAS + NONZERO_BYTE_GAS + 2 * CODE_DEPOSIT_GAS_PER_BYTE
    assert static_gas(tx) == expected

def test_static_gas_counts_every_byte():
    tx = TransactionCallDescriptor(recipient=RECIPIENT, data=bytes(10) + bytes([0x80]))
    assert static_gas(tx) == BASE_TX_GAS + 10 * ZERO_BYTE_GAS + NONZERO_BYTE_GAS

def test_static_gas_is_deterministic():
    tx = TransactionCallDescriptor(recipient=RECIPIENT, data=bytes([0x00, 0x01]))
    assert len({static_gas(tx) for _ in range(5)}) == 1

def test_needs_simulation_with_data():
    tx = TransactionCallDescriptor(data=bytes([0x01]))
    assert classify(tx) is Route.SIMULATE

def test_needs_simulation_with_data_and_zero_value():
    tx = TransactionCallDescriptor(recipient=RECIPIENT, data=bytes([0x01]), value=0)
    assert classify(tx) is Route.SIMULATE

def test_needs_simulation_with_value_and_empty_data():
    tx = TransactionCallDescriptor(recipient=RECIPIENT, data=b"", value=1)
    assert classify(tx) is Route.SIMULATE

def test_empty_data_without_value_is_static():
    tx = TransactionCallDescriptor(recipient=RECIPIENT, data=b"", value=0)
    assert classify(tx) is Route.STATIC

def test_blob_transaction_always_simulated():
    tx = TransactionCallDescriptor(recipient=RECIPIENT, transaction_type=BLOB_TX_TYPE)
    assert classify(tx) is Route.SIMULATE

@pytest.mark.parametrize("value", [None, 0, 1, 10**18])
def test_absent_data_is_static(value):
    tx = TransactionCallDescriptor(recipient=RECIPIENT, value=value)
    assert classify(tx) is Route.STATIC

@pytest.mark.asyncio
async def test_estimate_gas_static():
    oracle = MockGasOracle(gas=99999)
    estimator = GasEstimator(oracle)

    result = await estimator.estimate(simple_transfer())
    assert result.gas_limit == BASE_TX_GAS
    assert result.method == "static"
    assert oracle.calls == []

@pytest.mark.asyncio
async def test_estimate_gas_rpc():
    oracle = MockGasOracle(gas=21000)
    estimator = GasEstimator(oracle)
    tx = TransactionCallDescriptor(data=bytes([0x01]))

    result = await estimator.estimate(tx)
    assert result.gas_limit == 21000
    assert result.method == "rpc"
    assert oracle.calls == [tx]

@pytest.mark.asyncio
async def test_estimate_gas_blob_transaction():
    estimator = GasEstimator(MockGasOracle(gas=150000))
    tx = TransactionCallDescriptor(transaction_type=BLOB_TX_TYPE)

    result = await estimator.estimate(tx)
    assert result.method == "rpc"
    assert result.gas_limit == 150000

@pytest.mark.asyncio
async def test_upstream_failure_produces_no_result():
    oracle = MockGasOracle()
    oracle.set_next_call_to_fail()
    estimator = GasEstimator(oracle)

    with pytest.raises(UpstreamFailure):
        await estimator.estimate(TransactionCallDescriptor(data=bytes([0x01])))

@pytest.mark.asyncio
async def test_unexpected_oracle_error_is_wrapped():
    class BrokenOracle:
        async def estimate(self, tx):
            raise ConnectionResetError("peer went away")

    estimator = GasEstimator(BrokenOracle())
    with pytest.raises(UpstreamFailure, match="peer went away"):
        await estimator.estimate(TransactionCallDescriptor(data=bytes([0x01])))

@pytest.mark.asyncio
async def test_estimate_is_idempotent():
    estimator = GasEstimator(MockGasOracle(gas=45000))
    tx = TransactionCallDescriptor(recipient=RECIPIENT, data=bytes([0xa9, 0x05]))

    first = await estimator.estimate(tx)
    second = await estimator.estimate(tx)
    assert first == second
