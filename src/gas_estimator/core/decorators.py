# /src/gas_estimator/core/decorators.py
# Reusable decorators for talking to the upstream node.
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential, before_sleep_log
from web3.exceptions import ContractLogicError
from gas_estimator.core.logger import get_logger
import logging

log = get_logger(__name__)

def retriable_network_call(attempts: int = 1):
    """Retry decorator for node calls.

    A revert is deterministic for a given state, so ContractLogicError is
    raised straight away. With ``attempts=1`` the wrapped call runs once.
    """
    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_not_exception_type(ContractLogicError),
        before_sleep=before_sleep_log(log, logging.WARNING),
        reraise=True # Re-raise the last exception after retries are exhausted
    )
