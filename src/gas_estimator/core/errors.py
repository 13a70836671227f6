# /src/gas_estimator/core/errors.py

class GasEstimationError(Exception):
    """Base class for failures the HTTP layer knows how to report."""

    status_code = 500

class MalformedRequest(GasEstimationError):
    """The request body could not be turned into a transaction descriptor."""

    status_code = 400

class UpstreamFailure(GasEstimationError):
    """The node errored, timed out or answered with something unusable."""

    status_code = 500
