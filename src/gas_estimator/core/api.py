# /src/gas_estimator/core/api.py
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from gas_estimator import __version__
from gas_estimator.core.config import Settings, settings as default_settings
from gas_estimator.core.config_validator import validate as validate_config
from gas_estimator.core.errors import GasEstimationError, MalformedRequest
from gas_estimator.core.gas_estimator import GasEstimator
from gas_estimator.core.logger import bind_request_context, get_logger, GAS_ESTIMATE_FAILURES
from gas_estimator.core.rpc import Web3GasOracle
from gas_estimator.core.types import EstimationResult, TransactionCallDescriptor

log = get_logger(__name__)
router = APIRouter()

def get_estimator(request: Request) -> GasEstimator:
    return request.app.state.estimator

@router.post("/api/estimate-gas", response_model=EstimationResult)
async def estimate_gas(tx: TransactionCallDescriptor, estimator: GasEstimator = Depends(get_estimator)):
    return await estimator.estimate(tx)

@router.get("/health")
async def health():
    return {"status": "healthy", "service": "gas-estimator"}

@router.get("/metrics", include_in_schema=False)
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "Invalid request body: " + ("; ".join(parts) or "could not parse")

def _error_response(exc: GasEstimationError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

async def handle_validation_error(request: Request, exc: RequestValidationError):
    error = MalformedRequest(_describe_validation_error(exc))
    GAS_ESTIMATE_FAILURES.labels("malformed").inc()
    log.warning("MALFORMED_REQUEST", error=str(error))
    return _error_response(error)

async def handle_estimation_error(request: Request, exc: GasEstimationError):
    log.error("GAS_ESTIMATION_FAILED", error=str(exc), kind=type(exc).__name__)
    return _error_response(exc)

async def handle_unexpected_error(request: Request, exc: Exception):
    log.error("UNHANDLED_ERROR", error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

def create_app(estimator: GasEstimator | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Builds the HTTP application.

    When ``estimator`` is given it is used as-is (tests pass one wired to a
    mock oracle). Otherwise the web3 oracle and its connection pool are
    created on startup from ``settings`` and closed on shutdown.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        oracle = None
        if getattr(app.state, "estimator", None) is None:
            validate_config(settings)
            oracle = await Web3GasOracle.connect(settings)
            app.state.estimator = GasEstimator(oracle)
        log.info("GAS_ESTIMATOR_API_STARTED")
        yield
        if oracle is not None:
            await oracle.close()
        log.warning("GAS_ESTIMATOR_API_SHUTDOWN_COMPLETE")

    app = FastAPI(title="Gas Estimator", version=__version__, lifespan=lifespan)
    app.state.estimator = estimator

    # Registered before CORS so CORS stays outermost and also covers 500s.
    @app.middleware("http")
    async def trace_requests(request: Request, call_next):
        bind_request_context(request_id=uuid.uuid4().hex, path=request.url.path)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await handle_unexpected_error(request, exc)
        log.info("HTTP_REQUEST", method=request.method, status=response.status_code,
                 elapsed_ms=round((time.perf_counter() - start) * 1000, 2))
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(GasEstimationError, handle_estimation_error)
    app.include_router(router)
    return app

app = create_app()
