import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.metrics import REQUESTS_TOTAL
from api.routers import ops, planning
from study_planner.errors import ConfigurationError, InvalidDateOrdering, UnschedulableTaskError

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="study-planner")
app.include_router(planning.router)
app.include_router(ops.router)


def _error(request: Request, status_code: int, kind: str, exc: Exception) -> JSONResponse:
    REQUESTS_TOTAL.labels(endpoint=request.url.path, status=kind).inc()
    return JSONResponse(status_code=status_code, content={"error": kind, "detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    # scheduling stays blocked for this user until the settings are fixed
    logger.warning(f"Rejected {request.url.path}: invalid settings: {exc}")
    return _error(request, 400, "configuration_error", exc)


@app.exception_handler(InvalidDateOrdering)
async def invalid_date_ordering_handler(request: Request, exc: InvalidDateOrdering) -> JSONResponse:
    logger.info(f"Rejected {request.url.path}: {exc}")
    return _error(request, 422, "invalid_date_ordering", exc)


@app.exception_handler(UnschedulableTaskError)
async def unschedulable_task_handler(request: Request, exc: UnschedulableTaskError) -> JSONResponse:
    logger.info(f"Rejected {request.url.path}: {exc}")
    return _error(request, 409, "no_slot_available", exc)
