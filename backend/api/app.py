"""FastAPI application entrypoint."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.api.routes import control_plans
from backend.api.routes import dashboard
from backend.api.routes import gauges
from backend.api.routes import parts
from backend.api.routes import samples
from backend.core import logger
from backend.core.errors import (
    InvalidInput,
    InvalidState,
    NoActiveControlPlan,
    NotFound,
    QualityError,
    UnknownParameter,
)

ERROR_STATUS_CODES: dict[type[QualityError], int] = {
    InvalidInput: 422,
    UnknownParameter: 422,
    InvalidState: 409,
    NoActiveControlPlan: 409,
    NotFound: 404,
}

app = FastAPI(title="Metrology QMS API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(parts.router, prefix="/parts", tags=["parts"])
app.include_router(gauges.router, prefix="/gauges", tags=["gauges"])
app.include_router(control_plans.router, prefix="/control-plans", tags=["control-plans"])
app.include_router(samples.router, prefix="/samples", tags=["samples"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])


def status_code_for(exc: QualityError) -> int:
    # PartNotFound resolves through NotFound.
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 400


@app.exception_handler(QualityError)
async def quality_error_handler(request: Request, exc: QualityError) -> JSONResponse:
    """Report engine errors as ``{"error": ..., "detail": ...}``."""
    status_code = status_code_for(exc)
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": exc.message},
    )


@app.get("/health", tags=["health"])
def healthcheck() -> dict[str, str]:
    """Simple health endpoint for uptime probes."""
    return {"status": "ok"}
