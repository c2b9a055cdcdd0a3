import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm.exc import StaleDataError

from dms_api.api.api_v1.router import api_router
from dms_api.core.capabilities import CapabilityRegistry
from dms_api.core.config import settings
from dms_api.core.config_validation import check_configuration
from dms_api.core.logging import configure_logging
from dms_api.db.init_db import init_db
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.common import ErrorPayload

log = structlog.get_logger(__name__)


app = FastAPI(
    title=settings.app_name,
    default_response_class=ORJSONResponse,
    openapi_url=f"{settings.api_v1_str}/openapi.json",
)
app.include_router(api_router, prefix=settings.api_v1_str)


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError) -> ORJSONResponse:
    log.warning("concurrent_modification", path=request.url.path, error=str(exc))
    return ORJSONResponse(
        status_code=409,
        content={
            "detail": ErrorPayload(
                code="concurrent_modification",
                message="The record was modified by another request",
                hint="Reload the record and retry",
            ).model_dump()
        },
    )


@app.on_event("startup")
async def startup_event() -> None:
    configure_logging()
    check_configuration(settings)
    await init_db()


@app.get("/health")
async def health(capabilities: CapabilityRegistry = Depends(get_capabilities)) -> dict:
    return {
        "status": "ok",
        "capabilities": sorted(kind.value for kind in capabilities.available()),
    }


@app.get("/")
async def root() -> dict:
    return {"service": settings.app_name, "api": settings.api_v1_str}


def run() -> None:
    import uvicorn

    uvicorn.run("dms_api.main:app", host="0.0.0.0", port=8000, reload=True)
