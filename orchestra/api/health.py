from fastapi import APIRouter
from sqlalchemy import text

from orchestra.api.schemas import HealthzResponse, ReadinessChecks, ReadyzResponse
from orchestra.core.config import get_settings
from orchestra.db.session import session_scope

router = APIRouter()


@router.get("/healthz", response_model=HealthzResponse)
def healthz() -> HealthzResponse:
    settings = get_settings()
    return HealthzResponse(status="ok", service=settings.app_name, env=settings.app_env)


@router.get("/readyz", response_model=ReadyzResponse)
async def readyz() -> ReadyzResponse:
    _ = get_settings()
    async with session_scope() as session:
        await session.exec(text("SELECT 1"))
    return ReadyzResponse(status="ready", checks=ReadinessChecks(configuration="ok", database="ok"))
