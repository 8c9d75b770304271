from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from imghost.config import Settings
from imghost.dependencies import get_settings
from imghost.models.service import HealthResponse, ServiceInfo

router = APIRouter(tags=["health"])

ENDPOINTS = [
    "/api/health",
    "/api/upload",
    "/api/upload-multiple",
    "/api/images",
    "/api/image/{filename}",
    "/uploads/{filename}",
]


@router.get("/api/health", response_model=HealthResponse)
async def health(app_settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        message=f"{app_settings.app_name} is running",
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/", response_model=ServiceInfo)
async def service_info(app_settings: Settings = Depends(get_settings)) -> ServiceInfo:
    return ServiceInfo(service=app_settings.app_name, version=app_settings.app_version, endpoints=ENDPOINTS)
