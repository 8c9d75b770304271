from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str
    timestamp: datetime


class ServiceInfo(BaseModel):
    service: str
    version: str
    endpoints: list[str]


class ErrorResponse(BaseModel):
    error: str
