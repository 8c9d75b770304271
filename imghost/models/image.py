from datetime import datetime

from imghost.models.base import CamelModel


class ImageRecord(CamelModel):
    filename: str
    url: str
    size: int
    uploaded_at: datetime


class DeleteResponse(CamelModel):
    success: bool = True
    message: str = "Image deleted successfully"
    filename: str
