from datetime import datetime

from imghost.models.base import CamelModel


class UploadedImage(CamelModel):
    filename: str
    original_name: str
    url: str
    size: int
    mimetype: str
    uploaded_at: datetime


class UploadResponse(CamelModel):
    success: bool = True
    message: str = "Image uploaded successfully"
    file: UploadedImage


class MultiUploadResponse(CamelModel):
    success: bool = True
    message: str
    count: int
    files: list[UploadedImage]
