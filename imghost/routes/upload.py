from fastapi import APIRouter, Depends, File, UploadFile
from loguru import logger

from imghost.config import Settings
from imghost.dependencies import get_base_url, get_settings
from imghost.errors import ValidationError
from imghost.models.upload import MultiUploadResponse, UploadResponse
from imghost.services.storage import save_upload, save_uploads

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload", status_code=201, response_model=UploadResponse)
async def upload_image(
    image: UploadFile | None = File(None),
    app_settings: Settings = Depends(get_settings),
    base_url: str = Depends(get_base_url),
) -> UploadResponse:
    if image is None:
        raise ValidationError("No file uploaded")
    logger.info("Upload request filename={} content_type={}", image.filename, image.content_type)

    saved = await save_upload(image, app_settings, base_url)
    logger.info(
        "Upload stored filename={} original_name={} content_type={} size_bytes={}",
        saved.filename,
        saved.original_name,
        saved.mimetype,
        saved.size,
    )
    return UploadResponse(file=saved)


@router.post("/upload-multiple", status_code=201, response_model=MultiUploadResponse)
async def upload_images(
    images: list[UploadFile] | None = File(None),
    bracketed_images: list[UploadFile] | None = File(None, alias="images[]"),
    app_settings: Settings = Depends(get_settings),
    base_url: str = Depends(get_base_url),
) -> MultiUploadResponse:
    files = [*(images or []), *(bracketed_images or [])]
    logger.info("Batch upload request file_count={}", len(files))

    saved = await save_uploads(files, app_settings, base_url)
    logger.info("Batch upload stored file_count={} filenames={}", len(saved), [item.filename for item in saved])
    return MultiUploadResponse(
        message=f"{len(saved)} image(s) uploaded successfully",
        count=len(saved),
        files=saved,
    )
