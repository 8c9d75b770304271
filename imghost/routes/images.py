from fastapi import APIRouter, Depends
from loguru import logger

from imghost.config import Settings
from imghost.dependencies import get_base_url, get_settings
from imghost.models.image import DeleteResponse, ImageRecord
from imghost.services.storage import delete_image, get_image, list_images

router = APIRouter(prefix="/api", tags=["images"])


@router.get("/images", response_model=list[ImageRecord])
def list_all(
    app_settings: Settings = Depends(get_settings),
    base_url: str = Depends(get_base_url),
) -> list[ImageRecord]:
    return list_images(app_settings, base_url)


@router.get("/image/{filename}", response_model=ImageRecord)
def get_one(
    filename: str,
    app_settings: Settings = Depends(get_settings),
    base_url: str = Depends(get_base_url),
) -> ImageRecord:
    return get_image(filename, app_settings, base_url)


@router.delete("/image/{filename}", response_model=DeleteResponse)
def delete_one(filename: str, app_settings: Settings = Depends(get_settings)) -> DeleteResponse:
    delete_image(filename, app_settings)
    logger.info("Image deleted filename={}", filename)
    return DeleteResponse(filename=filename)
