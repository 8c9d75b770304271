import mimetypes
import os
import random
import re
import stat as stat_mode
import time
from datetime import datetime, timezone
from pathlib import Path

from fastapi import UploadFile
from loguru import logger

from imghost.config import Settings
from imghost.errors import FileTooLargeError, NotFoundError, StorageError, ValidationError
from imghost.models.image import ImageRecord
from imghost.models.upload import UploadedImage

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
FILENAME_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")
MAX_NAME_ATTEMPTS = 5


def image_url(base_url: str, filename: str) -> str:
    return f"{base_url.rstrip('/')}/uploads/{filename}"


def extension_for(content_type: str | None) -> str | None:
    content_type = (content_type or "").lower()
    return MIME_EXTENSIONS.get(content_type) or mimetypes.guess_extension(content_type)


def image_extensions(allowed: list[str]) -> set[str]:
    """Extensions stored images may carry: the defaults plus one per allowed MIME type."""
    extensions = set(IMAGE_EXTENSIONS)
    for content_type in allowed:
        extension = extension_for(content_type)
        if extension:
            extensions.add(extension)
    return extensions


def generate_filename(
    original_name: str | None,
    content_type: str | None,
    now_ms: int | None = None,
    extensions: set[str] = IMAGE_EXTENSIONS,
) -> str:
    """Build ``<epoch-millis>-<random>.<ext>`` for a new upload.

    The original extension is kept (lowercased) when it is one of
    ``extensions``, otherwise the extension of the declared MIME type is used.
    """
    suffix = Path(original_name or "").suffix.lower()
    if suffix not in extensions:
        suffix = extension_for(content_type)
        if suffix is None:
            raise ValidationError(f"No file extension known for type {content_type or 'unknown'!r}")
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{now_ms}-{random.randint(0, 999_999_999)}{suffix}"


def validate_image_type(upload: UploadFile, allowed: list[str]) -> None:
    content_type = (upload.content_type or "").lower()
    if content_type not in allowed:
        raise ValidationError(
            f"Invalid file type {content_type or 'unknown'!r}. Allowed types: {', '.join(allowed)}"
        )
    if extension_for(content_type) is None:
        raise ValidationError(f"No file extension known for type {content_type!r}")


async def read_limited(upload: UploadFile, max_size: int) -> bytes:
    data = await upload.read(max_size + 1)
    if len(data) > max_size:
        raise FileTooLargeError(f"File too large. Maximum size is {max_size} bytes")
    return data


async def _prepare(upload: UploadFile, app_settings: Settings) -> bytes:
    try:
        validate_image_type(upload, app_settings.allowed_mime_types)
        return await read_limited(upload, app_settings.max_file_size)
    except ValidationError as exc:
        logger.warning(
            "Upload rejected filename={} content_type={} error={}",
            upload.filename,
            upload.content_type,
            exc.message,
        )
        raise


def _write_new_file(
    directory: Path,
    data: bytes,
    original_name: str | None,
    content_type: str | None,
    extensions: set[str] = IMAGE_EXTENSIONS,
) -> Path:
    for _ in range(MAX_NAME_ATTEMPTS):
        destination = directory / generate_filename(original_name, content_type, None, extensions)
        try:
            handle = destination.open("xb")
        except FileExistsError:
            logger.warning("Generated filename already taken destination={}", str(destination))
            continue
        except OSError as exc:
            logger.error("Could not create file destination={} error={}", str(destination), str(exc))
            raise StorageError("Could not store the uploaded file") from exc
        try:
            with handle:
                handle.write(data)
        except OSError as exc:
            logger.error("Could not write file destination={} error={}", str(destination), str(exc))
            destination.unlink(missing_ok=True)
            raise StorageError("Could not store the uploaded file") from exc
        return destination
    raise StorageError("Could not allocate a unique filename")


def _store(upload: UploadFile, data: bytes, app_settings: Settings, base_url: str) -> UploadedImage:
    try:
        directory = app_settings.upload_path
    except OSError as exc:
        raise StorageError("Upload directory is not available") from exc
    destination = _write_new_file(
        directory,
        data,
        upload.filename,
        upload.content_type,
        image_extensions(app_settings.allowed_mime_types),
    )
    logger.debug(
        "File saved filename={} destination={} size_bytes={}",
        destination.name,
        str(destination),
        len(data),
    )
    return UploadedImage(
        filename=destination.name,
        original_name=upload.filename or destination.name,
        url=image_url(base_url, destination.name),
        size=len(data),
        mimetype=(upload.content_type or "").lower(),
        uploaded_at=datetime.now(timezone.utc),
    )


async def save_upload(upload: UploadFile, app_settings: Settings, base_url: str) -> UploadedImage:
    data = await _prepare(upload, app_settings)
    return _store(upload, data, app_settings, base_url)


async def save_uploads(uploads: list[UploadFile], app_settings: Settings, base_url: str) -> list[UploadedImage]:
    """Store a batch of uploads.

    Every file is validated and read before the first one is written, so a
    rejected batch leaves the storage directory untouched.
    """
    if not uploads:
        raise ValidationError("No files uploaded")
    if len(uploads) > app_settings.max_files:
        raise ValidationError(f"Too many files. Maximum is {app_settings.max_files} per request")

    prepared = [(upload, await _prepare(upload, app_settings)) for upload in uploads]
    return [_store(upload, data, app_settings, base_url) for upload, data in prepared]


def _uploaded_at(file_stat: os.stat_result) -> datetime:
    timestamp = getattr(file_stat, "st_birthtime", None) or file_stat.st_ctime
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def _record(filename: str, file_stat: os.stat_result, base_url: str) -> ImageRecord:
    return ImageRecord(
        filename=filename,
        url=image_url(base_url, filename),
        size=file_stat.st_size,
        uploaded_at=_uploaded_at(file_stat),
    )


def list_images(app_settings: Settings, base_url: str) -> list[ImageRecord]:
    extensions = image_extensions(app_settings.allowed_mime_types)
    try:
        with os.scandir(app_settings.upload_path) as entries:
            candidates = [
                entry
                for entry in entries
                if not entry.name.startswith(".") and Path(entry.name).suffix.lower() in extensions
            ]
    except OSError as exc:
        logger.error("Could not read upload directory upload_dir={} error={}", app_settings.upload_dir, str(exc))
        raise StorageError("Could not read images") from exc

    records: list[ImageRecord] = []
    for entry in candidates:
        try:
            if not entry.is_file():
                continue
            file_stat = entry.stat()
        except FileNotFoundError:
            # removed between scan and stat
            continue
        except OSError as exc:
            logger.error("Could not stat image filename={} error={}", entry.name, str(exc))
            raise StorageError("Could not read images") from exc
        records.append(_record(entry.name, file_stat, base_url))

    records.sort(key=lambda record: (record.uploaded_at, record.filename), reverse=True)
    logger.debug("Images listed count={}", len(records))
    return records


def resolve_image_path(filename: str, app_settings: Settings) -> Path:
    """Map a client-supplied name to a file directly inside the upload directory."""
    if (
        Path(filename).name != filename
        or not FILENAME_PATTERN.fullmatch(filename)
        or Path(filename).suffix.lower() not in image_extensions(app_settings.allowed_mime_types)
    ):
        logger.warning("Invalid image filename filename={!r}", filename)
        raise ValidationError("Invalid filename")
    return app_settings.upload_path / filename


def _stat_image(path: Path, filename: str) -> os.stat_result:
    try:
        file_stat = path.stat()
    except FileNotFoundError as exc:
        raise NotFoundError(f"Image not found: {filename}") from exc
    except OSError as exc:
        logger.error("Could not stat image filename={} error={}", filename, str(exc))
        raise StorageError("Could not read image") from exc
    if not stat_mode.S_ISREG(file_stat.st_mode):
        raise NotFoundError(f"Image not found: {filename}")
    return file_stat


def get_image(filename: str, app_settings: Settings, base_url: str) -> ImageRecord:
    path = resolve_image_path(filename, app_settings)
    return _record(filename, _stat_image(path, filename), base_url)


def delete_image(filename: str, app_settings: Settings) -> None:
    path = resolve_image_path(filename, app_settings)
    try:
        _stat_image(path, filename)
        path.unlink()
    except NotFoundError:
        logger.warning("Delete of missing image filename={}", filename)
        raise
    except FileNotFoundError as exc:
        logger.warning("Delete of missing image filename={}", filename)
        raise NotFoundError(f"Image not found: {filename}") from exc
    except OSError as exc:
        logger.error("Could not delete image filename={} error={}", filename, str(exc))
        raise StorageError("Could not delete image") from exc
    logger.debug("Image deleted filename={} path={}", filename, str(path))
