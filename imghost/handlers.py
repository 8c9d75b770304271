from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from imghost.errors import ImageHostError
from imghost.models.service import ErrorResponse


def status_for(exc: Exception) -> int:
    if isinstance(exc, ImageHostError):
        return exc.status_code
    if isinstance(exc, StarletteHTTPException):
        return exc.status_code
    if isinstance(exc, RequestValidationError):
        return 400
    return 500


def error_response(exc: Exception, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


async def handle_image_host_error(request: Request, exc: ImageHostError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Request error method={} path={} status={} error={}",
        request.method,
        request.url.path,
        status_code,
        exc.message,
    )
    return error_response(exc, exc.message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc, str(exc.detail), headers=getattr(exc, "headers", None))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    else:
        message = "Invalid request"
    logger.warning("Request validation failed path={} errors={}", request.url.path, errors)
    return error_response(exc, message)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error method={} path={}", request.method, request.url.path)
    return error_response(exc, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ImageHostError, handle_image_host_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
