import sys
import time
from contextlib import asynccontextmanager
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from loguru import logger

from imghost.config import Settings, settings
from imghost.handlers import install_error_handlers
from imghost.routes.health import router as health_router
from imghost.routes.images import router as images_router
from imghost.routes.upload import router as upload_router


def _configure_logging(app_settings: Settings) -> None:
    logger.configure(patcher=lambda record: record["extra"].setdefault("request_id", "-"))
    logger.remove()
    logger.add(
        sys.stderr,
        level=app_settings.log_level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | req={extra[request_id]} | {name}:{function}:{line} | {message}",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_settings: Settings = app.state.settings
    _configure_logging(app_settings)
    upload_path = app_settings.upload_path
    logger.bind(request_id="-").info(
        "Starting app app_name={} debug={} log_level={} upload_path={} max_file_size={}",
        app_settings.app_name,
        app_settings.debug,
        app_settings.log_level,
        str(upload_path.resolve()),
        app_settings.max_file_size,
    )
    yield
    logger.bind(request_id="-").info("Shutting down app app_name={}", app_settings.app_name)


async def add_request_context(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid4()))
    bound_logger = logger.bind(request_id=request_id)
    start = time.perf_counter()
    bound_logger.info("Request start method={} path={}", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        bound_logger.exception("Request failed method={} path={}", request.method, request.url.path)
        raise
    duration_ms = (time.perf_counter() - start) * 1000
    bound_logger.info(
        "Request finish method={} path={} status={} duration_ms={:.2f}",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    response.headers["X-Request-ID"] = request_id
    return response


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    origins = app_settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(add_request_context)
    install_error_handlers(app)

    app.include_router(health_router)
    app.include_router(upload_router)
    app.include_router(images_router)

    # directory is created in lifespan
    app.mount("/uploads", StaticFiles(directory=app_settings.upload_dir, check_dir=False), name="uploads")
    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "imghost.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
