from fastapi import Depends, Request

from imghost.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_base_url(request: Request, app_settings: Settings = Depends(get_settings)) -> str:
    return app_settings.public_base(str(request.base_url))
