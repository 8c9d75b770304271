import json
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_MIME_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Image Upload API"
    app_version: str = "1.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=5000, ge=1, le=65535)
    upload_dir: str = "uploads"
    max_file_size: int = Field(default=10 * 1024 * 1024, gt=0)
    max_files: int = Field(default=10, ge=1, le=20)
    allowed_mime_types: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_MIME_TYPES))
    cors_origin: str = "*"
    public_base_url: str | None = None
    production_domain: str | None = None

    @field_validator("allowed_mime_types", mode="before")
    @classmethod
    def _split_mime_types(cls, value):
        if isinstance(value, str):
            value = value.strip()
            value = json.loads(value) if value.startswith("[") else value.split(",")
        return [str(item).strip().lower() for item in value if str(item).strip()]

    @property
    def upload_path(self) -> Path:
        path = Path(self.upload_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    def public_base(self, request_base: str) -> str:
        """Base URL that stored image URLs are built on."""
        if self.public_base_url:
            return self.public_base_url.rstrip("/")
        if self.production_domain:
            return f"https://{self.production_domain.strip('/')}"
        return request_base.rstrip("/")


settings = Settings()
