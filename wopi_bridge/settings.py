from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class StorageSettings(BaseModel):
    backend: Literal["s3", "local"] = "s3"
    bucket: str | None = None
    bucket_env: str = "S3_BUCKET"
    region: str | None = None
    region_env: str = "AWS_REGION"
    prefix: str = ""
    # S3-compatible stores (MinIO, localstack)
    endpoint_url: str | None = None
    local_root: str = "data/objects"
    chunk_size: int = Field(64 * 1024, ge=1024)

    @property
    def bucket_name(self) -> str:
        return self.bucket or os.getenv(self.bucket_env, "")

    @property
    def region_name(self) -> str | None:
        return self.region or os.getenv(self.region_env) or None


class WopiSettings(BaseModel):
    host_url: str | None = None
    host_url_env: str = "WOPI_HOST_DOMAIN"
    editor_url: str | None = None
    editor_url_env: str = "COLLABORA_DOMAIN"
    editor_path: str = "/loleaflet/dist/loleaflet.html"
    content_type: str = XLSX_CONTENT_TYPE
    max_body_bytes: int = Field(50 * 1024 * 1024, ge=1)
    owner_id: str = "admin"
    user_id: str = "user1"

    @field_validator("editor_path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @property
    def host_base_url(self) -> str:
        return (self.host_url or os.getenv(self.host_url_env, "http://localhost:5000")).rstrip("/")

    @property
    def editor_base_url(self) -> str:
        return (self.editor_url or os.getenv(self.editor_url_env, "http://localhost:9980")).rstrip("/")


class TokenSettings(BaseModel):
    # Accepts any token containing ``marker``; for local testing only.
    stateless_enabled: bool = False
    marker: str = Field("test", min_length=1)
    ttl_seconds: float = Field(10 * 3600, gt=0)
    max_entries: int = Field(10_000, ge=1)


class CorsSettings(BaseModel):
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    allow_methods: list[str] = Field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    allow_headers: list[str] = Field(
        default_factory=lambda: ["Content-Type", "Authorization", "X-WOPI-Lock", "X-WOPI-OldLock"]
    )


class Settings(BaseModel):
    storage: StorageSettings = Field(default_factory=StorageSettings)
    wopi: WopiSettings = Field(default_factory=WopiSettings)
    tokens: TokenSettings = Field(default_factory=TokenSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                WOPI_BRIDGE_CONFIG environment variable or defaults to config/default.yaml.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ValueError: If configuration is invalid.
        """
        config_path = path or Path(os.getenv("WOPI_BRIDGE_CONFIG", "config/default.yaml"))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        try:
            return cls(**payload)
        except Exception as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "StorageSettings",
    "WopiSettings",
    "TokenSettings",
    "CorsSettings",
    "XLSX_CONTENT_TYPE",
    "get_settings",
]
