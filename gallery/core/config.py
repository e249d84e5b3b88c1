# gallery/core/config.py
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SESSION_SECRET = "your-secret-key-change-this"


class Settings(BaseSettings):
    # In-memory SQLite by default: records are lost on restart
    database_url: str = "sqlite://"

    session_secret: str = DEFAULT_SESSION_SECRET
    session_cookie_name: str = "gallery_session"
    session_ttl_seconds: int = 24 * 60 * 60
    session_cookie_secure: bool = False

    # Seed admin account, created on startup when both are set
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # "local" or "s3"; picked from the bucket setting when empty
    storage_backend: Optional[str] = None
    upload_dir: str = "uploads"
    public_dir: str = "public"
    max_upload_size_bytes: int = 5 * 1024 * 1024

    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    aws_s3_bucket_name: Optional[str] = None
    aws_s3_prefix: str = "gallery_uploads"
    download_url_expires_seconds: int = 300

    keepalive_enabled: bool = False
    keepalive_url: Optional[str] = None
    keepalive_interval_seconds: float = 14 * 60

    # Tell pydantic-settings to load from .env at project root
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore any extra stuff in .env
    )

    @property
    def resolved_storage_backend(self) -> str:
        if self.storage_backend:
            return self.storage_backend.lower()
        return "s3" if self.aws_s3_bucket_name else "local"

    @property
    def resolved_keepalive_url(self) -> str:
        return self.keepalive_url or f"http://localhost:{self.port}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
