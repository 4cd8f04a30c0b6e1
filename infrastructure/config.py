"""Service settings read from APP__* environment variables."""
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    service_name: str = "food-order-service"
    db_dsn: Optional[str] = None
    jwt_secret: str = ""
    jwt_expires_in: timedelta = timedelta(days=7)
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES


def get_settings() -> Settings:
    """Build settings from the current environment (not cached)."""
    return Settings(
        service_name=os.getenv("APP__SERVICE_NAME", "food-order-service"),
        db_dsn=os.getenv("APP__DB_DSN"),
        jwt_secret=os.getenv("APP__JWT_SECRET", ""),
        jwt_expires_in=timedelta(days=int(os.getenv("APP__JWT_EXPIRES_DAYS", "7"))),
        upload_dir=os.getenv("APP__UPLOAD_DIR", "uploads"),
        max_image_bytes=int(os.getenv("APP__MAX_IMAGE_BYTES", str(DEFAULT_MAX_IMAGE_BYTES))),
    )
