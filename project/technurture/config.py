# technurture/config.py

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage
    MONGODB_URI: Optional[str] = None
    MONGODB_DB: str = "technurture"
    DATABASE_URL: Optional[str] = None
    STORAGE_STRICT: bool = False

    # Secrets (generated per process when empty)
    JWT_SECRET: Optional[str] = None
    JWT_ACCESS_EXPIRES_MINUTES: int = 15
    JWT_REFRESH_EXPIRES_DAYS: int = 7
    SESSION_SECRET: Optional[str] = None
    SESSION_COOKIE_NAME: str = "technurture.sid"
    SESSION_MAX_AGE: int = 24 * 60 * 60
    ENCRYPTION_KEY: Optional[str] = None

    # Media hosting
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "technurture"

    # Development admin of the in-memory backend
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin123"
    SEED_ADMIN: bool = True

    # Login rate limiting
    LOGIN_WINDOW_MINUTES: int = 15
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_SWEEP_SECONDS: int = 300

    # Request limits
    MAX_BODY_BYTES: int = 100 * 1024 * 1024
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024

    ALLOWED_ORIGINS: str = "*"
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    LOG_DIR: str = "log"
    LOG_PRINT: str = "1"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


settings = Settings()
