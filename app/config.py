"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, upload limits and story lifetimes.
"""

from pydantic import field_validator, ValidationInfo
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache
import os


DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from the environment and .env file."""

    # Application configuration
    app_name: str = "Real Estate Marketplace API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # Individual database components, used when DATABASE_URL is not set
    postgres_db: str = "real_estate"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "db"
    postgres_port: int = 5432

    database_url: str = ""

    # JWT configuration
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Password reset
    password_reset_token_expire_minutes: int = 30
    frontend_url: str = "http://localhost:5173"

    # File upload configuration
    upload_dir: str = "./uploads"
    uploads_url_prefix: str = "/uploads"
    max_file_size: int = 5 * 1024 * 1024  # 5MB per image
    max_images_per_upload: int = 10
    allowed_image_types: List[str] = ["image/jpeg", "image/png", "image/webp", "image/gif"]
    allowed_video_types: List[str] = ["video/mp4", "video/quicktime", "video/webm"]

    # Stories
    story_max_file_size: int = 50 * 1024 * 1024  # 50MB
    story_ttl_hours: int = 24
    story_max_duration_sec: int = 30
    story_feed_limit: int = 100

    # API configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:8080", "http://localhost:3000"]

    # Pagination defaults
    default_page_size: int = 20
    max_page_size: int = 100

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v, info: ValidationInfo):
        """Build database URL from components if not provided directly."""
        if not v:
            values = info.data
            user = values.get("postgres_user", "postgres")
            password = values.get("postgres_password", "postgres")
            host = values.get("postgres_host", "db")
            port = values.get("postgres_port", 5432)
            db = values.get("postgres_db", "real_estate")
            return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"

        # Ensure async driver is used
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite:///"):
            return v.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("upload_dir", mode="before")
    @classmethod
    def create_upload_directory(cls, v):
        """Ensure the upload directory exists."""
        if v and not os.path.exists(v):
            os.makedirs(v, exist_ok=True)
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing" or self.testing

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "validate_default": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
