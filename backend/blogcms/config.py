"""
Application configuration using pydantic-settings.
Loads environment variables from the .env file.
"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # Database
    database_path: str = "./data/blog.db"

    # Authentication
    jwt_secret: str
    jwt_expiration_hours: int = 24

    # Bootstrap admin (created at startup when both are set)
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_name: str = "Administrator"

    # HTTP rate limiting
    rate_limit_enabled: bool = True
    login_rate_limit: int = 5

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    # Posts
    excerpt_sentences: int = 2

    # Logging
    log_level: str = "INFO"
    log_file: str = "./data/app.log"

    # Security
    cors_origins: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def __init__(self, **kwargs):
        """Validate JWT_SECRET in __init__"""
        super().__init__(**kwargs)

        # JWT_SECRET must be >= 32 characters
        if len(self.jwt_secret) < 32:
            raise ValueError(
                f"JWT_SECRET must be at least 32 characters long. "
                f"Current length: {len(self.jwt_secret)}"
            )


# Global settings instance
settings = Settings()
