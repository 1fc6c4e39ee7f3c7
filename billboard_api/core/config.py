"""
Application configuration module.
Loads configuration from environment variables and provides validation.
"""

import json
from functools import lru_cache
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = Field(default="Billboard Marketplace API")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database Configuration
    database_url: str = Field(default="sqlite+aiosqlite:///./billboard.db")
    database_pool_size: int = Field(default=10)
    database_max_overflow: int = Field(default=20)

    # Redis Configuration (empty disables Redis)
    redis_url: Optional[str] = Field(default="redis://localhost:6379/0")

    # Security Settings
    jwt_secret_key: str = Field(default="change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7)
    refresh_token_expire_days: int = Field(default=30)
    bcrypt_rounds: int = Field(default=12)

    # CORS Settings
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:8080"])
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    allowed_hosts: List[str] = Field(default_factory=lambda: ["*"])

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_per_minute: int = Field(default=120)

    # Uploads
    upload_dir: str = Field(default="./uploads")
    upload_url_prefix: str = Field(default="/uploads")
    max_upload_size: int = Field(default=5 * 1024 * 1024)
    allowed_image_types: List[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/png", "image/webp", "image/gif"]
    )

    # Pagination
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    # Password reset
    password_reset_code_ttl_minutes: int = Field(default=15)

    # E-mail (SMTP)
    email_host: Optional[str] = Field(default=None)
    email_port: int = Field(default=587)
    email_user: Optional[str] = Field(default=None)
    email_password: Optional[str] = Field(default=None)
    email_from_name: str = Field(default="Billboard Marketplace Support")

    # SMS (Twilio)
    twilio_account_sid: Optional[str] = Field(default=None)
    twilio_auth_token: Optional[str] = Field(default=None)
    twilio_phone_number: Optional[str] = Field(default=None)
    twilio_base_url: str = Field(default="https://api.twilio.com")

    # Bootstrap administrator (python -m billboard_api.core.create_admin)
    admin_email: str = Field(default="admin@example.com")
    admin_password: Optional[str] = Field(default=None)
    admin_first_name: str = Field(default="Admin")
    admin_last_name: str = Field(default="User")

    # Frontend
    frontend_url: str = Field(default="http://localhost:8080")

    @field_validator("cors_origins", "cors_allow_methods", "cors_allow_headers",
                     "allowed_hosts", "allowed_image_types", mode="before")
    def parse_list_fields(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse list fields from string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.environment == "test"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()


# Create a global settings instance
settings = get_settings()
