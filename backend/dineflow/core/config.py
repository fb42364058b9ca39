"""Application configuration using pydantic-settings.

All environment variables are read through the settings object rather
than os.getenv() so that types are validated once at startup.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./data/dineflow.db"

    # Security
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # one service shift

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Rate limiting
    rate_limit_enabled: bool = True

    # Calendar-day comparisons (today's sales, daily/monthly reports)
    timezone: str = "Asia/Kolkata"

    # Billing
    currency_symbol: str = "Rs."
    tax_rates: List[int] = [5, 12, 18]
    default_tax_rate: int = 5

    # Read cache
    cache_ttl_seconds: int = 300

    # Image storage
    upload_dir: str = "./data/uploads"
    public_base_url: str = "http://localhost:8000"
    max_upload_size_mb: int = 5

    # Federated sign-in (Firebase service account JSON)
    firebase_credentials_path: Optional[str] = None
    firebase_project_id: Optional[str] = None

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if v == "change-me-in-production" or len(v) < 32:
            import warnings
            warnings.warn(
                "SECRET_KEY should be set to a random value of at least 32 characters.",
                UserWarning,
                stacklevel=2,
            )
        return v

    @field_validator("tax_rates")
    @classmethod
    def validate_tax_rates(cls, v: List[int]) -> List[int]:
        if not v:
            raise ValueError("tax_rates must contain at least one rate")
        for rate in v:
            if rate < 0 or rate > 100:
                raise ValueError(f"tax rate must be between 0 and 100, got {rate}")
        return sorted(set(v))

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Refuse insecure settings outside debug mode."""
        if self.default_tax_rate not in self.tax_rates:
            raise ValueError(
                f"default_tax_rate {self.default_tax_rate} is not one of {self.tax_rates}"
            )

        if not self.debug:
            if self.secret_key == "change-me-in-production":
                raise ValueError(
                    "FATAL: Cannot start in production mode with default SECRET_KEY."
                )
            if len(self.secret_key) < 32:
                raise ValueError(
                    f"FATAL: SECRET_KEY must be at least 32 characters in production mode "
                    f"(current length: {len(self.secret_key)})."
                )
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
