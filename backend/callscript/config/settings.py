# /callscript/config/settings.py

from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Deployment
    environment: str = Field(default="production")
    api_version: str = "v1"
    log_level: str = "INFO"

    cors_allowed_origins: str = Field(default="http://localhost:3000")

    # Limits
    rate_limit_per_minute: int = 300
    import_rate_limit: str = "10/minute"

    # Daily auto-logout of every operator (wall-clock trigger)
    auto_logout_enabled: bool = True
    auto_logout_hour: int = 21
    auto_logout_minute: int = 0
    timezone: str = "America/Sao_Paulo"

    # Script data
    seed_sample_script: bool = True

    # Renderer defaults
    default_customer_name: str = "Cliente"
    cpf_mask: str = "***.***.***-**"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ---------------- Validators ---------------- #

    @field_validator("auto_logout_hour")
    @classmethod
    def hour_must_be_valid(cls, v):
        if not 0 <= v <= 23:
            raise ValueError("AUTO_LOGOUT_HOUR must be between 0 and 23")
        return v

    @field_validator("auto_logout_minute")
    @classmethod
    def minute_must_be_valid(cls, v):
        if not 0 <= v <= 59:
            raise ValueError("AUTO_LOGOUT_MINUTE must be between 0 and 59")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    @property
    def cors_origins(self) -> List[str]:
        """Comma-separated CORS_ALLOWED_ORIGINS as a list."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


settings = Settings()
