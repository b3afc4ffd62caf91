"""
Garbler Service Configuration
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ===== Service =====
    SERVICE_NAME: str = Field(default="garbler-service")
    SERVICE_VERSION: str = Field(default="0.1.0")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    LOG_LEVEL: str = Field(default="info")
    DEBUG: bool = Field(default=False)

    # ===== CORS =====
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"]
    )

    # ===== Statistics Library =====
    CASE_SENSITIVE: bool = Field(default=False)
    DEFAULT_DELIMITERS: str = Field(default=",.;:!?\"'()")

    # ===== Cruncher =====
    CLOSE_CHARACTER_PREFERENCE: float = Field(default=0.5, ge=0.0, le=1.0)
    SAME_CHARACTER_WEIGHT_ADJUST: float = Field(default=0.85, ge=0.0)
    EOW_FACTOR_THRESHOLD: float = Field(default=1.0, ge=0.0, le=1.0)
    ENDING_LENGTH: int = Field(default=2, ge=1)
    PRIMARY_CACHE_SIZE: int = Field(default=32, ge=0)
    SECONDARY_CACHE_SIZE: int = Field(default=32, ge=0)

    # ===== Generation Defaults =====
    DEFAULT_MAX_LENGTH: int = Field(default=10, ge=0)
    DEFAULT_TRIM_THRESHOLD: float = Field(default=0.1, gt=0.0)

    # >>> pydantic v2 settings config <<<
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
