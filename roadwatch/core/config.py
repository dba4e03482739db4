"""
RoadWatch Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
import re
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "RoadWatch Incident Backend"
    VERSION: str = "1.0.0"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite:///roadwatch_local.db"
    DATABASE_ECHO: bool = False
    DATABASE_POOL_RECYCLE: int = 3600

    # ==================== Reports ====================
    REPORT_LOCALE: str = "en"  # en | ar
    ANALYSIS_TIME_MS: int = 3000  # nominal latency reported with every smart report

    # Optional fixed recipients added to every automatic report dispatch
    NAJM_REPORT_EMAIL: Optional[str] = None
    INSURANCE_REPORT_EMAIL: Optional[str] = None

    # ==================== Vision / Decision Model ====================
    VISION_API_URL: str = "https://api.openai.com/v1/chat/completions"
    VISION_API_KEY: str = ""
    VISION_MODEL: str = "gpt-4o-mini"
    VISION_TIMEOUT_SECONDS: float = 30.0

    # ==================== Logging ====================
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",  # Allow extra environment variables
    )

    # ==================== Validators ====================
    @field_validator("NAJM_REPORT_EMAIL", "INSURANCE_REPORT_EMAIL")
    @classmethod
    def validate_report_email(cls, v):
        if not v:
            return None
        if not EMAIL_PATTERN.match(v):
            raise ValueError(f"invalid report recipient email: {v!r}")
        return v

    # ==================== Properties ====================
    @property
    def vision_configured(self) -> bool:
        """Check if the vision collaborator has credentials"""
        return bool(self.VISION_API_URL and self.VISION_API_KEY)

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.lower().startswith("sqlite")


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
