"""
Environment configuration for the outpass workflow.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Set

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @staticmethod
    def get_secret_key_default() -> str:
        """Generate a default secret key if not provided"""
        import secrets
        import string
        alphabet = string.ascii_letters + string.digits
        return ''.join(secrets.choice(alphabet) for _ in range(32))

    # Application configuration
    APP_NAME: str = Field(default="Hostel Outpass", alias="PROJECT_NAME")
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Database configuration
    DATABASE_URL: str = "sqlite:///./outpass.db"
    DATABASE_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_POOL_OVERFLOW: int = 10

    # Security configuration
    JWT_SECRET_KEY: str = Field(default_factory=lambda: Settings.get_secret_key_default())
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    PASSWORD_BCRYPT_ROUNDS: int = 12

    # File storage
    UPLOAD_DIR: str = "uploads"
    MAX_IMAGE_SIZE: int = 1_000_000  # 1MB
    ALLOWED_IMAGE_EXTENSIONS: Set[str] = Field(default={"jpg", "jpeg", "png", "gif"})

    # Workflow rules
    MAX_OUTINGS_PER_MONTH: int = 4
    MAX_LEAVES_PER_SEMESTER: int = 10
    ADMIN_ROLES: List[str] = Field(
        default=["caretaker", "chiefwarden", "warden", "adsw", "dsw"]
    )
    ACADEMIC_YEARS: List[str] = Field(default=["E1", "E2", "E3", "E4"])
    ADMIN_MANAGEMENT_MIN_ROLE: str = "warden"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    @field_validator('ALLOWED_IMAGE_EXTENSIONS')
    @classmethod
    def normalize_extensions(cls, v: Set[str]) -> Set[str]:
        """Lower-case extensions without the leading dot; env values are JSON arrays"""
        return {ext.lstrip('.').lower() for ext in v}

    @field_validator('ADMIN_ROLES', 'ACADEMIC_YEARS')
    @classmethod
    def strip_ordered_list(cls, v: List[str]) -> List[str]:
        """Ordered list, lowest first; env values are JSON arrays"""
        return [item.strip() for item in v if item.strip()]

    @field_validator('MAX_OUTINGS_PER_MONTH', 'MAX_LEAVES_PER_SEMESTER')
    @classmethod
    def validate_quota(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Quota maximum cannot be negative")
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"

    def get_upload_path(self) -> Path:
        return Path(self.UPLOAD_DIR)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
