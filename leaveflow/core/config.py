import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv(".env")
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Class to store all the settings of the Leaveflow application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------
    # Database
    # ------------------------------
    DATABASE_URL: str = Field(default="sqlite:///./leaveflow.db")
    DB_POOL_SIZE: int = Field(default=10)
    DB_POOL_TIMEOUT: int = Field(default=10)
    DB_ECHO: bool = Field(default=False)

    # ------------------------------
    # Auth
    # ------------------------------
    SECRET_KEY: str = Field(default="dev-secret-key-change-me")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)
    PASSWORD_HASH_ITERATIONS: int = Field(default=1000)

    # ------------------------------
    # Leave policy
    # ------------------------------
    DEFAULT_ANNUAL_LEAVE: int = Field(default=25)
    UPCOMING_LEAVE_WINDOW_DAYS: int = Field(default=30)

    # ------------------------------
    # Environment
    # ------------------------------
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")
    PORT: int = Field(default=3000)
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:5173"])

    # ------------------------------
    # Rate limiting
    # ------------------------------
    RATE_LIMIT: str = Field(default="100/15minutes")
    RATE_LIMIT_ENABLED: bool = Field(default=True)

    # ------------------------------
    # Seeding
    # ------------------------------
    SEED_ON_STARTUP: bool = Field(default=True)
    INITIAL_ADMIN_EMAIL: Optional[str] = Field(default=None)
    INITIAL_ADMIN_PASSWORD: Optional[str] = Field(default=None)

    # ------------------------------
    # Database models
    # ------------------------------
    DB_MODELS: List[str] = [
        "leaveflow.models.user",
        "leaveflow.models.leave",
        "leaveflow.models.management",
    ]

    # ------------------------------
    # Computed Fields
    # ------------------------------
    @computed_field
    @property
    def RATE_LIMITING_ACTIVE(self) -> bool:
        """Rate limiting never runs in the test environment."""
        return self.RATE_LIMIT_ENABLED and self.ENVIRONMENT != "test"


# Instantiate the settings
settings = Settings()
