"""Environment configuration for the Task API."""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

# Only acceptable outside production; validate() refuses it there.
INSECURE_DEFAULT_SECRET = "insecure-dev-secret-change-me"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self) -> None:
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
        self.MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
        self.MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "taskapi")
        self.JWT_SECRET: str = os.getenv("JWT_SECRET", INSECURE_DEFAULT_SECRET)
        self.JWT_ALGORITHM: str = "HS256"
        self.JWT_EXPIRATION_HOURS: int = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
        self.JWT_ISSUER: str = os.getenv("JWT_ISSUER", "task-api")
        self.JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "task-api-client")
        self.FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
        self.CORS_ORIGINS: list[str] = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "").split(",")
            if origin.strip()
        ]
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "8000"))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins(self) -> list[str]:
        """CORS origins: the frontend URL plus any extra configured origins."""
        origins = [self.FRONTEND_URL, *self.CORS_ORIGINS]
        if not self.is_production:
            origins += ["http://localhost:3000", "http://localhost:5173"]
        return list(dict.fromkeys(origin for origin in origins if origin))

    def validate(self) -> None:
        """Validate that required environment variables are set."""
        if not self.MONGODB_URL:
            raise ValueError("MONGODB_URL environment variable is required")
        if self.JWT_EXPIRATION_HOURS <= 0:
            raise ValueError("JWT_EXPIRATION_HOURS must be a positive number of hours")
        if self.is_production and self.JWT_SECRET == INSECURE_DEFAULT_SECRET:
            raise ValueError("JWT_SECRET must be set in production")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    return settings


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the API process."""
    logging.basicConfig(
        level=getattr(logging, (level or get_settings().LOG_LEVEL), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
