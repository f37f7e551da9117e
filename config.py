"""
Application Configuration

Settings are read from environment variables (a local .env file is loaded
first). Handlers receive the settings through `Depends(get_settings)` so tests
can swap them without touching the process environment.
"""

import logging
import sys
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    # ── Service ──────────────────────────────────────────────
    app_name: str = Field("Food Ordering API", description="API title")
    app_version: str = "1.0.0"
    debug: bool = Field(False, description="Verbose logging and error details")
    port: int = 8000

    # ── MongoDB ──────────────────────────────────────────────
    database_url: Optional[str] = Field(None, description="MongoDB connection string")
    database_name: Optional[str] = Field(None, description="MongoDB database name")

    # ── JWT ──────────────────────────────────────────────────
    jwt_secret: Optional[str] = Field(None, description="Token signing secret")
    jwt_algorithm: str = "HS256"
    jwt_expires_in: str = Field("7d", description="Token lifetime, e.g. 7d, 12h, 30m")

    # ── Business ─────────────────────────────────────────────
    admin_secret_code: str = Field("123456", description="Code required to register an admin")
    client_url: Optional[str] = Field(None, description="Allowed CORS origin")
    seed_database: bool = Field(False, description="Seed the menu when the catalog is empty")

    @property
    def cors_origins(self) -> List[str]:
        if self.client_url:
            return [self.client_url]
        return ["*"]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Debug mode lowers the level to DEBUG regardless of the argument.
    """
    settings = get_settings()
    if settings.debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    return logging.getLogger("app")
