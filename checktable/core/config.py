# checktable/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path
import logging
from functools import lru_cache

from checktable import __version__

# Configure logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Application info
    PROJECT_NAME: str = "Check Table"
    API_PREFIX: str = "/api"
    VERSION: str = __version__

    # Set base directory for data and asset files
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_FILE: Optional[Path] = None
    PUBLIC_DIR: Optional[Path] = None

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    RELOAD: bool = False  # Set to True in development
    LOG_LEVEL: str = "info"

    # Requests with a larger body are refused before parsing
    MAX_BODY_BYTES: int = 1_000_000

    # Base URL used by the command line client
    API_URL: str = "http://localhost:3000"

    @property
    def data_file(self) -> Path:
        """Path of the JSON document holding the table"""
        if self.DATA_FILE:
            return Path(self.DATA_FILE)
        return self.BASE_DIR / "data" / "tableData.json"

    @property
    def public_dir(self) -> Path:
        """Root directory for static assets"""
        if self.PUBLIC_DIR:
            return Path(self.PUBLIC_DIR)
        return self.BASE_DIR / "public"

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, INFO when the name is unknown"""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        if isinstance(level, int):
            return level
        logger.warning(f"Unknown LOG_LEVEL {self.LOG_LEVEL!r}, falling back to INFO")
        return logging.INFO

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Cache the settings instance
@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
