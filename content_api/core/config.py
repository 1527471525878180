"""
Application configuration
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./content_blocks.db"

    # API
    API_TITLE: str = "Content Blocks Service"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "REST API for the content blocks of the CMS"

    # Query flag that lets a write through the script-tag check (?script=1)
    SCRIPT_OVERRIDE_PARAM: str = "script"

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env.local", extra="ignore")

    def log_config_summary(self):
        """Log configuration summary."""
        logger.info(f"API: {self.API_TITLE} v{self.API_VERSION}")
        logger.info(f"Database URL: {self.DATABASE_URL.split('@')[-1]}")
        logger.info(f"Script override flag: ?{self.SCRIPT_OVERRIDE_PARAM}=1")


settings = Settings()
