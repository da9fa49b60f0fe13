"""
Configuration management for the Activity Logs platform.
Uses Pydantic Settings for type-safe configuration with environment variable support.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # DATABASE CONFIGURATION (SQLite)
    # ==========================================================================
    # Activities and users live in separate stores
    database_url: str = "sqlite:////tmp/activity_logs.db"
    auth_database_url: str = "sqlite:////tmp/activity_logs_auth.db"

    def get_database_url(self) -> str:
        """Get activities database URL."""
        return self.database_url

    def get_auth_database_url(self) -> str:
        """Get auth/user database URL."""
        return self.auth_database_url

    # ==========================================================================
    # ACTIVITY LOG CONFIGURATION
    # ==========================================================================
    editable_weeks_back: int = 2  # Current week plus this many previous weeks
    activity_list_limit: int = 100
    users_page_size: int = 25
    report_title: str = "W-2 FSET Activity Logs"

    # ==========================================================================
    # LOGGING CONFIGURATION
    # ==========================================================================
    log_level: str = "INFO"
    log_file: str = "logs/app.log"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ==========================================================================
    # APPLICATION CONFIGURATION
    # ==========================================================================
    app_env: str = "development"
    debug: bool = False

    # Model configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create settings singleton instance.

    Returns:
        Settings: Application settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """
    Force reload settings from environment.
    Useful for testing.

    Returns:
        Settings: Fresh settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
