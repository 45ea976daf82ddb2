"""Configuration management using pydantic-settings."""

import logging
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Current-generation OneSignal REST API keys carry this prefix
CURRENT_KEY_PREFIX = "os_v2_"


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class OneSignalSettings(BaseSettings):
    """OneSignal provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ONESIGNAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_id: Optional[str] = Field(default=None, description="OneSignal app identifier")
    api_key: Optional[str] = Field(
        default=None,
        description="OneSignal REST API key (current-generation os_v2_ format)",
    )
    api_url: str = Field(
        default="https://api.onesignal.com",
        description="OneSignal REST API base URL",
    )
    legacy_api_url: str = Field(
        default="https://onesignal.com/api/v1",
        description="Legacy OneSignal API base URL (connectivity diagnostics only)",
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    @field_validator("app_id", "api_key", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat blank credentials as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @property
    def is_configured(self) -> bool:
        """Check if both credentials are present."""
        return bool(self.app_id and self.api_key)

    @property
    def is_current_key_format(self) -> bool:
        """Check if the API key uses the current-generation format."""
        return bool(self.api_key and self.api_key.startswith(CURRENT_KEY_PREFIX))


class ServerSettings(BaseSettings):
    """Server configuration."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False, extra="ignore")

    host: str = Field(default="0.0.0.0", description="Server host", alias="HOST")
    port: int = Field(default=3001, description="HTTP server port", alias="PORT")
    reload: bool = Field(
        default=False, description="Enable auto-reload (development only)"
    )


class CorsSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CORS_", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Store as strings to avoid JSON parsing issues
    origins_str: str = Field(
        default="*",
        alias="CORS_ORIGINS",
        description="Allowed CORS origins (comma-separated string)",
    )
    allow_credentials: bool = Field(
        default=False, description="Allow credentials in CORS"
    )
    allow_methods_str: str = Field(
        default="GET,POST,DELETE,OPTIONS,PATCH",
        alias="CORS_ALLOW_METHODS",
        description="Allowed HTTP methods (comma-separated string)",
    )
    allow_headers_str: str = Field(
        default="*",
        alias="CORS_ALLOW_HEADERS",
        description="Allowed HTTP headers (comma-separated string)",
    )
    max_age: int = Field(
        default=3600, description="CORS preflight cache max age in seconds"
    )

    @property
    def origins(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.origins_str.split(",") if origin.strip()]

    @property
    def allow_methods(self) -> List[str]:
        """Get allowed HTTP methods as a list."""
        return [
            method.strip() for method in self.allow_methods_str.split(",") if method.strip()
        ]

    @property
    def allow_headers(self) -> List[str]:
        """Get allowed HTTP headers as a list."""
        return [
            header.strip() for header in self.allow_headers_str.split(",") if header.strip()
        ]


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application settings
    app_name: str = Field(
        default="onesignal-gateway", description="Application name", alias="APP_NAME"
    )
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
        alias="ENVIRONMENT",
    )
    debug: bool = Field(default=False, description="Enable debug mode", alias="DEBUG")
    log_level: str = Field(
        default="INFO", description="Logging level", alias="LOG_LEVEL"
    )

    # Sub-settings
    onesignal: OneSignalSettings = Field(default_factory=OneSignalSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v):
        """Parse environment from string."""
        if isinstance(v, str):
            try:
                return Environment(v.lower())
            except ValueError:
                return Environment.DEVELOPMENT
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    def validate_production_settings(self) -> None:
        """Validate that production settings are safe."""
        if self.is_production and self.debug:
            raise ValueError("DEBUG must be False in production")


# Global settings instance (process entry point only; the app factory takes explicit settings)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
        try:
            _settings.validate_production_settings()
        except ValueError as e:
            logging.error(f"Configuration validation failed: {e}")
            if _settings.is_production:
                raise  # Fail fast in production
    return _settings
