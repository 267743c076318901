"""
Configuration Management

Centralized configuration using Pydantic Settings with environment variables.
Supports validation, type checking, and default values.
"""

import re
from functools import lru_cache
from typing import FrozenSet, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


AUTH_PATTERN = re.compile(r".+:.+")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===================================
    # SMTP Settings
    # ===================================
    SMTP_HOST: str = Field(default="0.0.0.0", description="IP address to bind the SMTP service to")
    SMTP_PORT: int = Field(default=1025, ge=0, le=65535, description="SMTP port to listen on")
    SMTP_HOSTNAME: Optional[str] = Field(default=None, description="Hostname announced in the SMTP banner")
    SMTP_DATA_SIZE_LIMIT: int = Field(default=33554432, ge=0, description="Maximum DATA size in bytes (0 = unlimited)")

    # ===================================
    # HTTP Settings
    # ===================================
    HTTP_HOST: str = Field(default="0.0.0.0", description="IP address to bind the HTTP service to")
    HTTP_PORT: int = Field(default=1080, ge=0, le=65535, description="HTTP port to listen on")
    STATIC_DIR: str = Field(default="build", description="Directory holding the bundled web UI")

    # ===================================
    # Capture Settings
    # ===================================
    WHITELIST: str = Field(default="", description="Only accept e-mails from these addresses (comma-separated)")
    MAX_EMAILS: int = Field(default=100, ge=1, description="Max number of e-mails to keep")
    AUTH: Optional[str] = Field(default=None, description="Enable HTTP authentication (USERNAME:PASSWORD)")
    HEADERS: bool = Field(default=False, description="Include raw headers in API responses")

    # ===================================
    # Logging Configuration
    # ===================================
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="text", description="Log format: json or text")
    LOG_FILE: Optional[str] = Field(default=None, description="Log file path")

    # ===================================
    # Monitoring
    # ===================================
    ENABLE_METRICS: bool = Field(default=True, description="Enable Prometheus metrics")

    # ===================================
    # Validators
    # ===================================

    @field_validator("AUTH")
    @classmethod
    def validate_auth(cls, v):
        """Require authentication details in USERNAME:PASSWORD format."""
        if v is None or v == "":
            return None
        if not AUTH_PATTERN.fullmatch(v):
            raise ValueError("Please provide authentication details in USERNAME:PASSWORD format")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format."""
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("Log format must be one of: ['json', 'text']")
        return v

    # ===================================
    # Computed Properties
    # ===================================

    @property
    def whitelist_addresses(self) -> FrozenSet[str]:
        """Allowed envelope senders parsed from the comma-separated list."""
        return frozenset(
            address.strip()
            for address in self.WHITELIST.split(",")
            if address.strip()
        )

    @property
    def auth_credentials(self) -> Optional[Tuple[str, str]]:
        """Get the (username, password) pair, split on the first colon."""
        if not self.AUTH:
            return None
        username, _, password = self.AUTH.partition(":")
        return username, password


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.

    Returns:
        Settings: Application settings
    """
    return Settings()
