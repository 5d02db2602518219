"""
Settings Module for the Monitor Check Engine

Configuration management using Pydantic Settings.
Supports environment variables, .env files, and runtime configuration.
Includes validation, type checking, and sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional
from enum import Enum

from pydantic import (
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.constants import Defaults


class Environment(str, Enum):
    """Application environment enumeration."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ProxyProtocol(str, Enum):
    """Protocols the proxying transport can speak."""
    HTTP = "http"
    HTTPS = "https"
    SOCKS5 = "socks5"


class BaseSettingsConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )


class MonitoringSettings(BaseSettingsConfig):
    """
    Check Engine Configuration Settings

    Defaults applied to monitors that leave a field unset, plus the
    timing rules for certificate notifications.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_",
        env_file=".env",
        extra="ignore"
    )

    # Request defaults
    connect_timeout: int = Field(
        default=Defaults.CONNECT_TIMEOUT,
        ge=1,
        le=300,
        description="Default per-request timeout in seconds"
    )
    retry_interval: int = Field(
        default=Defaults.RETRY_INTERVAL,
        ge=0,
        le=3600,
        description="Default delay between retry attempts in seconds"
    )
    status_codes: str = Field(
        default=Defaults.STATUS_CODES,
        min_length=1,
        description="Default accepted status codes (e.g. '200-299,301')"
    )
    max_redirects: int = Field(
        default=Defaults.MAX_REDIRECTS,
        ge=0,
        le=50,
        description="Default maximum number of redirects to follow"
    )
    user_agent: str = Field(
        default=Defaults.USER_AGENT,
        description="User agent sent when the monitor sets none"
    )

    # Certificate notification rules
    cert_warning_days: int = Field(
        default=7,
        ge=0,
        le=365,
        description="Warn when a certificate expires within this many days"
    )
    cert_notify_hour: int = Field(
        default=12,
        ge=0,
        le=23,
        description="Hour of day in which certificate notifications may fire"
    )
    cert_notify_window_minutes: int = Field(
        default=5,
        ge=1,
        le=60,
        description="Minutes after cert_notify_hour during which notifications may fire"
    )
    cache_clear_hour: int = Field(
        default=0,
        ge=0,
        le=23,
        description="Hour of day at which the notification dedup cache is cleared"
    )
    cache_clear_window_minutes: int = Field(
        default=1,
        ge=1,
        le=60,
        description="Minutes after cache_clear_hour during which the clear may run"
    )
    cache_sweep_interval: int = Field(
        default=60,
        ge=1,
        le=3600,
        description="How often the cache maintenance job wakes up, in seconds"
    )
    notification_timeout: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Upper bound on a single certificate notification dispatch, in seconds"
    )


class ProxySettings(BaseSettingsConfig):
    """
    Network Proxy Settings

    Read on every request by the request router, so a change takes
    effect on the next check.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROXY_",
        env_file=".env",
        extra="ignore"
    )

    enabled: bool = Field(
        default=False,
        description="Route check requests through the proxy"
    )
    protocol: ProxyProtocol = Field(
        default=ProxyProtocol.HTTP,
        description="Proxy protocol: http, https or socks5"
    )
    server: Optional[str] = Field(
        default=None,
        description="Proxy host name or address"
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Proxy port"
    )
    username: Optional[str] = Field(
        default=None,
        description="Proxy username"
    )
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Proxy password"
    )

    @field_validator("server")
    @classmethod
    def strip_server(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank server as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    def as_mapping(self) -> Dict[str, str]:
        """
        Flatten to the string mapping a settings store would return.

        Returns:
            Mapping with proxy_enabled / proxy_server / ... keys
        """
        return {
            "proxy_enabled": "true" if self.enabled else "false",
            "proxy_protocol": self.protocol.value,
            "proxy_server": self.server or "",
            "proxy_port": str(self.port),
            "proxy_username": self.username or "",
            "proxy_password": self.password.get_secret_value(),
        }


class LoggingSettings(BaseSettingsConfig):
    """
    Logging Configuration Settings

    Console and optional rotating file output.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum logging level"
    )

    # Console logging
    console_enabled: bool = Field(
        default=True,
        description="Enable console logging"
    )
    console_colored: bool = Field(
        default=True,
        description="Enable colored console output"
    )

    # File logging
    file_enabled: bool = Field(
        default=False,
        description="Enable file logging"
    )
    file_path: Path = Field(
        default=Path("logs/check_engine.log"),
        description="Log file path"
    )
    file_rotation: str = Field(
        default="10 MB",
        description="Log rotation size (e.g., '10 MB', '1 day')"
    )
    file_retention: str = Field(
        default="30 days",
        description="Log retention period"
    )
    file_compression: str = Field(
        default="gz",
        description="Compression format for rotated logs"
    )
    json_enabled: bool = Field(
        default=False,
        description="Serialize file log records as JSON"
    )

    @field_validator("file_path")
    @classmethod
    def validate_log_path(cls, v: Path) -> Path:
        """Make sure the log file has an extension."""
        if not v.suffix:
            v = v.with_suffix(".log")
        return v


class Settings(BaseSettingsConfig):
    """
    Main Settings Class

    Aggregates all settings sections and provides the main
    configuration interface for the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Application info
    app_name: str = Field(
        default="Monitor Check Engine",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # Timezone used for the certificate notification window
    timezone: str = Field(
        default="UTC",
        description="Application timezone"
    )

    # Nested settings
    monitoring: MonitoringSettings = Field(
        default_factory=MonitoringSettings
    )
    proxy: ProxySettings = Field(
        default_factory=ProxySettings
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @model_validator(mode="after")
    def configure_for_environment(self) -> "Settings":
        """Apply environment-specific configuration."""
        if self.is_production:
            self.debug = False
        elif self.debug and self.logging.level == LogLevel.INFO:
            self.logging.level = LogLevel.DEBUG

        return self


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure a single settings instance
    is used throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
