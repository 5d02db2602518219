"""
Configuration Package for the Monitor Check Engine

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Constants, enums and message templates used throughout the engine
"""

from config.settings import (
    Settings,
    MonitoringSettings,
    ProxySettings,
    LoggingSettings,
    get_settings,
)

from config.constants import (
    MonitorStatus,
    MonitorType,
    HTTPMethods,
    ErrorMessages,
    MessageTemplates,
    NotificationTags,
    Defaults,
    ErrorCodes,
)

__all__ = [
    # Settings
    "Settings",
    "MonitoringSettings",
    "ProxySettings",
    "LoggingSettings",
    "get_settings",

    # Constants
    "MonitorStatus",
    "MonitorType",
    "HTTPMethods",
    "ErrorMessages",
    "MessageTemplates",
    "NotificationTags",
    "Defaults",
    "ErrorCodes",
]
