"""
Exceptions Package for the Monitor Check Engine

Provides the exception hierarchy used for error handling
throughout the engine.
"""

from exceptions.base import (
    MonitorEngineException,
    ConfigurationError,
)

from exceptions.validation import (
    ValidationException,
    MissingFieldError,
    InvalidURLError,
)

from exceptions.monitoring import (
    MonitoringException,
    TransportError,
    ProbeTimeoutError,
    CertificateProbeError,
    NotificationDispatchError,
    SettingsLookupError,
)

__all__ = [
    # Base exceptions
    "MonitorEngineException",
    "ConfigurationError",

    # Validation exceptions
    "ValidationException",
    "MissingFieldError",
    "InvalidURLError",

    # Monitoring exceptions
    "MonitoringException",
    "TransportError",
    "ProbeTimeoutError",
    "CertificateProbeError",
    "NotificationDispatchError",
    "SettingsLookupError",
]
