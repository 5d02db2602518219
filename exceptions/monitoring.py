"""
Monitoring Exception Classes for the Monitor Check Engine

Wrappers for the failures a probe can run into: transport errors from
the request router, TLS probe errors, and the collaborator failures
(settings lookup, notification dispatch) that are logged and swallowed.
"""

from __future__ import annotations

from typing import Any, Optional

from config.constants import ErrorCodes
from exceptions.base import MonitorEngineException


class MonitoringException(MonitorEngineException):
    """
    Base Monitoring Exception

    Parent class for everything that goes wrong while probing a target.
    """

    default_error_code = ErrorCodes.MONITORING_ERROR
    default_recoverable = True


class TransportError(MonitoringException):
    """
    Transport Error

    Raised by the request router when the network call fails. The raw
    library exception is kept as ``cause`` so the error classifier can
    inspect it.
    """

    default_error_code = ErrorCodes.TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        via_proxy: bool = False,
        **kwargs: Any
    ) -> None:
        """
        Initialize transport error.

        Args:
            message: Error message
            url: The URL being requested
            via_proxy: Whether the call went through the proxying transport
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        self.via_proxy = via_proxy
        self.details["via_proxy"] = via_proxy

        if url:
            self.details["url"] = url


class ProbeTimeoutError(TransportError):
    """
    Probe Timeout Error

    Raised when a request or handshake exceeds the monitor's
    connect timeout and is aborted.
    """

    default_error_code = ErrorCodes.PROBE_TIMEOUT

    def __init__(
        self,
        message: str = "request timeout",
        timeout: Optional[float] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if timeout is not None:
            self.details["timeout"] = timeout


class CertificateProbeError(MonitoringException):
    """
    Certificate Probe Error

    Raised when the TLS handshake or certificate retrieval fails
    (DNS, refused connection, handshake error).
    """

    default_error_code = ErrorCodes.CERTIFICATE_ERROR

    def __init__(
        self,
        message: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if host:
            self.details["host"] = host

        if port:
            self.details["port"] = port


class NotificationDispatchError(MonitoringException):
    """
    Notification Dispatch Error

    Raised (and immediately caught) when the notification collaborator
    fails. A broken alert channel never affects a check result.
    """

    default_error_code = ErrorCodes.NOTIFICATION_ERROR

    def __init__(
        self,
        message: str,
        monitor_id: Optional[str] = None,
        tag: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if monitor_id:
            self.details["monitor_id"] = monitor_id

        if tag:
            self.details["tag"] = tag


class SettingsLookupError(MonitoringException):
    """
    Settings Lookup Error

    Raised when the proxy settings cannot be read. The router treats
    this as "proxy disabled".
    """

    default_error_code = ErrorCodes.SETTINGS_LOOKUP_ERROR
