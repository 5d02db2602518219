"""
Constants Module for the Monitor Check Engine

Contains all constant values, enumerations, message templates, and
static configuration used throughout the application.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Final, FrozenSet


class MonitorStatus(IntEnum):
    """
    Monitor Status Enumeration

    Binary outcome of a check. The numeric values match what the
    persistence layer stores (0 = down, 1 = up).
    """

    DOWN = 0
    UP = 1


class MonitorType(str, Enum):
    """
    Monitor Type Enumeration

    The three kinds of probe the engine knows how to run.
    """

    HTTP = "http"
    KEYWORD = "keyword"
    HTTPS_CERT = "https-cert"

    @classmethod
    def choices(cls) -> list:
        """Values accepted on the command line."""
        return [member.value for member in cls]


class HTTPMethods(str, Enum):
    """HTTP Methods for check requests."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"

    @classmethod
    def accepts_body(cls, method: str) -> bool:
        """Only POST, PUT and PATCH requests carry a request body."""
        return method.upper() in BODY_METHODS


BODY_METHODS: Final[FrozenSet[str]] = frozenset({"POST", "PUT", "PATCH"})


class ErrorMessages:
    """
    Canonical error messages

    Every DOWN result carries one of these (or a template built on them),
    so identical failures always produce identical text.
    """

    URL_EMPTY: Final[str] = "URL empty"
    KEYWORD_EMPTY: Final[str] = "keyword empty"
    HTTPS_ONLY: Final[str] = "HTTPS only (URL must start with https://)"

    CONNECTION_REFUSED: Final[str] = "connection refused"
    TIMEOUT: Final[str] = "connection timed out"
    HOST_NOT_FOUND: Final[str] = "host not found"
    NETWORK_ERROR: Final[str] = "network error"

    KEYWORD_NOT_FOUND: Final[str] = "keyword not found"
    CERTIFICATE_INVALID: Final[str] = "certificate invalid"


class MessageTemplates:
    """
    Message Templates for check results and notifications.
    """

    STATUS_OK: Final[str] = "status: {code}"
    STATUS_UNEXPECTED: Final[str] = "unexpected status: {code}"

    KEYWORD_FOUND: Final[str] = "keyword found{match_info}, status: {code}{proxy_info}"
    KEYWORD_MATCH_INFO: Final[str] = " (matched: {keyword})"
    KEYWORD_CHECKED_INFO: Final[str] = " (checked {count} keywords)"
    VIA_PROXY: Final[str] = " (via proxy)"
    PROXY_FAILED: Final[str] = "proxy connection failed: {error}"

    CERT_VALID: Final[str] = "certificate valid"
    CERT_DAYS_REMAINING: Final[str] = " ({days} days remaining)"
    CERT_EXPIRY_WARNING: Final[str] = "certificate expires in {days} days, renew soon"
    CERT_CHECK_FAILED: Final[str] = "certificate check failed: {error}"

    RETRY_SUCCEEDED: Final[str] = "retry succeeded ({attempt}/{retries}): {message}"
    RETRY_EXHAUSTED: Final[str] = "failed after {retries} retries: {message}"

    CERT_EXPIRED_ALERT: Final[str] = (
        "[CRITICAL] SSL certificate for {name} has expired! Renew it immediately."
    )
    CERT_EXPIRING_ALERT: Final[str] = (
        "[CERTIFICATE REMINDER] SSL certificate for {name} expires in "
        "{days} days, please renew it."
    )


class NotificationTags:
    """Dedup tags for certificate notifications."""

    EXPIRED: Final[str] = "expired"
    EXPIRING_PREFIX: Final[str] = "expiring-"

    @classmethod
    def expiring(cls, days_remaining: int) -> str:
        """Tag for a certificate that expires in *days_remaining* days."""
        return f"{cls.EXPIRING_PREFIX}{days_remaining}"


class Defaults:
    """
    Default Values

    Applied to monitor configurations that leave a field unset.
    """

    HTTP_METHOD: Final[str] = HTTPMethods.GET.value
    STATUS_CODES: Final[str] = "200-299"
    MAX_REDIRECTS: Final[int] = 10
    CONNECT_TIMEOUT: Final[int] = 10
    RETRIES: Final[int] = 0
    RETRY_INTERVAL: Final[int] = 60
    HTTPS_PORT: Final[int] = 443
    DAYS_REMAINING_UNKNOWN: Final[int] = -1
    USER_AGENT: Final[str] = "MonitorCheckEngine/1.0 (Monitoring Service)"


class ErrorCodes:
    """Application error codes."""

    # General errors (1xxx)
    UNKNOWN_ERROR: Final[int] = 1000
    CONFIGURATION_ERROR: Final[int] = 1100

    # Validation errors (3xxx)
    VALIDATION_ERROR: Final[int] = 3000
    INVALID_URL: Final[int] = 3001
    MISSING_FIELD: Final[int] = 3002

    # Monitoring errors (5xxx)
    MONITORING_ERROR: Final[int] = 5000
    TRANSPORT_ERROR: Final[int] = 5001
    PROBE_TIMEOUT: Final[int] = 5002
    CERTIFICATE_ERROR: Final[int] = 5003
    NOTIFICATION_ERROR: Final[int] = 5004
    SETTINGS_LOOKUP_ERROR: Final[int] = 5005
