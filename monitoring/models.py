"""
Value objects passed into and out of the check engine.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from config.constants import Defaults, MonitorStatus


# ============================================================================
# MONITOR CONFIG
# ============================================================================

# camelCase keys used by the monitor records of the surrounding application
_FIELD_ALIASES = {
    "httpMethod": "http_method",
    "statusCodes": "status_codes",
    "maxRedirects": "max_redirects",
    "requestBody": "request_body",
    "requestHeaders": "request_headers",
    "connectTimeout": "connect_timeout",
    "retryInterval": "retry_interval",
    "notifyCertExpiry": "notify_cert_expiry",
    "monitorId": "monitor_id",
    "monitorName": "monitor_name",
}


@dataclass(frozen=True)
class MonitorConfig:
    """
    One monitor's configuration, as handed to a checker.

    Fields are not cross-validated here; an empty URL or keyword is
    reported by the checker at check time.
    """
    url: str = ""
    http_method: str = Defaults.HTTP_METHOD
    status_codes: str = Defaults.STATUS_CODES
    max_redirects: int = Defaults.MAX_REDIRECTS
    request_body: str = ""
    request_headers: str = ""
    connect_timeout: float = Defaults.CONNECT_TIMEOUT
    retries: int = Defaults.RETRIES
    retry_interval: float = Defaults.RETRY_INTERVAL
    keyword: str = ""
    notify_cert_expiry: bool = False
    monitor_id: str = ""
    monitor_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MonitorConfig":
        """
        Build from a monitor record, accepting snake_case or camelCase keys.
        Unknown keys and ``None`` values are ignored.
        """
        known = cls.__dataclass_fields__
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        if "monitor_id" in kwargs:
            kwargs["monitor_id"] = str(kwargs["monitor_id"])
        return cls(**kwargs)

    def with_overrides(self, **changes: Any) -> "MonitorConfig":
        """Copy with some fields replaced."""
        return replace(self, **changes)


# ============================================================================
# CHECK RESULT
# ============================================================================

@dataclass(frozen=True)
class CheckResult:
    """
    Outcome of one check: UP/DOWN, a human-readable message and the
    elapsed time in milliseconds.
    """
    status: MonitorStatus
    message: str
    ping: int = 0

    @property
    def is_up(self) -> bool:
        return self.status == MonitorStatus.UP

    @classmethod
    def up(cls, message: str, ping: int = 0) -> "CheckResult":
        return cls(MonitorStatus.UP, message, ping)

    @classmethod
    def down(cls, message: str, ping: int = 0) -> "CheckResult":
        return cls(MonitorStatus.DOWN, message, ping)

    def with_message(self, message: str) -> "CheckResult":
        return replace(self, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": int(self.status),
            "message": self.message,
            "ping": self.ping,
        }


# ============================================================================
# CERTIFICATE STATE
# ============================================================================

@dataclass(frozen=True)
class CertificateState:
    """
    What a TLS probe learned about a certificate.

    ``days_remaining`` is -1 when the expiry date is unknown.
    """
    valid: bool
    days_remaining: int = Defaults.DAYS_REMAINING_UNKNOWN
    issuer: Optional[str] = None
    subject: Optional[str] = None
    error: Optional[str] = None

    @property
    def days_known(self) -> bool:
        return self.days_remaining != Defaults.DAYS_REMAINING_UNKNOWN


# ============================================================================
# REQUEST OPTIONS
# ============================================================================

@dataclass(frozen=True)
class RequestOptions:
    """
    Everything the request router needs to send one request.
    """
    method: str = Defaults.HTTP_METHOD
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    follow_redirects: bool = True
    max_redirects: int = Defaults.MAX_REDIRECTS
    timeout: float = Defaults.CONNECT_TIMEOUT
