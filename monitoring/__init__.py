"""
============================================================================
MONITOR CHECK ENGINE - MONITORING PACKAGE
============================================================================
Runtime check infrastructure:
    • CheckEngine                 : entry points (check_http, check_keyword,
                                    check_https_certificate)
    • HTTPChecker / KeywordChecker / SSLChecker: single-shot checkers
    • RequestRouter               : direct vs proxied requests
    • CertificateProbe            : TLS handshake + certificate parsing
    • CertificateNotificationGate : windowed, deduplicated cert alerts
    • Scheduler                   : periodic housekeeping jobs

File layout
-----------
monitoring/
├── __init__.py          ← this file
├── models.py            ← MonitorConfig, CheckResult, CertificateState
├── status_codes.py      ← expected-status-code matching
├── errors.py            ← transport error classification
├── transport.py         ← RequestRouter + transports
├── certificates.py      ← CertificateProbe
├── notifications.py     ← CertificateNotificationGate + dedup cache
├── retry.py             ← retry envelope
├── monitor.py           ← checkers + CheckEngine
└── scheduler.py         ← Scheduler + built-in periodic jobs
============================================================================
"""

from monitoring.models import CheckResult, MonitorConfig, CertificateState, RequestOptions
from monitoring.status_codes import check_status_code
from monitoring.errors import get_network_error_message
from monitoring.transport import (
    RequestRouter,
    DirectTransport,
    ProxyTransport,
    EnvProxySettingsProvider,
    RoutedResponse,
)
from monitoring.certificates import CertificateProbe
from monitoring.notifications import (
    CertificateNotificationGate,
    LoggingNotificationDispatcher,
    NotificationDedupCache,
    NotificationOutcome,
)
from monitoring.retry import with_retry
from monitoring.monitor import CheckEngine, HTTPChecker, KeywordChecker, SSLChecker
from monitoring.scheduler import Scheduler, ScheduledJob

__all__ = [
    # Models
    "CheckResult",
    "MonitorConfig",
    "CertificateState",
    "RequestOptions",

    # Rules
    "check_status_code",
    "get_network_error_message",

    # Transport
    "RequestRouter",
    "DirectTransport",
    "ProxyTransport",
    "EnvProxySettingsProvider",
    "RoutedResponse",

    # Certificates & notifications
    "CertificateProbe",
    "CertificateNotificationGate",
    "LoggingNotificationDispatcher",
    "NotificationDedupCache",
    "NotificationOutcome",

    # Checkers
    "with_retry",
    "CheckEngine",
    "HTTPChecker",
    "KeywordChecker",
    "SSLChecker",

    # Scheduler
    "Scheduler",
    "ScheduledJob",
]
