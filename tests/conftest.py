from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional

import httpx
import pytest

from config.settings import MonitoringSettings, Settings
from exceptions.monitoring import CertificateProbeError
from monitoring.models import CertificateState
from monitoring.notifications import CertificateNotificationGate, NotificationDedupCache
from monitoring.transport import DirectTransport, ProxyTransport, RequestRouter


PROXY_ON = {
    "proxy_enabled": "true",
    "proxy_protocol": "http",
    "proxy_server": "proxy.internal",
    "proxy_port": "3128",
    "proxy_username": "",
    "proxy_password": "",
}
PROXY_OFF = {"proxy_enabled": "false"}


class StaticProxySettings:
    def __init__(self, values: Mapping[str, str] = PROXY_OFF) -> None:
        self.values = dict(values)
        self.calls = 0

    async def get_proxy_settings(self) -> Mapping[str, str]:
        self.calls += 1
        return self.values


class FailingProxySettings:
    async def get_proxy_settings(self) -> Mapping[str, str]:
        raise RuntimeError("settings store unavailable")


class RecordingDispatcher:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[tuple] = []

    async def __call__(self, monitor_id, status, message, previous_status) -> None:
        self.calls.append((monitor_id, status, message, previous_status))
        if self.fail:
            raise ConnectionError("notification service down")


class FakeProbe:
    """Returns a canned CertificateState (or raises) instead of dialing out."""

    def __init__(self, state: Optional[CertificateState] = None, error: Optional[BaseException] = None) -> None:
        self.state = state
        self.error = error
        self.calls: List[tuple] = []

    async def probe(self, host: str, port: int = 443, timeout: float = 10, now=None) -> CertificateState:
        self.calls.append((host, port, timeout))
        if self.error is not None:
            raise CertificateProbeError(str(self.error), host=host, port=port, cause=self.error)
        return self.state


class RequestLog:
    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []

    def __len__(self) -> int:
        return len(self.requests)


def make_router(
    handler: Callable[[httpx.Request], httpx.Response],
    proxy_values: Mapping[str, str] = PROXY_OFF,
    log: Optional[RequestLog] = None,
) -> RequestRouter:
    """RequestRouter whose direct and proxied paths both hit *handler*."""

    def recording(request: httpx.Request) -> httpx.Response:
        if log is not None:
            log.requests.append(request)
        return handler(request)

    mock = httpx.MockTransport(recording)
    return RequestRouter(
        settings_provider=StaticProxySettings(proxy_values),
        direct=DirectTransport(transport=mock),
        proxy_factory=lambda url: ProxyTransport(url, transport=mock),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def monitoring_settings() -> MonitoringSettings:
    return MonitoringSettings()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def gate(dispatcher: RecordingDispatcher, monitoring_settings: MonitoringSettings) -> CertificateNotificationGate:
    noon = datetime(2024, 5, 1, 12, 1, tzinfo=timezone.utc)
    return CertificateNotificationGate(
        dispatcher,
        cache=NotificationDedupCache(),
        settings=monitoring_settings,
        clock=lambda: noon,
    )


@pytest.fixture
def request_log() -> RequestLog:
    return RequestLog()


@pytest.fixture
def no_sleep() -> Callable[[float], Any]:
    delays: List[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    _sleep.delays = delays  # type: ignore[attr-defined]
    return _sleep


def cert_state(days: int, valid: bool = True) -> CertificateState:
    return CertificateState(valid=valid, days_remaining=days, issuer="Test CA", subject="example.com")

