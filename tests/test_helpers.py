from __future__ import annotations

from datetime import timezone

import pytest

from config.constants import MonitorStatus
from exceptions.validation import InvalidURLError, MissingFieldError
from monitoring.models import CheckResult, MonitorConfig
from utils.helpers import TimeHelper, extract_host_port, parse_request_headers, split_keywords, truncate
from utils.validators import MonitorConfigValidator, URLValidator


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------

def test_parse_request_headers() -> None:
    assert parse_request_headers('{"X-A": "1", "X-N": 2}') == {"X-A": "1", "X-N": "2"}
    assert parse_request_headers({"X-A": 1}) == {"X-A": "1"}
    assert parse_request_headers("") == {}


@pytest.mark.parametrize("raw", ["{broken", "[1, 2]", '"text"'])
def test_unusable_headers_are_dropped(raw: str) -> None:
    assert parse_request_headers(raw) == {}


def test_split_keywords() -> None:
    assert split_keywords(" foo, bar ,,baz ") == ["foo", "bar", "baz"]
    assert split_keywords(" , ") == []
    assert split_keywords(None) == []


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://example.com", ("example.com", 443)),
        ("https://example.com:8443/health?x=1", ("example.com", 8443)),
        ("https://[::1]:9443/", ("::1", 9443)),
    ],
)
def test_extract_host_port(url: str, expected) -> None:
    assert extract_host_port(url) == expected


def test_extract_host_port_requires_host() -> None:
    with pytest.raises(ValueError):
        extract_host_port("https://")


def test_truncate() -> None:
    assert truncate("short", 10) == "short"
    assert truncate("x" * 20, 10) == "xxxxxxx..."


def test_unknown_timezone_falls_back_to_utc() -> None:
    assert TimeHelper.now_in("Not/AZone").tzinfo == timezone.utc
    assert TimeHelper.now_in("Europe/Amsterdam").utcoffset() is not None


# ---------------------------------------------------------------------------
# validators
# ---------------------------------------------------------------------------

def test_require_url() -> None:
    with pytest.raises(MissingFieldError) as excinfo:
        MonitorConfigValidator.require_url("")
    assert excinfo.value.message == "URL empty"
    assert MonitorConfigValidator.require_url("https://a.b") == "https://a.b"


def test_require_keywords() -> None:
    assert MonitorConfigValidator.require_keywords("a,b") == ["a", "b"]
    with pytest.raises(MissingFieldError) as excinfo:
        MonitorConfigValidator.require_keywords(" ")
    assert excinfo.value.message == "keyword empty"


@pytest.mark.parametrize("url", ["http://example.com", "HTTPS://example.com", "ftp://example.com"])
def test_require_https_is_exact_prefix(url: str) -> None:
    with pytest.raises(InvalidURLError) as excinfo:
        MonitorConfigValidator.require_https(url)
    assert excinfo.value.message == "HTTPS only (URL must start with https://)"


def test_is_https() -> None:
    assert URLValidator.is_https("https://example.com")
    assert not URLValidator.is_https("Https://example.com")


# ---------------------------------------------------------------------------
# models
# ---------------------------------------------------------------------------

def test_monitor_config_defaults() -> None:
    config = MonitorConfig()
    assert config.http_method == "GET"
    assert config.status_codes == "200-299"
    assert config.max_redirects == 10
    assert config.connect_timeout == 10
    assert config.retries == 0
    assert config.retry_interval == 60
    assert config.notify_cert_expiry is False


def test_monitor_config_from_record() -> None:
    config = MonitorConfig.from_dict(
        {
            "url": "https://example.com",
            "httpMethod": "POST",
            "statusCodes": "200,201",
            "connectTimeout": 5,
            "notifyCertExpiry": True,
            "monitorId": 42,
            "retries": None,
            "unknown": "ignored",
        }
    )
    assert config.http_method == "POST"
    assert config.status_codes == "200,201"
    assert config.connect_timeout == 5
    assert config.notify_cert_expiry is True
    assert config.monitor_id == "42"
    assert config.retries == 0
    assert config.with_overrides(retries=2).retries == 2


def test_check_result_to_dict() -> None:
    result = CheckResult.up("status: 200", 17)
    assert result.is_up
    assert result.to_dict() == {"status": 1, "message": "status: 200", "ping": 17}
    assert CheckResult.down("x").status == MonitorStatus.DOWN
