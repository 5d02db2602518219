"""
============================================================================
MONITOR CHECK ENGINE - CHECKERS
============================================================================
The single-shot checkers and the engine facade that wires them together.

Architecture
------------
CheckEngine                  ← facade used by the caller / CLI
├── check_http()             ← retry envelope around HTTPChecker
│   └── HTTPChecker          ← status-code check, optional cert pre-check
├── check_keyword()          ← retry envelope around KeywordChecker
│   └── KeywordChecker       ← status-code check + keyword search in body
└── check_https_certificate()
    └── SSLChecker           ← TLS certificate validity & expiry
        └── CertificateNotificationGate (background task)

Every checker times the whole operation, returns a CheckResult and never
raises. Configuration problems (empty URL, empty keyword, non-HTTPS URL
for a certificate check) are reported as DOWN with ping 0.
============================================================================
"""

import asyncio
from typing import Optional, Tuple

from config.constants import ErrorMessages, MessageTemplates, MonitorStatus, MonitorType
from config.settings import Settings, get_settings
from exceptions.monitoring import CertificateProbeError, TransportError
from exceptions.validation import ValidationException
from monitoring.certificates import CertificateProbe
from monitoring.errors import get_network_error_message
from monitoring.models import CheckResult, MonitorConfig, RequestOptions
from monitoring.notifications import (
    CertificateNotificationGate,
    NotificationDispatcher,
)
from monitoring.retry import Sleeper, with_retry
from monitoring.scheduler import Scheduler
from monitoring.status_codes import check_status_code
from monitoring.transport import RequestRouter, build_request_options
from utils.helpers import TimeHelper, extract_host_port, parse_request_headers
from utils.logger import MonitorLogger, get_logger
from utils.validators import MonitorConfigValidator, URLValidator


logger = get_logger("CheckEngine")
monitor_logger = MonitorLogger()


def _request_options(config: MonitorConfig, settings: Settings) -> RequestOptions:
    return build_request_options(
        method=config.http_method,
        headers=parse_request_headers(config.request_headers),
        body=config.request_body,
        max_redirects=config.max_redirects,
        timeout=config.connect_timeout,
        user_agent=settings.monitoring.user_agent,
    )


# ============================================================================
# SSL CERTIFICATE CHECKER
# ============================================================================

class SSLChecker:
    """
    Connects to an HTTPS endpoint and judges its TLS certificate.

    Reports
    -------
    • UP when the certificate is trusted and in its validity period
    • Days remaining until expiry
    • A renewal warning once ``cert_warning_days`` or fewer remain

    When the monitor has an id and a name, the result is also handed to
    the certificate notification gate, which runs in the background.
    """

    def __init__(
        self,
        probe: CertificateProbe,
        gate: CertificateNotificationGate,
        settings: Settings,
    ):
        self.probe = probe
        self.gate = gate
        self.settings = settings

    async def check(self, config: MonitorConfig) -> CheckResult:
        result, _ = await self.check_with_warning(config)
        return result

    async def check_with_warning(
        self, config: MonitorConfig
    ) -> Tuple[CheckResult, Optional[str]]:
        """
        Run the check and also return the expiry warning, if one was
        raised. The HTTP checker uses the warning to annotate its result.
        """
        try:
            MonitorConfigValidator.require_url(config.url)
            MonitorConfigValidator.require_https(config.url)
        except ValidationException as e:
            return CheckResult.down(e.message), None

        start = TimeHelper.monotonic()
        try:
            result, warning = await self._check(config, start)
        except Exception as e:
            logger.exception(f"[SSL] {config.url} unexpected error: {e}")
            result, warning = (
                CheckResult.down(get_network_error_message(e), TimeHelper.elapsed_ms(start)),
                None,
            )

        monitor_logger.log_check("SSL", config.url, result.status, result.message, result.ping)
        return result, warning

    async def _check(
        self, config: MonitorConfig, start: float
    ) -> Tuple[CheckResult, Optional[str]]:
        host, port = extract_host_port(config.url)

        try:
            state = await self.probe.probe(host, port, timeout=config.connect_timeout)
        except CertificateProbeError as e:
            logger.warning(f"[SSL] {host}:{port} probe failed: {e.message}")
            message = MessageTemplates.CERT_CHECK_FAILED.format(
                error=get_network_error_message(e)
            )
            return CheckResult.down(message, TimeHelper.elapsed_ms(start)), None

        days = state.days_remaining

        if config.monitor_id and config.monitor_name:
            cert_status = MonitorStatus.UP if state.valid else MonitorStatus.DOWN
            self.gate.schedule(config.monitor_id, config.monitor_name, days, cert_status)

        if not state.valid:
            if state.error:
                logger.warning(f"[SSL] {host}:{port} certificate invalid: {state.error}")
            return (
                CheckResult.down(ErrorMessages.CERTIFICATE_INVALID, TimeHelper.elapsed_ms(start)),
                None,
            )

        warning = None
        message = MessageTemplates.CERT_VALID
        if days > 0:
            message += MessageTemplates.CERT_DAYS_REMAINING.format(days=days)
            if days <= self.settings.monitoring.cert_warning_days:
                warning = MessageTemplates.CERT_EXPIRY_WARNING.format(days=days)
                message += f". {warning}"

        result = CheckResult.up(message, TimeHelper.elapsed_ms(start))
        return result, warning


# ============================================================================
# HTTP CHECKER
# ============================================================================

class HTTPChecker:
    """
    Sends one request and compares the response status with the
    monitor's expected status codes.

    With ``notify_cert_expiry`` on an https:// URL, the certificate is
    checked first: an invalid certificate fails the check outright, an
    expiring one is appended to the success message.
    """

    def __init__(self, router: RequestRouter, certificate_checker: SSLChecker, settings: Settings):
        self.router = router
        self.certificate_checker = certificate_checker
        self.settings = settings

    async def check(self, config: MonitorConfig) -> CheckResult:
        """
        Execute an HTTP check.

        Parameters
        ----------
        config : MonitorConfig
            What to check.

        Returns
        -------
        CheckResult
            UP with ``status: <code>`` or DOWN with the reason.
        """
        try:
            MonitorConfigValidator.require_url(config.url)
        except ValidationException as e:
            return CheckResult.down(e.message)

        start = TimeHelper.monotonic()
        try:
            result = await self._check(config, start)
        except Exception as e:
            logger.exception(f"[HTTP] {config.url} unexpected error: {e}")
            result = CheckResult.down(get_network_error_message(e), TimeHelper.elapsed_ms(start))

        monitor_logger.log_check("HTTP", config.url, result.status, result.message, result.ping)
        return result

    async def _certificate_warning(self, config: MonitorConfig) -> Tuple[Optional[CheckResult], Optional[str]]:
        """
        Returns (failed result, None) when the certificate is bad,
        (None, cert message) when it is about to expire, else (None, None).
        """
        try:
            cert_result, warning = await self.certificate_checker.check_with_warning(config)
        except Exception as e:
            logger.warning(f"[HTTP] certificate pre-check for {config.url} failed: {e}")
            return None, None

        if not cert_result.is_up:
            return cert_result, None
        if warning:
            return None, cert_result.message
        return None, None

    async def _check(self, config: MonitorConfig, start: float) -> CheckResult:
        cert_warning = None
        if config.notify_cert_expiry and URLValidator.is_https(config.url):
            failed, cert_warning = await self._certificate_warning(config)
            if failed is not None:
                return failed

        options = _request_options(config, self.settings)
        try:
            routed = await self.router.send(config.url, options)
        except TransportError as e:
            return CheckResult.down(get_network_error_message(e), TimeHelper.elapsed_ms(start))

        ping = TimeHelper.elapsed_ms(start)
        code = routed.response.status_code

        if not check_status_code(code, config.status_codes):
            logger.debug(f"[HTTP] {config.url} → {code} (expected {config.status_codes})")
            return CheckResult.down(MessageTemplates.STATUS_UNEXPECTED.format(code=code), ping)

        message = MessageTemplates.STATUS_OK.format(code=code)
        if cert_warning:
            message += f" | {cert_warning}"
        return CheckResult.up(message, ping)


# ============================================================================
# KEYWORD CHECKER
# ============================================================================

class KeywordChecker:
    """
    Like the HTTP checker, but the response body must also contain at
    least one of the comma-separated keywords (first match wins).
    """

    def __init__(self, router: RequestRouter, settings: Settings):
        self.router = router
        self.settings = settings

    async def check(self, config: MonitorConfig) -> CheckResult:
        try:
            MonitorConfigValidator.require_url(config.url)
            keywords = MonitorConfigValidator.require_keywords(config.keyword)
        except ValidationException as e:
            return CheckResult.down(e.message)

        start = TimeHelper.monotonic()
        try:
            result = await self._check(config, keywords, start)
        except Exception as e:
            logger.exception(f"[KEYWORD] {config.url} unexpected error: {e}")
            result = CheckResult.down(get_network_error_message(e), TimeHelper.elapsed_ms(start))

        monitor_logger.log_check("KEYWORD", config.url, result.status, result.message, result.ping)
        return result

    async def _check(self, config: MonitorConfig, keywords, start: float) -> CheckResult:
        options = _request_options(config, self.settings)
        try:
            routed = await self.router.send(config.url, options)
        except TransportError as e:
            message = get_network_error_message(e)
            if e.via_proxy:
                message = MessageTemplates.PROXY_FAILED.format(error=message)
            return CheckResult.down(message, TimeHelper.elapsed_ms(start))

        ping = TimeHelper.elapsed_ms(start)
        code = routed.response.status_code

        if not check_status_code(code, config.status_codes):
            return CheckResult.down(MessageTemplates.STATUS_UNEXPECTED.format(code=code), ping)

        body = routed.response.text
        found = next((kw for kw in keywords if kw in body), None)

        if found is None:
            message = ErrorMessages.KEYWORD_NOT_FOUND
            if len(keywords) > 1:
                message += MessageTemplates.KEYWORD_CHECKED_INFO.format(count=len(keywords))
            return CheckResult.down(message, ping)

        match_info = ""
        if len(keywords) > 1:
            match_info = MessageTemplates.KEYWORD_MATCH_INFO.format(keyword=found)
        return CheckResult.up(
            MessageTemplates.KEYWORD_FOUND.format(
                match_info=match_info,
                code=code,
                proxy_info=MessageTemplates.VIA_PROXY if routed.via_proxy else "",
            ),
            ping,
        )


# ============================================================================
# CHECK ENGINE
# ============================================================================

class CheckEngine:
    """
    Entry point for running checks.

    Owns the request router, certificate probe, notification gate and
    the three checkers. HTTP and keyword checks go through the retry
    envelope; certificate checks run once.

    Parameters
    ----------
    router : RequestRouter | None
        Request routing (direct vs proxy).
    probe : CertificateProbe | None
        TLS probe used by the certificate checker.
    gate : CertificateNotificationGate | None
        Certificate alert gate; built from ``dispatcher`` when omitted.
    dispatcher : NotificationDispatcher | None
        Notification service used by the default gate.
    settings : Settings | None
        Application settings.
    sleep : callable
        Delay between retries.
    """

    def __init__(
        self,
        router: Optional[RequestRouter] = None,
        probe: Optional[CertificateProbe] = None,
        gate: Optional[CertificateNotificationGate] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        settings: Optional[Settings] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.settings = settings or get_settings()
        self.router = router or RequestRouter()
        self.probe = probe or CertificateProbe()
        self.gate = gate or CertificateNotificationGate(
            dispatcher,
            settings=self.settings.monitoring,
            clock=lambda: TimeHelper.now_in(self.settings.timezone),
        )
        self.sleep = sleep

        self.certificate_checker = SSLChecker(self.probe, self.gate, self.settings)
        self.http_checker = HTTPChecker(self.router, self.certificate_checker, self.settings)
        self.keyword_checker = KeywordChecker(self.router, self.settings)
        self.scheduler = Scheduler(self.gate, self.settings)

    async def check_http(self, config: MonitorConfig) -> CheckResult:
        return await with_retry(self.http_checker.check, config, sleep=self.sleep)

    async def check_keyword(self, config: MonitorConfig) -> CheckResult:
        return await with_retry(self.keyword_checker.check, config, sleep=self.sleep)

    async def check_https_certificate(self, config: MonitorConfig) -> CheckResult:
        return await self.certificate_checker.check(config)

    async def check(self, monitor_type, config: MonitorConfig) -> CheckResult:
        """
        Run the check for *monitor_type* (``http``, ``keyword`` or
        ``https-cert``).

        Raises:
            ValidationException: if the monitor type is unknown
        """
        try:
            kind = MonitorType(monitor_type)
        except ValueError:
            raise ValidationException(
                f"Unsupported monitor type: {monitor_type}",
                field="monitor_type",
                value=monitor_type,
            )

        if kind == MonitorType.HTTP:
            return await self.check_http(config)
        if kind == MonitorType.KEYWORD:
            return await self.check_keyword(config)
        return await self.check_https_certificate(config)

    async def start(self) -> None:
        """Start background housekeeping (certificate cache clearing)."""
        await self.scheduler.start()

    async def aclose(self) -> None:
        """Stop housekeeping and wait for pending certificate notifications."""
        if self.scheduler.is_running:
            await self.scheduler.stop()
        await self.gate.wait_pending()

    async def __aenter__(self) -> "CheckEngine":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
