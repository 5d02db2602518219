"""
============================================================================
MONITOR CHECK ENGINE - REQUEST ROUTER
============================================================================
Sends a check request either directly or through the configured proxy.

The proxy toggle is read from the settings collaborator before every
request, so changing it takes effect on the next check. A settings
lookup that fails counts as "proxy disabled"; it is logged, never
raised.

Both transports open a short-lived httpx.AsyncClient per request, read
the whole body, and are bounded by a hard timeout (asyncio.wait_for)
equal to the monitor's connect timeout.
============================================================================
"""

import asyncio
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol
from urllib.parse import quote

import httpx

from config.constants import HTTPMethods
from config.settings import ProxySettings
from exceptions.base import ConfigurationError
from exceptions.monitoring import ProbeTimeoutError, SettingsLookupError, TransportError
from monitoring.models import RequestOptions
from utils.logger import get_logger


logger = get_logger("RequestRouter")


# ============================================================================
# COLLABORATOR PROTOCOLS
# ============================================================================

class ProxySettingsProvider(Protocol):
    """Source of the proxy settings (the application's settings store)."""

    async def get_proxy_settings(self) -> Mapping[str, str]:
        ...


class Transport(Protocol):
    """Something that can send one request and return the response."""

    async def send(self, url: str, options: RequestOptions) -> httpx.Response:
        ...


class EnvProxySettingsProvider:
    """
    Proxy settings from the environment / .env file (``PROXY_*``).

    Without a pinned ``ProxySettings`` the environment is re-read on every
    lookup, bypassing the cached application settings.
    """

    def __init__(self, proxy_settings: Optional[ProxySettings] = None):
        self._proxy_settings = proxy_settings

    async def get_proxy_settings(self) -> Mapping[str, str]:
        proxy_settings = self._proxy_settings or ProxySettings()
        return proxy_settings.as_mapping()


# ============================================================================
# PROXY LOOKUP RESULT
# ============================================================================

@dataclass(frozen=True)
class ProxyLookup:
    """
    Outcome of reading the proxy settings.

    ``error`` is set when the lookup failed; ``enabled`` is then False.
    """
    enabled: bool
    proxy_url: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class RoutedResponse:
    """A response plus which path it took."""
    response: httpx.Response
    via_proxy: bool


def build_proxy_url(values: Mapping[str, str]) -> str:
    """
    Build the proxy URL from flat settings values.

    Raises:
        ConfigurationError: if no proxy server is configured
    """
    server = (values.get("proxy_server") or "").strip()
    if not server:
        raise ConfigurationError("Proxy is enabled but no proxy server is set",
                                 config_key="proxy_server")

    protocol = (values.get("proxy_protocol") or "http").strip().lower()
    port = (values.get("proxy_port") or "").strip()
    username = values.get("proxy_username") or ""
    password = values.get("proxy_password") or ""

    auth = ""
    if username:
        auth = quote(username, safe="")
        if password:
            auth += ":" + quote(password, safe="")
        auth += "@"

    host = f"{server}:{port}" if port else server
    return f"{protocol}://{auth}{host}"


# ============================================================================
# TRANSPORTS
# ============================================================================

class DirectTransport:
    """
    Sends requests straight to the target with httpx.

    ``transport`` lets callers (tests) plug in an httpx transport such as
    httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _client_kwargs(self, options: RequestOptions) -> dict:
        kwargs = dict(
            timeout=httpx.Timeout(options.timeout),
            follow_redirects=options.follow_redirects,
            verify=True,
        )
        if options.follow_redirects:
            kwargs["max_redirects"] = options.max_redirects
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    async def send(self, url: str, options: RequestOptions) -> httpx.Response:
        async with httpx.AsyncClient(**self._client_kwargs(options)) as client:
            return await client.request(
                method=options.method,
                url=url,
                headers=options.headers,
                content=options.body,
            )


class ProxyTransport(DirectTransport):
    """
    Sends requests through an HTTP(S) or SOCKS5 proxy.
    """

    def __init__(self, proxy_url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(transport)
        self.proxy_url = proxy_url

    def _client_kwargs(self, options: RequestOptions) -> dict:
        kwargs = super()._client_kwargs(options)
        if self._transport is None:
            kwargs["proxy"] = self.proxy_url
        return kwargs


# ============================================================================
# REQUEST ROUTER
# ============================================================================

class RequestRouter:
    """
    Chooses direct vs proxied transport per request and enforces the
    hard timeout.

    Parameters
    ----------
    settings_provider : ProxySettingsProvider | None
        Where the proxy toggle comes from. Defaults to the environment.
    direct : Transport | None
        Transport used when the proxy is off.
    proxy_factory : callable(proxy_url) -> Transport | None
        Builds the proxying transport for a given proxy URL.
    """

    def __init__(
        self,
        settings_provider: Optional[ProxySettingsProvider] = None,
        direct: Optional[Transport] = None,
        proxy_factory=None,
    ):
        self.settings_provider = settings_provider or EnvProxySettingsProvider()
        self.direct = direct or DirectTransport()
        self.proxy_factory = proxy_factory or ProxyTransport

    # ------------------------------------------------------------------
    # PROXY LOOKUP
    # ------------------------------------------------------------------

    async def _read_settings(self) -> Mapping[str, str]:
        try:
            return await self.settings_provider.get_proxy_settings()
        except Exception as e:
            raise SettingsLookupError.from_exception(
                e, message=f"Could not read proxy settings: {e}"
            ) from e

    async def lookup_proxy(self) -> ProxyLookup:
        """
        Read the proxy settings. Never raises: any failure is reported
        as a disabled lookup carrying the error text.
        """
        try:
            values = await self._read_settings()
        except SettingsLookupError as e:
            logger.warning(f"[Router] {e.message}; treating proxy as disabled")
            return ProxyLookup(enabled=False, error=e.message)

        if str(values.get("proxy_enabled", "")).lower() != "true":
            return ProxyLookup(enabled=False)

        try:
            return ProxyLookup(enabled=True, proxy_url=build_proxy_url(values))
        except ConfigurationError as e:
            logger.warning(f"[Router] {e.message}; sending directly")
            return ProxyLookup(enabled=False, error=e.message)

    async def is_proxy_enabled(self) -> bool:
        return (await self.lookup_proxy()).enabled

    # ------------------------------------------------------------------
    # SEND
    # ------------------------------------------------------------------

    async def send(self, url: str, options: RequestOptions) -> RoutedResponse:
        """
        Send one request.

        Raises:
            ProbeTimeoutError: the call exceeded ``options.timeout``
            TransportError: any other network failure
        """
        lookup = await self.lookup_proxy()
        if lookup.enabled:
            transport = self.proxy_factory(lookup.proxy_url)
        else:
            transport = self.direct

        logger.debug(
            f"[Router] {options.method} {url} "
            f"({'proxy' if lookup.enabled else 'direct'}, timeout={options.timeout}s)"
        )

        try:
            response = await asyncio.wait_for(
                transport.send(url, options), timeout=options.timeout
            )
        except asyncio.TimeoutError as e:
            raise ProbeTimeoutError(
                f"request timeout after {options.timeout}s",
                timeout=options.timeout,
                url=url,
                via_proxy=lookup.enabled,
                cause=e,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            raise TransportError(
                str(e) or type(e).__name__,
                url=url,
                via_proxy=lookup.enabled,
                cause=e,
            ) from e

        return RoutedResponse(response=response, via_proxy=lookup.enabled)


def build_request_options(
    method: str,
    headers: Mapping[str, str],
    body: Optional[str],
    max_redirects: int,
    timeout: float,
    user_agent: Optional[str] = None,
) -> RequestOptions:
    """
    Assemble RequestOptions from monitor fields.

    The body is attached only for POST/PUT/PATCH. Redirects are followed
    unless ``max_redirects <= 0``.
    """
    method = (method or HTTPMethods.GET.value).upper()
    request_headers = dict(headers)
    if user_agent and not any(k.lower() == "user-agent" for k in request_headers):
        request_headers["User-Agent"] = user_agent

    return RequestOptions(
        method=method,
        headers=request_headers,
        body=body if body and HTTPMethods.accepts_body(method) else None,
        follow_redirects=max_redirects > 0,
        max_redirects=max(max_redirects, 0),
        timeout=float(timeout),
    )
