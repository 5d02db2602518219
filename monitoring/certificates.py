"""
============================================================================
MONITOR CHECK ENGINE - TLS CERTIFICATE PROBE
============================================================================
Connects to host:port, retrieves the peer certificate and works out
whether it is valid and how many days it has left.

A verified handshake (system CA bundle + hostname check) is tried first.
If verification fails, the certificate is fetched again without
verification so expiry can still be reported, and it is marked invalid.
============================================================================
"""

import asyncio
import ssl
from datetime import datetime, timezone
from typing import Optional, Tuple

from cryptography import x509
from cryptography.x509.oid import NameOID

from config.constants import Defaults
from exceptions.monitoring import CertificateProbeError
from monitoring.models import CertificateState
from utils.logger import get_logger


logger = get_logger("CertificateProbe")

_SECONDS_PER_DAY = 86400


def _common_name(name: x509.Name) -> Optional[str]:
    attributes = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attributes:
        return None
    return str(attributes[0].value)


def days_until(expiry: datetime, now: datetime) -> int:
    """
    Whole days between *now* and *expiry*, rounded to the nearest day;
    negative once the certificate has expired.
    """
    seconds = (expiry - now).total_seconds()
    days = int(round(abs(seconds) / _SECONDS_PER_DAY))
    return -days if seconds < 0 else days


def state_from_der(
    der: bytes,
    verified: bool,
    now: Optional[datetime] = None,
    verify_error: Optional[str] = None,
) -> CertificateState:
    """
    Build a CertificateState from a DER-encoded certificate.

    Args:
        der: Certificate bytes as returned by ``getpeercert(binary_form=True)``
        verified: Whether the chain/hostname verification succeeded
        now: Reference time (defaults to the current UTC time)
        verify_error: Verification failure text, if any
    """
    now = now or datetime.now(timezone.utc)
    cert = x509.load_der_x509_certificate(der)

    not_before = cert.not_valid_before_utc
    not_after = cert.not_valid_after_utc

    in_date = not_before <= now <= not_after
    error = verify_error
    if not in_date and error is None:
        error = (
            f"certificate expired on {not_after:%Y-%m-%d}"
            if now > not_after
            else f"certificate not valid until {not_before:%Y-%m-%d}"
        )

    return CertificateState(
        valid=verified and in_date,
        days_remaining=days_until(not_after, now),
        issuer=_common_name(cert.issuer),
        subject=_common_name(cert.subject),
        error=error,
    )


class CertificateProbe:
    """
    TLS handshake probe.

    Stateless; one instance can be shared by every concurrent check.
    """

    @staticmethod
    def _context(verify: bool) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not verify:
            # We want the certificate even if it is expired or self-signed
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    async def fetch_certificate(self, host: str, port: int, verify: bool) -> bytes:
        """
        Open a TLS connection and return the peer certificate (DER).

        Raises:
            ssl.SSLCertVerificationError: verification failed (verify=True)
            CertificateProbeError: the server presented no certificate
            OSError: connection or resolution failure
        """
        reader, writer = await asyncio.open_connection(
            host, port, ssl=self._context(verify), server_hostname=host
        )
        try:
            ssl_object = writer.get_extra_info("ssl_object")
            der = ssl_object.getpeercert(binary_form=True) if ssl_object else None
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (OSError, ssl.SSLError):
                pass  # best-effort close

        if not der:
            raise CertificateProbeError(
                "Server did not present a certificate", host=host, port=port
            )
        return der

    async def _probe(self, host: str, port: int) -> Tuple[bytes, bool, Optional[str]]:
        try:
            return await self.fetch_certificate(host, port, verify=True), True, None
        except ssl.SSLCertVerificationError as e:
            reason = getattr(e, "verify_message", None) or str(e)
            logger.debug(f"[TLS] {host}:{port} failed verification: {reason}")
            der = await self.fetch_certificate(host, port, verify=False)
            return der, False, reason

    async def probe(
        self,
        host: str,
        port: int = Defaults.HTTPS_PORT,
        timeout: float = Defaults.CONNECT_TIMEOUT,
        now: Optional[datetime] = None,
    ) -> CertificateState:
        """
        Probe host:port and describe its certificate.

        Raises:
            CertificateProbeError: handshake, resolution or timeout failure,
                with the original exception as ``cause``
        """
        try:
            der, verified, verify_error = await asyncio.wait_for(
                self._probe(host, port), timeout=timeout
            )
        except CertificateProbeError:
            raise
        except asyncio.TimeoutError as e:
            raise CertificateProbeError(
                f"TLS handshake timeout after {timeout}s", host=host, port=port, cause=e
            ) from e
        except (OSError, ssl.SSLError, ValueError) as e:
            raise CertificateProbeError(
                str(e) or type(e).__name__, host=host, port=port, cause=e
            ) from e

        try:
            state = state_from_der(der, verified, now=now, verify_error=verify_error)
        except ValueError as e:
            raise CertificateProbeError(
                f"Unparseable certificate: {e}", host=host, port=port, cause=e
            ) from e

        logger.debug(
            f"[TLS] {host}:{port} issuer={state.issuer}, "
            f"days_left={state.days_remaining}, valid={state.valid}"
        )
        return state
