"""
Transport error classification.

Maps whatever a failed probe raised to one of four canonical messages.
Checks run in a fixed order and the first match wins, because some
libraries report compound messages (a refused connection surfaced as a
"connect timeout", for example).
"""

import asyncio
import socket
from typing import List

import httpx

from config.constants import ErrorMessages
from exceptions.base import MonitorEngineException
from exceptions.monitoring import ProbeTimeoutError
from utils.helpers import truncate


_REFUSED_MARKERS = ("econnrefused", "connection refused", "[errno 111]", "[errno 61]")
_TIMEOUT_MARKERS = ("etimedout", "timeout", "timed out")
_NOT_FOUND_MARKERS = (
    "enotfound",
    "getaddrinfo",
    "name or service not known",
    "nodename nor servname",
    "no address associated with hostname",
    "temporary failure in name resolution",
)

_TIMEOUT_TYPES = (
    httpx.TimeoutException,
    asyncio.TimeoutError,
    TimeoutError,
    socket.timeout,
    ProbeTimeoutError,
)


def _unwrap(error: BaseException) -> BaseException:
    """Peel our own wrapper exceptions down to the library exception."""
    while isinstance(error, MonitorEngineException) and error.cause is not None:
        if isinstance(error, ProbeTimeoutError):
            break
        error = error.cause
    return error


def _chain(error: BaseException) -> List[BaseException]:
    """The exception followed by its causes/contexts (bounded)."""
    chain: List[BaseException] = []
    current = error
    while current is not None and current not in chain and len(chain) < 8:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def _error_text(error: BaseException) -> str:
    text = str(error).strip()
    if isinstance(error, MonitorEngineException):
        text = error.message
    return text or type(error).__name__


def get_network_error_message(error: BaseException) -> str:
    """
    Classify a transport failure into a human-readable message.

    Order: connection refused, timeout, host not found, generic.
    """
    raw = _unwrap(error)
    chain = _chain(raw)
    haystack = " | ".join(_error_text(e) for e in chain).lower()

    if isinstance(raw, ConnectionRefusedError) or any(m in haystack for m in _REFUSED_MARKERS):
        return ErrorMessages.CONNECTION_REFUSED

    if any(isinstance(e, _TIMEOUT_TYPES) for e in chain) or any(
        m in haystack for m in _TIMEOUT_MARKERS
    ):
        return ErrorMessages.TIMEOUT

    if any(isinstance(e, socket.gaierror) for e in chain) or any(
        m in haystack for m in _NOT_FOUND_MARKERS
    ):
        return ErrorMessages.HOST_NOT_FOUND

    return f"{ErrorMessages.NETWORK_ERROR}: {truncate(_error_text(raw))}"
