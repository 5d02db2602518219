"""
============================================================================
MONITOR CHECK ENGINE - HELPERS UTILITY
============================================================================
Small pure helpers shared by the checkers: clocks, request header
parsing, keyword splitting and URL host/port extraction.
============================================================================
"""

import json
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlsplit
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config.constants import Defaults
from utils.logger import get_logger


logger = get_logger("Helpers")


# ============================================================================
# TIME UTILITIES
# ============================================================================

class TimeHelper:
    """
    Time and date utilities.
    """

    @staticmethod
    def now_in(tz_name: str) -> datetime:
        """
        Current time in the named timezone.

        Unknown zone names fall back to UTC with a warning.
        """
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone '{tz_name}', using UTC")
            tz = timezone.utc
        return datetime.now(tz)

    @staticmethod
    def monotonic() -> float:
        """Monotonic clock reading in seconds."""
        return time.perf_counter()

    @staticmethod
    def elapsed_ms(start: float) -> int:
        """Whole milliseconds elapsed since a ``monotonic()`` reading."""
        return int(round((time.perf_counter() - start) * 1000))


# ============================================================================
# REQUEST HELPERS
# ============================================================================

def parse_request_headers(raw: Any) -> Dict[str, str]:
    """
    Parse the monitor's raw header field into a header mapping.

    The field holds a JSON object as text. A mapping is accepted as-is.
    Anything unparseable is logged and ignored so the request still goes
    out, just without custom headers.

    Args:
        raw: JSON text, a mapping, or empty

    Returns:
        Header name to value mapping
    """
    if not raw:
        return {}

    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items()}

    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse request headers: {e}")
        return {}

    if not isinstance(parsed, dict):
        logger.warning(
            f"Request headers must be a JSON object, got {type(parsed).__name__}"
        )
        return {}

    return {str(k): str(v) for k, v in parsed.items()}


def split_keywords(keyword: Optional[str]) -> List[str]:
    """
    Split a comma-separated keyword field.

    Terms are trimmed and empty terms dropped; order is preserved.
    """
    if not keyword:
        return []
    return [k.strip() for k in keyword.split(",") if k.strip()]


def extract_host_port(url: str, default_port: int = Defaults.HTTPS_PORT) -> Tuple[str, int]:
    """
    Extract (hostname, port) from a URL.

    Raises:
        ValueError: if the URL has no hostname or an invalid port
    """
    parts = urlsplit(url.strip())
    host = parts.hostname
    if not host:
        raise ValueError(f"No hostname in URL: {url}")
    return host, parts.port or default_port


def truncate(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """Truncate text to max_length characters."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix
