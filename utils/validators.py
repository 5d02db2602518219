"""
============================================================================
MONITOR CHECK ENGINE - VALIDATORS UTILITY
============================================================================
Check-time validation of monitor configurations. Nothing is validated
when a MonitorConfig is built; the checkers call these right before
probing and turn the raised errors into DOWN results.
============================================================================
"""

from typing import List

from exceptions.validation import InvalidURLError, MissingFieldError
from utils.helpers import split_keywords


# ============================================================================
# URL VALIDATORS
# ============================================================================

class URLValidator:
    """
    URL scheme checks.
    """

    HTTPS_PREFIX = "https://"

    @classmethod
    def is_https(cls, url: str) -> bool:
        """Exact, case-sensitive ``https://`` prefix check."""
        return url.startswith(cls.HTTPS_PREFIX)


# ============================================================================
# MONITOR CONFIG VALIDATOR
# ============================================================================

class MonitorConfigValidator:
    """
    Check-time requirements for each checker.
    """

    @staticmethod
    def require_url(url: str) -> str:
        """
        Raises:
            MissingFieldError: if the URL is empty
        """
        if not url:
            raise MissingFieldError.url()
        return url

    @staticmethod
    def require_keywords(keyword: str) -> List[str]:
        """
        Split the keyword field, requiring at least one term.

        Raises:
            MissingFieldError: if there is no usable keyword
        """
        keywords = split_keywords(keyword)
        if not keywords:
            raise MissingFieldError.keyword()
        return keywords

    @staticmethod
    def require_https(url: str) -> str:
        """
        Raises:
            InvalidURLError: if the URL is not https://
        """
        if not URLValidator.is_https(url):
            raise InvalidURLError(url=url, reason="not_https")
        return url
