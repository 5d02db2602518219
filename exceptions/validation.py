"""
Validation Exception Classes for the Monitor Check Engine

Raised by the checkers when a monitor configuration cannot be checked
at all (empty URL, empty keyword, wrong scheme). The checkers turn
these into DOWN results; they never escape a checker entry point.
"""

from __future__ import annotations

from typing import Any, Optional

from config.constants import ErrorCodes, ErrorMessages
from exceptions.base import MonitorEngineException


class ValidationException(MonitorEngineException):
    """
    Base Validation Exception

    Parent class for all validation-related exceptions.
    """

    default_error_code = ErrorCodes.VALIDATION_ERROR
    default_recoverable = True

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: The field that failed validation
            value: The invalid value (sanitized)
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        if field:
            self.details["field"] = field

        if value is not None:
            self.details["value"] = self._sanitize_value(value)

    @staticmethod
    def _sanitize_value(value: Any) -> str:
        """Truncate long values for logging."""
        str_value = str(value)

        if len(str_value) > 100:
            str_value = str_value[:100] + "..."

        return str_value


class MissingFieldError(ValidationException):
    """
    Missing Field Error

    Raised when a required monitor field (URL, keyword) is empty.
    """

    default_error_code = ErrorCodes.MISSING_FIELD

    def __init__(
        self,
        message: str,
        field: str,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field=field, **kwargs)

    @classmethod
    def url(cls) -> "MissingFieldError":
        """Empty URL."""
        return cls(ErrorMessages.URL_EMPTY, field="url")

    @classmethod
    def keyword(cls) -> "MissingFieldError":
        """Empty keyword list."""
        return cls(ErrorMessages.KEYWORD_EMPTY, field="keyword")


class InvalidURLError(ValidationException):
    """
    Invalid URL Error

    Raised when a URL cannot be used for the requested check, e.g. a
    certificate check against a plain http:// URL.
    """

    default_error_code = ErrorCodes.INVALID_URL

    def __init__(
        self,
        message: str = ErrorMessages.HTTPS_ONLY,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize invalid URL error.

        Args:
            message: Error message
            url: The invalid URL
            reason: Specific reason for invalidity
            **kwargs: Additional arguments
        """
        super().__init__(message, field="url", value=url, **kwargs)

        if reason:
            self.details["reason"] = reason
