"""
============================================================================
MONITOR CHECK ENGINE - LOGGING UTILITY
============================================================================
loguru-based logging with console and optional rotating file sinks.
Standard-library loggers (httpx, asyncio) are routed into loguru so every
record ends up in the same place.
============================================================================
"""

import sys
import logging
from pathlib import Path
from typing import Optional

from loguru import logger

from config.settings import get_settings


settings = get_settings()

_configured = False


# ============================================================================
# STDLIB BRIDGE
# ============================================================================

class InterceptHandler(logging.Handler):
    """
    Forward records emitted through the ``logging`` module to loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

def setup_logging(force: bool = False) -> None:
    """
    Configure logging sinks from LoggingSettings.

    Safe to call more than once; only the first call (or a call with
    ``force=True``) replaces the sinks.
    """
    global _configured
    if _configured and not force:
        return

    log_settings = settings.logging
    log_level = log_settings.level.value

    # Remove default loguru handler
    logger.remove()

    # Console Handler
    if log_settings.console_enabled:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan> - <level>{message}</level>",
            level=log_level,
            colorize=log_settings.console_colored,
            backtrace=True,
            diagnose=False,
        )

    # File Handler
    if log_settings.file_enabled:
        log_file_path = Path(log_settings.file_path)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
            level=log_level,
            rotation=log_settings.file_rotation,
            retention=log_settings.file_retention,
            compression=log_settings.file_compression,
            serialize=log_settings.json_enabled,
            backtrace=True,
            diagnose=False,
        )

    logger.configure(extra={"name": "root"})

    # Route httpx / asyncio warnings through loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.WARNING, force=True)

    _configured = True
    logger.debug(f"Logging system initialized (level={log_level})")


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Logger name (usually the component name)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger


# ============================================================================
# SPECIALIZED LOGGERS
# ============================================================================

class MonitorLogger:
    """
    Specialized logger for finished checks.
    """

    def __init__(self):
        """Initialize monitor logger."""
        self.logger = get_logger("Monitor")

    def log_check(self, kind: str, url: str, status: int, message: str, ping: int):
        """Log one finished check."""
        if status:
            self.logger.info(f"[{kind}] {url} UP in {ping}ms - {message}")
        else:
            self.logger.warning(f"[{kind}] {url} DOWN after {ping}ms - {message}")

    def log_retry(self, url: str, attempt: int, retries: int, delay: float):
        """Log a scheduled retry attempt."""
        self.logger.debug(
            f"[Retry] {url} attempt {attempt}/{retries}, retrying in {delay}s"
        )


# ============================================================================
# INITIALIZE LOGGING ON MODULE IMPORT
# ============================================================================

setup_logging()
