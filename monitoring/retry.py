"""
Retry envelope for single-shot checkers.

Every DOWN result is retried the same way, including configuration
problems such as an empty URL, so a misconfigured monitor with retries
set waits out every retry before reporting DOWN.
"""

import asyncio
from typing import Awaitable, Callable

from config.constants import MessageTemplates
from monitoring.models import CheckResult, MonitorConfig
from utils.logger import MonitorLogger


Checker = Callable[[MonitorConfig], Awaitable[CheckResult]]
Sleeper = Callable[[float], Awaitable[None]]

monitor_logger = MonitorLogger()


async def with_retry(
    checker: Checker,
    config: MonitorConfig,
    sleep: Sleeper = asyncio.sleep,
) -> CheckResult:
    """
    Run *checker* and retry on DOWN.

    Args:
        checker: Single-shot check to run
        config: Monitor configuration; ``retries`` and ``retry_interval``
            drive the envelope
        sleep: Awaitable delay, replaced in tests

    Returns:
        The first UP result (message prefixed when it came from a retry),
        or the first DOWN result annotated with the retry count.
    """
    first = await checker(config)
    retries = max(int(config.retries or 0), 0)

    if retries == 0 or first.is_up:
        return first

    for attempt in range(1, retries + 1):
        monitor_logger.log_retry(config.url, attempt, retries, config.retry_interval)
        await sleep(config.retry_interval)

        result = await checker(config)
        if result.is_up:
            return result.with_message(
                MessageTemplates.RETRY_SUCCEEDED.format(
                    attempt=attempt, retries=retries, message=result.message
                )
            )

    return first.with_message(
        MessageTemplates.RETRY_EXHAUSTED.format(retries=retries, message=first.message)
    )
