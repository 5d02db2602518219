from __future__ import annotations

from typing import List

import pytest

from config.constants import MonitorStatus
from monitoring.models import CheckResult, MonitorConfig
from monitoring.retry import with_retry


class ScriptedChecker:
    def __init__(self, results: List[CheckResult]) -> None:
        self.results = list(results)
        self.calls = 0

    async def __call__(self, config: MonitorConfig) -> CheckResult:
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        return result


@pytest.mark.asyncio
async def test_no_retries_runs_once(no_sleep) -> None:
    checker = ScriptedChecker([CheckResult.down("boom", 12)])
    result = await with_retry(checker, MonitorConfig(url="x", retries=0), sleep=no_sleep)
    assert result == CheckResult.down("boom", 12)
    assert checker.calls == 1
    assert no_sleep.delays == []


@pytest.mark.asyncio
async def test_first_success_is_returned_unchanged(no_sleep) -> None:
    checker = ScriptedChecker([CheckResult.up("status: 200", 5)])
    result = await with_retry(checker, MonitorConfig(url="x", retries=3), sleep=no_sleep)
    assert result.message == "status: 200"
    assert checker.calls == 1


@pytest.mark.asyncio
async def test_success_on_last_retry(no_sleep) -> None:
    checker = ScriptedChecker(
        [CheckResult.down("a"), CheckResult.down("b"), CheckResult.up("status: 200", 40)]
    )
    config = MonitorConfig(url="x", retries=2, retry_interval=0)

    result = await with_retry(checker, config, sleep=no_sleep)

    assert result.status == MonitorStatus.UP
    assert result.message == "retry succeeded (2/2): status: 200"
    assert result.ping == 40
    assert checker.calls == 3
    assert no_sleep.delays == [0, 0]


@pytest.mark.asyncio
async def test_all_attempts_fail(no_sleep) -> None:
    checker = ScriptedChecker(
        [CheckResult.down("connection refused", 3), CheckResult.down("timeout"), CheckResult.down("x")]
    )
    config = MonitorConfig(url="x", retries=2, retry_interval=30)

    result = await with_retry(checker, config, sleep=no_sleep)

    assert result.status == MonitorStatus.DOWN
    assert result.message == "failed after 2 retries: connection refused"
    assert result.ping == 3
    assert checker.calls == 3
    assert no_sleep.delays == [30, 30]


@pytest.mark.asyncio
async def test_configuration_errors_are_retried_too(no_sleep) -> None:
    checker = ScriptedChecker([CheckResult.down("URL empty")])
    result = await with_retry(checker, MonitorConfig(url="", retries=1), sleep=no_sleep)
    assert result.message == "failed after 1 retries: URL empty"
    assert checker.calls == 2
