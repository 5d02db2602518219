"""
============================================================================
MONITOR CHECK ENGINE - CERTIFICATE NOTIFICATION GATE
============================================================================
Decides whether a certificate-expiry alert may be sent right now.

Rules
-----
* Only expired certificates (DOWN) or certificates within
  ``cert_warning_days`` of expiry (UP) are eligible.
* Alerts only go out during a short daily window (``cert_notify_hour``,
  first ``cert_notify_window_minutes`` minutes). Checks run every few
  minutes; the window turns that into at most one attempt per day.
* Dedup key is (monitor id, calendar day); the value is the set of tags
  already sent that day. ``expired`` and ``expiring-<days>`` are separate
  tags, so a certificate going from 5 to 4 days left alerts again.
* The cache is cleared in bulk once a day around ``cache_clear_hour``.
  There is no per-entry expiry and nothing is persisted; a restart
  forgets what was sent.

Dispatch failures are logged and swallowed. A broken alert channel must
never turn into a failed check. Each dispatch is bounded by
``notification_timeout`` so a hung channel cannot hold the lock.

Locking
-------
The cache is owned by a single NotificationDedupCache instance and every
read-check-dispatch-write sequence runs under its asyncio.Lock, so two
concurrent checks of the same monitor cannot both send.
============================================================================
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional, Protocol, Set, Tuple

from config.constants import MessageTemplates, MonitorStatus, NotificationTags
from config.settings import MonitoringSettings, get_settings
from exceptions.monitoring import NotificationDispatchError
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("CertNotifications")


# ============================================================================
# DISPATCH COLLABORATOR
# ============================================================================

class NotificationDispatcher(Protocol):
    """
    The application's notification service.

    ``previous_status`` is None for certificate alerts, which makes the
    service treat them as a state change worth announcing.
    """

    async def __call__(
        self,
        monitor_id: str,
        status: MonitorStatus,
        message: str,
        previous_status: Optional[MonitorStatus],
    ) -> None:
        ...


class LoggingNotificationDispatcher:
    """Dispatcher that only writes the alert to the log."""

    async def __call__(
        self,
        monitor_id: str,
        status: MonitorStatus,
        message: str,
        previous_status: Optional[MonitorStatus],
    ) -> None:
        logger.info(
            f"[ALERT] monitor={monitor_id} status={MonitorStatus(status).name} "
            f"previous={previous_status} message={message}"
        )


# ============================================================================
# OUTCOME
# ============================================================================

@dataclass(frozen=True)
class NotificationOutcome:
    """
    What ``maybe_notify`` did. Callers are free to ignore it.
    """
    sent: bool
    tag: Optional[str] = None
    skipped_reason: Optional[str] = None
    error: Optional[str] = None


# ============================================================================
# DEDUP CACHE
# ============================================================================

class NotificationDedupCache:
    """
    (monitor id, day) -> tags already sent that day.

    Hold ``lock`` around any read-then-write sequence.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, str], Set[str]] = {}
        self.lock = asyncio.Lock()

    def contains(self, monitor_id: str, day: str, tag: str) -> bool:
        return tag in self._entries.get((monitor_id, day), ())

    def record(self, monitor_id: str, day: str, tag: str) -> None:
        self._entries.setdefault((monitor_id, day), set()).add(tag)

    def tags_for(self, monitor_id: str, day: str) -> Set[str]:
        return set(self._entries.get((monitor_id, day), ()))

    async def clear(self) -> int:
        """Drop every entry; returns how many keys were removed."""
        async with self.lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def __len__(self) -> int:
        return len(self._entries)


# ============================================================================
# GATE
# ============================================================================

class CertificateNotificationGate:
    """
    Parameters
    ----------
    dispatcher : NotificationDispatcher
        The notification service to call.
    cache : NotificationDedupCache | None
        Dedup state; one per process in practice, injected for tests.
    settings : MonitoringSettings | None
        Window and threshold configuration.
    clock : callable() -> datetime | None
        Current local time. Defaults to now in the configured timezone.
    """

    def __init__(
        self,
        dispatcher: Optional[NotificationDispatcher] = None,
        cache: Optional[NotificationDedupCache] = None,
        settings: Optional[MonitoringSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.dispatcher = dispatcher or LoggingNotificationDispatcher()
        self.cache = cache if cache is not None else NotificationDedupCache()
        self.settings = settings or get_settings().monitoring
        self.clock = clock or (lambda: TimeHelper.now_in(get_settings().timezone))
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # PREDICATES
    # ------------------------------------------------------------------

    def is_eligible(self, status: MonitorStatus, days_remaining: int) -> bool:
        """Expired, or valid but close to expiry."""
        if status == MonitorStatus.DOWN:
            return True
        return days_remaining <= self.settings.cert_warning_days

    def is_notification_time(self, now: datetime) -> bool:
        return (
            now.hour == self.settings.cert_notify_hour
            and now.minute < self.settings.cert_notify_window_minutes
        )

    def is_cache_clear_time(self, now: datetime) -> bool:
        return (
            now.hour == self.settings.cache_clear_hour
            and now.minute < self.settings.cache_clear_window_minutes
        )

    @staticmethod
    def build_notification(
        status: MonitorStatus, days_remaining: int, monitor_name: str
    ) -> Tuple[str, str]:
        """Return (tag, message) for an eligible certificate."""
        if status == MonitorStatus.DOWN:
            return (
                NotificationTags.EXPIRED,
                MessageTemplates.CERT_EXPIRED_ALERT.format(name=monitor_name),
            )
        return (
            NotificationTags.expiring(days_remaining),
            MessageTemplates.CERT_EXPIRING_ALERT.format(
                name=monitor_name, days=days_remaining
            ),
        )

    # ------------------------------------------------------------------
    # NOTIFY
    # ------------------------------------------------------------------

    async def maybe_notify(
        self,
        monitor_id: str,
        monitor_name: str,
        days_remaining: int,
        status: MonitorStatus,
        now: Optional[datetime] = None,
    ) -> NotificationOutcome:
        """
        Send a certificate alert if it is eligible, in the window, and not
        already sent today. Never raises.
        """
        if not self.is_eligible(status, days_remaining):
            return NotificationOutcome(sent=False, skipped_reason="not_eligible")

        now = now or self.clock()
        if not self.is_notification_time(now):
            return NotificationOutcome(sent=False, skipped_reason="outside_window")

        tag, message = self.build_notification(status, days_remaining, monitor_name)
        day = now.date().isoformat()

        async with self.cache.lock:
            if self.cache.contains(monitor_id, day, tag):
                return NotificationOutcome(sent=False, tag=tag, skipped_reason="already_sent")

            try:
                await asyncio.wait_for(
                    self.dispatcher(monitor_id, status, message, None),
                    timeout=self.settings.notification_timeout,
                )
            except asyncio.TimeoutError as e:
                error = NotificationDispatchError.from_exception(
                    e,
                    message=(
                        f"Certificate notification for {monitor_name} timed out "
                        f"after {self.settings.notification_timeout}s"
                    ),
                    monitor_id=monitor_id,
                    tag=tag,
                )
                logger.error(error.log_format())
                return NotificationOutcome(sent=False, tag=tag, error=error.message)
            except Exception as e:
                error = NotificationDispatchError.from_exception(
                    e,
                    message=f"Failed to send certificate notification for {monitor_name}: {e}",
                    monitor_id=monitor_id,
                    tag=tag,
                )
                logger.error(error.log_format())
                return NotificationOutcome(sent=False, tag=tag, error=error.message)

            self.cache.record(monitor_id, day, tag)

        logger.info(f"Sent certificate {tag} notification for {monitor_name}")
        return NotificationOutcome(sent=True, tag=tag)

    def schedule(
        self,
        monitor_id: str,
        monitor_name: str,
        days_remaining: int,
        status: MonitorStatus,
    ) -> asyncio.Task:
        """
        Run ``maybe_notify`` in the background without blocking the check.
        The task is kept referenced until it finishes.
        """
        task = asyncio.create_task(
            self.maybe_notify(monitor_id, monitor_name, days_remaining, status)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_pending(self) -> None:
        """Wait for background notifications started by ``schedule``."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    # CACHE MAINTENANCE
    # ------------------------------------------------------------------

    async def clear_if_midnight(self, now: Optional[datetime] = None) -> bool:
        """
        Clear the whole dedup cache if *now* falls in the daily clear
        window. Returns True when a clear happened.
        """
        now = now or self.clock()
        if not self.is_cache_clear_time(now):
            return False

        removed = await self.cache.clear()
        logger.info(f"Certificate notification cache cleared ({removed} entries)")
        return True
