"""Favorites monitor - detects biddable announcements and submits them.

Per cycle:
1. Fetch the favorites page and parse it
2. Classify every announcement by status and processing lock
3. Eligible announcements: write lock → submit → remove from favorites
4. Announcements that left the biddable status: release the lock
5. Report every submission attempt through the notification sink

The lock is written before the submission starts and stays in place when
the submission fails, so an announcement is never submitted twice within
the lock lifetime.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from time import monotonic
from typing import Callable, List, Optional, Protocol

from bidbot.core.constants import (
    BIDDABLE_STATUS,
    BIDDABLE_STATUS_ACCEPTING,
    BIDDABLE_STATUS_PUBLISHED,
    LOCK_KEY_PREFIX,
    NOTIFY_STATUS_ERROR,
    NOTIFY_STATUS_SUCCESS,
    SEPARATOR_LINE_THIN,
)
from bidbot.core.exceptions import PortalRequestError
from bidbot.core.logging import get_logger
from bidbot.core.retry import transport_retry
from bidbot.dedup.store import DedupStore
from bidbot.monitor.submission import HttpSubmissionGateway, SubmissionGateway
from bidbot.portal.client import PortalResponse
from bidbot.portal.favorites_parser import parse_favorites
from bidbot.portal.models import FavoriteAnnouncement
from bidbot.settings import Settings

logger = get_logger("monitor.service")

FAVORITES_ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


class PortalRequester(Protocol):
    async def request(
        self,
        url: str,
        method: str = "GET",
        additional_headers: Optional[dict] = None,
        body=None,
    ) -> PortalResponse: ...


class NotificationSink(Protocol):
    async def notify(
        self,
        announce_id: str,
        status: str,
        start_time: datetime,
        end_time: datetime,
        duration_ms: int,
        error_message: Optional[str] = None,
    ) -> bool: ...


class AnnounceState(str, Enum):
    """Per-cycle classification of a favorite announcement."""

    OTHER = "other"
    LOCKED = "locked"
    ELIGIBLE = "eligible"


def is_biddable(status: str) -> bool:
    """Check whether a favorites status means bids are being accepted."""
    status = status.strip()
    if status == BIDDABLE_STATUS:
        return True
    return BIDDABLE_STATUS_PUBLISHED in status and BIDDABLE_STATUS_ACCEPTING in status


def classify(favorite: FavoriteAnnouncement, lock_exists: bool) -> AnnounceState:
    if not is_biddable(favorite.status):
        return AnnounceState.OTHER
    return AnnounceState.LOCKED if lock_exists else AnnounceState.ELIGIBLE


def lock_key(announce_id: str) -> str:
    return f"{LOCK_KEY_PREFIX}{announce_id}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MonitorCycleStats:
    """Statistics for one monitor cycle."""

    seen: int = 0
    submitted: int = 0
    failed: int = 0
    locked: int = 0
    released: int = 0
    errors: int = 0

    def log_summary(self) -> None:
        logger.info(SEPARATOR_LINE_THIN)
        logger.info("  Favorites seen:   %d", self.seen)
        logger.info("  Submitted:        %d", self.submitted)
        logger.info("  Failed:           %d", self.failed)
        logger.info("  Already locked:   %d", self.locked)
        logger.info("  Locks released:   %d", self.released)
        logger.info("  Errors:           %d", self.errors)
        logger.info(SEPARATOR_LINE_THIN)


class AnnounceMonitor:
    """Monitors the favorites list and submits biddable announcements."""

    def __init__(
        self,
        settings: Settings,
        portal: PortalRequester,
        store: DedupStore,
        gateway: SubmissionGateway,
        notifier: NotificationSink,
        fallback_gateway: Optional[SubmissionGateway] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._settings = settings
        self._portal = portal
        self._store = store
        self._gateway = gateway
        self._notifier = notifier
        self._fallback_gateway = fallback_gateway or HttpSubmissionGateway(
            settings.fallback_submission_url,
            timeout=settings.submission_fallback_timeout_seconds,
        )
        self._clock = clock

    @transport_retry
    async def _fetch_favorites_page(self) -> PortalResponse:
        return await self._portal.request(
            self._settings.favorites_path,
            method="GET",
            additional_headers={"Accept": FAVORITES_ACCEPT_HEADER},
        )

    async def get_favorites(self) -> List[FavoriteAnnouncement]:
        """Fetch and parse the favorites list.

        Raises:
            PortalRequestError: If the favorites page could not be fetched
            httpx.TransportError: If the portal stays unreachable after retries
        """
        task_id = "getFavorites"
        logger.info("[%s] Fetching favorites...", task_id)

        response = await self._fetch_favorites_page()
        if not response.success or not isinstance(response.data, str) or not response.data:
            raise PortalRequestError(
                "Could not fetch favorites page HTML",
                url=self._settings.favorites_path,
                status_code=response.status_code,
            )

        favorites = parse_favorites(response.data)
        logger.info("[%s] Favorites received: %d", task_id, len(favorites))
        return favorites

    async def monitor_favorites_status(self) -> MonitorCycleStats:
        """Run one monitoring cycle over the favorites list.

        Failures for a single announcement are logged and reported; they
        never stop the rest of the cycle. A failure to fetch the list
        itself propagates to the caller.

        Returns:
            MonitorCycleStats for this cycle
        """
        task_id = "monitorFavoritesStatus"
        stats = MonitorCycleStats()

        try:
            favorites = await self.get_favorites()
        except Exception as e:
            logger.error("[%s] Favorites monitoring failed: %s", task_id, e)
            raise

        stats.seen = len(favorites)
        if not favorites:
            logger.info("[%s] No favorites to monitor", task_id)
            return stats

        for favorite in favorites:
            try:
                await self._handle_favorite(favorite, stats)
            except Exception as e:
                stats.errors += 1
                logger.error(
                    "[%s] Failed to handle announcement %s: %s",
                    task_id, favorite.announce_id, e,
                )

        stats.log_summary()
        return stats

    async def _handle_favorite(
        self, favorite: FavoriteAnnouncement, stats: MonitorCycleStats
    ) -> None:
        announce_id = favorite.announce_id
        key = lock_key(announce_id)
        lock_exists = await self._store.exists(key)
        state = classify(favorite, lock_exists)

        if state is AnnounceState.ELIGIBLE:
            logger.info(
                "Announcement %s (%s) is accepting bids", announce_id, favorite.number
            )
            if await self._submit_with_lock(announce_id, key):
                stats.submitted += 1
            else:
                stats.failed += 1
        elif state is AnnounceState.LOCKED:
            started_at = await self._store.get(key)
            logger.debug(
                "Announcement %s already in progress (locked at %s), skipping",
                announce_id, started_at,
            )
            stats.locked += 1
        elif lock_exists:
            await self._store.delete(key)
            stats.released += 1
            logger.info(
                "Announcement %s status changed to \"%s\", lock released",
                announce_id, favorite.status,
            )

    async def _submit_with_lock(self, announce_id: str, key: str) -> bool:
        """Lock, submit and report one announcement. Returns success."""
        start_time = self._clock()
        started = monotonic()

        try:
            await self._store.set(key, start_time.isoformat(), self._settings.lock_ttl_seconds)
            logger.info("Announcement %s locked against repeated processing", announce_id)

            await self.call_start_api(announce_id)
        except Exception as e:
            end_time = self._clock()
            duration_ms = int((monotonic() - started) * 1000)
            logger.error("Submission failed for announcement %s: %s", announce_id, e)
            await self._notifier.notify(
                announce_id, NOTIFY_STATUS_ERROR, start_time, end_time, duration_ms, str(e)
            )
            return False

        end_time = self._clock()
        duration_ms = int((monotonic() - started) * 1000)
        logger.info("Announcement %s submitted in %d ms", announce_id, duration_ms)
        await self._notifier.notify(
            announce_id, NOTIFY_STATUS_SUCCESS, start_time, end_time, duration_ms
        )
        return True

    async def call_start_api(self, announce_id: str) -> None:
        """Start the application, falling back to the HTTP endpoint.

        Raises:
            Exception: The primary gateway's error if the fallback fails too,
                or is skipped because it targets the same endpoint
        """
        task_id = f"callStartApi-{announce_id}"
        logger.info("[%s] Starting application...", task_id)

        try:
            await self._gateway.submit(announce_id)
            logger.info("[%s] Application started", task_id)
        except Exception as error:
            logger.error("[%s] Application start failed: %s", task_id, error)
            if self._fallback_targets_primary():
                # The first request may still be running on the service side
                logger.warning(
                    "[%s] Fallback endpoint is the primary endpoint, not resubmitting", task_id
                )
                raise
            logger.info("[%s] Retrying through HTTP API...", task_id)
            try:
                await self._fallback_gateway.submit(announce_id)
            except Exception as fallback_error:
                logger.error("[%s] HTTP fallback failed: %s", task_id, fallback_error)
                raise error
            logger.info("[%s] HTTP fallback succeeded", task_id)

        if self._settings.remove_submitted_favorites:
            await self.delete_from_favorites(announce_id)

    def _fallback_targets_primary(self) -> bool:
        primary_url = getattr(self._gateway, "url", None)
        return primary_url is not None and primary_url == getattr(
            self._fallback_gateway, "url", None
        )

    async def delete_from_favorites(self, announce_id: str) -> bool:
        """Remove an announcement from the portal favorites. Never raises."""
        task_id = f"deleteFromFavorites-{announce_id}"
        url = f"{self._settings.favorites_delete_path}?action=delete&id={announce_id}"
        send_time = self._clock().isoformat()
        started = monotonic()

        logger.info("[%s] Removing from favorites at %s: %s", task_id, send_time, url)

        try:
            response = await self._portal.request(url, method="GET")
        except Exception as e:
            duration_ms = int((monotonic() - started) * 1000)
            logger.error(
                "[%s] Favorites removal failed after %d ms: %s", task_id, duration_ms, e
            )
            return False

        duration_ms = int((monotonic() - started) * 1000)
        if not response.success:
            logger.warning(
                "[%s] Favorites removal unsuccessful (status %d) after %d ms",
                task_id, response.status_code, duration_ms,
            )
            return False

        logger.info(
            "[%s] Announcement %s removed from favorites in %d ms",
            task_id, announce_id, duration_ms,
        )
        return True

    async def remove_lock(self, announce_id: str) -> None:
        """Drop the processing lock of one announcement."""
        await self._store.delete(lock_key(announce_id))
        logger.info("Processing lock removed for announcement %s", announce_id)

    async def reset_processed_announcements(self) -> int:
        """Drop every processing lock. Returns the number removed."""
        removed = await self._store.delete_prefix(LOCK_KEY_PREFIX)
        logger.info("Removed %d processing locks", removed)
        return removed
