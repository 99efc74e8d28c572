"""Dependency injection container."""

from dataclasses import dataclass, field
from typing import Optional

from bidbot.core.logging import get_logger
from bidbot.dedup.store import DedupStore, SqlDedupStore, create_dedup_store
from bidbot.monitor.scheduler import MonitorScheduler
from bidbot.monitor.service import AnnounceMonitor
from bidbot.monitor.submission import HttpSubmissionGateway, SubmissionGateway
from bidbot.notifications.telegram import TelegramNotifier
from bidbot.portal.client import PortalClient
from bidbot.processing.pipeline import FileProcessingPipeline
from bidbot.processing.service import FileProcessorService
from bidbot.settings import Settings
from bidbot.signing.ncanode import NcanodeSigner

logger = get_logger("core.container")


@dataclass
class ApplicationContainer:
    """Container for application dependencies.

    Everything is built lazily from one Settings instance.
    """

    settings: Settings
    _portal: Optional[PortalClient] = field(default=None, repr=False)
    _store: Optional[DedupStore] = field(default=None, repr=False)
    _signer: Optional[NcanodeSigner] = field(default=None, repr=False)
    _notifier: Optional[TelegramNotifier] = field(default=None, repr=False)
    _gateway: Optional[SubmissionGateway] = field(default=None, repr=False)
    _monitor: Optional[AnnounceMonitor] = field(default=None, repr=False)
    _pipeline: Optional[FileProcessingPipeline] = field(default=None, repr=False)
    _file_processor: Optional[FileProcessorService] = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        settings: Settings,
        gateway: Optional[SubmissionGateway] = None,
    ) -> "ApplicationContainer":
        """Create a new application container.

        Args:
            settings: Application settings
            gateway: Optional in-process submission collaborator; defaults
                to the application service HTTP API

        Returns:
            Configured ApplicationContainer instance
        """
        container = cls(settings=settings, _gateway=gateway)
        logger.debug("Created ApplicationContainer")
        return container

    @property
    def portal(self) -> PortalClient:
        """Get portal client (lazy initialization)."""
        if self._portal is None:
            self._portal = PortalClient(self.settings)
        return self._portal

    @property
    def store(self) -> DedupStore:
        """Get dedup store (lazy initialization)."""
        if self._store is None:
            self._store = create_dedup_store(self.settings)
        return self._store

    @property
    def signer(self) -> NcanodeSigner:
        """Get NCANode signer (lazy initialization)."""
        if self._signer is None:
            self._signer = NcanodeSigner(self.settings, cache=self.store)
        return self._signer

    @property
    def notifier(self) -> TelegramNotifier:
        """Get Telegram notifier (lazy initialization)."""
        if self._notifier is None:
            self._notifier = TelegramNotifier(self.settings)
        return self._notifier

    @property
    def gateway(self) -> SubmissionGateway:
        """Get submission gateway (lazy initialization)."""
        if self._gateway is None:
            # Same endpoint as the fallback, so it gets the long timeout
            self._gateway = HttpSubmissionGateway(
                self.settings.fallback_submission_url,
                timeout=self.settings.submission_fallback_timeout_seconds,
            )
        return self._gateway

    @property
    def monitor(self) -> AnnounceMonitor:
        """Get favorites monitor (lazy initialization)."""
        if self._monitor is None:
            self._monitor = AnnounceMonitor(
                settings=self.settings,
                portal=self.portal,
                store=self.store,
                gateway=self.gateway,
                notifier=self.notifier,
            )
        return self._monitor

    def scheduler(self, interval_seconds: Optional[float] = None) -> MonitorScheduler:
        """Build a scheduler for the monitor, interval defaults to settings."""
        return MonitorScheduler(
            self.monitor,
            interval_seconds=interval_seconds or self.settings.monitor_interval_seconds,
            enabled=self.settings.announce_monitor_enabled,
        )

    @property
    def pipeline(self) -> FileProcessingPipeline:
        """Get file processing pipeline (lazy initialization)."""
        if self._pipeline is None:
            self._pipeline = FileProcessingPipeline(self.settings, self.signer)
        return self._pipeline

    @property
    def file_processor(self) -> FileProcessorService:
        """Get file processor service (lazy initialization)."""
        if self._file_processor is None:
            self._file_processor = FileProcessorService(
                self.pipeline, max_batch_tasks=self.settings.max_parallel_tasks
            )
        return self._file_processor

    async def aclose(self) -> None:
        """Clean up container resources."""
        if self._portal is not None:
            await self._portal.aclose()
            self._portal = None
        if self._signer is not None:
            await self._signer.aclose()
            self._signer = None
        if self._pipeline is not None:
            await self._pipeline.aclose()
            self._pipeline = None
        if isinstance(self._store, SqlDedupStore):
            self._store.close()
        self._store = None
        logger.debug("ApplicationContainer closed")
