"""
==============================================================================
Scan Service Module
==============================================================================

Runs the scan pipeline for one device.

    decode ──▶ ScanDeduplicator ──▶ ScanEventStore.insert ──▶ dispatch task
                                                                   │
                     ScanEventStore.update_status ◀────────────────┘

This module implements:
- ScanService: accept decodes, schedule deliveries, clear history
- init_scan_service / get_scan_service: process-wide instance

Threading Model:
---------------
All calls happen on the event loop that serves the API. A delivery runs as
an asyncio task on the same loop, so its status update is applied on the
thread that owns the store. clear() does not cancel outstanding tasks;
their late status updates find no event and are ignored.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional, Set

from scanrelay.config import SCAN_TYPES, Settings, get_settings
from scanrelay.core import exceptions
from scanrelay.scanner.dedup import ScanDeduplicator
from scanrelay.scanner.dispatcher import DeliveryDispatcher
from scanrelay.scanner.models import ScanEvent, ScanType
from scanrelay.scanner.store import ScanEventStore, ScanSnapshot
from scanrelay.utils.validators import ScanCodeValidator


# Module logger
logger = logging.getLogger(__name__)


class ScanService:
    """
    Orchestrates deduplication, history and delivery.

    Attributes:
        _dispatcher: Delivers accepted scans
        _store: Scan history
        _dedup: Repeat filter
        _pending: Delivery tasks that have not finished

    Example:
        >>> service = ScanService(dispatcher)
        >>> event = await service.submit("8801234567890", wait=True)
        >>> service.store.get(event.id).status
        <DeliveryStatus.DELIVERED: 'delivered'>
    """

    def __init__(
        self,
        dispatcher: DeliveryDispatcher,
        store: Optional[ScanEventStore] = None,
        deduplicator: Optional[ScanDeduplicator] = None,
        default_scan_type: Callable[[], str] = lambda: ScanType.NORMAL.value,
        clock: Callable[[], float] = time.time
    ) -> None:
        """
        Initialize scan service.

        Args:
            dispatcher: Delivery dispatcher
            store: Event store (new empty store if None)
            deduplicator: Repeat filter (2 second cooldown if None)
            default_scan_type: Returns the scan type used when none is given
            clock: Returns the current time in seconds since epoch
        """
        self._dispatcher = dispatcher
        self._store = store or ScanEventStore()
        self._dedup = deduplicator or ScanDeduplicator()
        self._default_scan_type = default_scan_type
        self._clock = clock
        self._code_validator = ScanCodeValidator()
        self._pending: Set[asyncio.Task] = set()

    @property
    def store(self) -> ScanEventStore:
        return self._store

    @property
    def deduplicator(self) -> ScanDeduplicator:
        return self._dedup

    @property
    def pending_deliveries(self) -> int:
        return len(self._pending)

    # =========================================================================
    # SCAN INTAKE
    # =========================================================================

    def _resolve_scan_type(self, scan_type: Optional[str]) -> str:
        if scan_type is None:
            scan_type = self._default_scan_type()

        scan_type = str(scan_type).lower().strip()
        if scan_type not in SCAN_TYPES:
            raise exceptions.invalid_scan_type(scan_type, SCAN_TYPES)

        return scan_type

    def accept(
        self,
        code: str,
        scan_type: Optional[str] = None,
        observed_at: Optional[float] = None
    ) -> Optional[ScanEvent]:
        """
        Deduplicate a decode and record it, without delivering.

        Args:
            code: Decoded string
            scan_type: Scan category (device default if None)
            observed_at: Decode time, now if None

        Returns:
            The new Pending event, or None for a suppressed repeat

        Raises:
            AppException: For a blank code or unknown scan type
        """
        is_valid, error = self._code_validator.validate(code)
        if not is_valid:
            raise exceptions.invalid_scan_code(error)

        scan_type = self._resolve_scan_type(scan_type)

        if observed_at is None:
            observed_at = self._clock()

        if not self._dedup.should_accept(code, observed_at):
            return None

        return self._store.insert(code, observed_at, scan_type)

    async def submit(
        self,
        code: str,
        scan_type: Optional[str] = None,
        observed_at: Optional[float] = None,
        wait: bool = False
    ) -> Optional[ScanEvent]:
        """
        Accept a decode and start its delivery.

        Args:
            code: Decoded string
            scan_type: Scan category (device default if None)
            observed_at: Decode time, now if None
            wait: Await the delivery before returning

        Returns:
            Latest copy of the event, or None for a suppressed repeat
        """
        if observed_at is None:
            observed_at = self._clock()

        # The default may come from the database; keep it off the loop
        if scan_type is None:
            scan_type = await asyncio.to_thread(self._default_scan_type)

        event = self.accept(code, scan_type, observed_at)
        if event is None:
            return None

        task = self._schedule(event)

        if wait:
            await task
            return self._store.get(event.id) or event

        return event

    def _schedule(self, event: ScanEvent) -> asyncio.Task:
        task = asyncio.create_task(
            self._dispatcher.dispatch(event, self._store),
            name=f"deliver-{event.id}"
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    # =========================================================================
    # HISTORY
    # =========================================================================

    def get(self, event_id: str) -> ScanEvent:
        """
        Get one event.

        Raises:
            AppException: If the id is unknown
        """
        event = self._store.get(event_id)
        if event is None:
            raise exceptions.scan_not_found(event_id)
        return event

    def snapshot(self) -> ScanSnapshot:
        """History plus counters for rendering."""
        return self._store.snapshot()

    def clear(self) -> int:
        """
        Clear history and forget the last accepted code.

        Returns:
            Number of events removed
        """
        removed = self._store.clear()
        self._dedup.reset()
        return removed

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def wait_for_deliveries(self, timeout: Optional[float] = None) -> None:
        """Wait until every scheduled delivery has finished."""
        if not self._pending:
            return

        done, pending = await asyncio.wait(set(self._pending), timeout=timeout)

        if pending:
            logger.warning(f"{len(pending)} deliveries still outstanding")

    async def aclose(self) -> None:
        """Let outstanding deliveries finish, then close the HTTP client."""
        await self.wait_for_deliveries(timeout=self._dispatcher.timeout_seconds)
        await self._dispatcher.aclose()
        logger.info("Scan service stopped")


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_scan_service_instance: Optional[ScanService] = None


def init_scan_service(settings: Optional[Settings] = None) -> ScanService:
    """
    Create the process-wide scan service.

    Delivery configuration is read from the database on every attempt.

    Args:
        settings: Process settings (uses global settings if None)

    Returns:
        The new ScanService
    """
    from scanrelay.services.settings_service import DatabaseConfigurationProvider

    global _scan_service_instance

    settings = settings or get_settings()
    config = DatabaseConfigurationProvider(settings=settings)

    dispatcher = DeliveryDispatcher(
        config,
        timeout_seconds=settings.delivery_timeout_seconds
    )

    _scan_service_instance = ScanService(
        dispatcher,
        deduplicator=ScanDeduplicator(settings.dedup_cooldown_seconds),
        default_scan_type=config.get_default_scan_type,
    )

    logger.info(
        f"✅ Scan service ready (cooldown {settings.dedup_cooldown_seconds:g}s, "
        f"timeout {settings.delivery_timeout_seconds:g}s)"
    )
    return _scan_service_instance


def get_scan_service() -> ScanService:
    """
    FastAPI dependency returning the process-wide scan service.

    Raises:
        AppException: If the service has not been started
    """
    if _scan_service_instance is None:
        raise exceptions.service_unavailable("Scan service")
    return _scan_service_instance


def reset_scan_service() -> None:
    """Drop the process-wide instance (application shutdown)."""
    global _scan_service_instance
    _scan_service_instance = None
