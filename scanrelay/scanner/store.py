"""
==============================================================================
Scan Event Store Module
==============================================================================

Authoritative, newest-first history of scan events.

This module implements:
- ScanEventStore: ordered event log with delivery status updates
- ScanSnapshot: immutable view handed to readers

Ownership:
----------
The store owns every ScanEvent. Callers receive copies, so rendering a
snapshot never races with a status update. Mutations are serialized by a
lock; all of them are O(1) apart from clear().

==============================================================================
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, replace
from typing import Deque, Dict, Iterator, List, Optional, Tuple

from scanrelay.scanner.models import DeliveryStatus, ScanEvent, ScanType


# Module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanSnapshot:
    """Point-in-time view of the store for rendering."""

    events: Tuple[ScanEvent, ...]
    total_count: int
    in_flight_count: int

    @property
    def is_sending(self) -> bool:
        return self.in_flight_count > 0


class ScanEventStore:
    """
    Ordered collection of scan events, newest first.

    Attributes:
        _events: Events in newest-first order
        _index: Event lookup by id
        _total_count: Accepted scans since the last clear

    Example:
        >>> store = ScanEventStore()
        >>> first = store.insert("A123", 0.0, "normal")
        >>> second = store.insert("B456", 1.0, "normal")
        >>> [e.code for e in store]
        ['B456', 'A123']
    """

    def __init__(self) -> None:
        self._events: Deque[ScanEvent] = deque()
        self._index: Dict[str, ScanEvent] = {}
        self._total_count = 0
        self._lock = threading.Lock()

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def insert(
        self,
        code: str,
        captured_at: float,
        scan_type: str = ScanType.NORMAL.value
    ) -> ScanEvent:
        """
        Create a Pending event and put it at the front.

        Only decodes accepted by the deduplicator belong here.

        Args:
            code: Decoded string
            captured_at: Decode time in seconds since epoch
            scan_type: Scan category

        Returns:
            Copy of the created event
        """
        event = ScanEvent(code=code, captured_at=captured_at, scan_type=scan_type)

        with self._lock:
            self._events.appendleft(event)
            self._index[event.id] = event
            self._total_count += 1

        logger.info(f"Scan recorded: {event.code} ({event.scan_type}) id={event.id}")
        return replace(event)

    def update_status(
        self,
        event_id: str,
        status: DeliveryStatus,
        reason: Optional[str] = None
    ) -> bool:
        """
        Move one event to a new status.

        Unknown ids (including ids removed by clear()) and events already in
        a terminal status are left alone.

        Args:
            event_id: Target event id
            status: New delivery status
            reason: Failure reason, kept only for FAILED

        Returns:
            True if the event was updated
        """
        with self._lock:
            event = self._index.get(event_id)

            if event is None:
                logger.debug(f"Status update for unknown scan {event_id} ignored")
                return False

            if event.status.is_terminal:
                logger.warning(
                    f"Scan {event_id} already {event.status}, "
                    f"ignoring transition to {status}"
                )
                return False

            event.status = status
            event.failure_reason = reason if status == DeliveryStatus.FAILED else None

        logger.debug(f"Scan {event_id} -> {status}")
        return True

    def clear(self) -> int:
        """
        Remove every event and reset the accepted-scan counter.

        Returns:
            Number of events removed
        """
        with self._lock:
            removed = len(self._events)
            self._events.clear()
            self._index.clear()
            self._total_count = 0

        logger.info(f"Scan history cleared ({removed} events)")
        return removed

    # =========================================================================
    # READS
    # =========================================================================

    def get(self, event_id: str) -> Optional[ScanEvent]:
        """Get a copy of one event, or None."""
        with self._lock:
            event = self._index.get(event_id)
            return replace(event) if event else None

    def list(self) -> List[ScanEvent]:
        """Copies of all events, newest first."""
        with self._lock:
            return [replace(event) for event in self._events]

    def snapshot(self) -> ScanSnapshot:
        """Events plus aggregate counters, taken under one lock."""
        with self._lock:
            events = tuple(replace(event) for event in self._events)
            in_flight = sum(
                1 for event in self._events
                if event.status == DeliveryStatus.IN_FLIGHT
            )
            return ScanSnapshot(
                events=events,
                total_count=self._total_count,
                in_flight_count=in_flight
            )

    @property
    def total_count(self) -> int:
        """Accepted scans since the last clear."""
        return self._total_count

    @property
    def in_flight_count(self) -> int:
        return self.snapshot().in_flight_count

    @property
    def is_sending(self) -> bool:
        """True while at least one delivery is outstanding."""
        return self.in_flight_count > 0

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[ScanEvent]:
        return iter(self.list())

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._index
