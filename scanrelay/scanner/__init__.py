"""
==============================================================================
Scanner Package - Scan Deduplication and Delivery
==============================================================================

Turns decoded barcodes into delivered scan events.

Classes:
--------
- FrameDecoder / CameraSource: frames in, decoded strings out
- ScanDeduplicator: drops repeats inside the cooldown window
- ScanEventStore: newest-first history with delivery status
- DeliveryDispatcher: one HTTP delivery per event

==============================================================================
"""

from .core import CameraSource, FrameDecoder
from .dedup import DedupGuard, ScanDeduplicator
from .dispatcher import DeliveryDispatcher
from .models import (
    DeliveryPayload,
    DeliveryResult,
    DeliveryStatus,
    ScanEvent,
    ScanType,
)
from .store import ScanEventStore, ScanSnapshot

__all__ = [
    "CameraSource",
    "FrameDecoder",
    "DedupGuard",
    "ScanDeduplicator",
    "DeliveryDispatcher",
    "DeliveryPayload",
    "DeliveryResult",
    "DeliveryStatus",
    "ScanEvent",
    "ScanType",
    "ScanEventStore",
    "ScanSnapshot",
]
