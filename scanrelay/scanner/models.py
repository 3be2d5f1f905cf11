"""
==============================================================================
Scan Pipeline Models Module
==============================================================================

Data types shared by the deduplicator, event store and dispatcher.

This module defines:
- DeliveryStatus: Enum for the delivery lifecycle of a scan event
- ScanType: Known scan categories
- ScanEvent: One deduplicated scan tracked through delivery
- DeliveryPayload: Wire body sent to the remote endpoint
- DeliveryResult: Outcome of one delivery attempt

State Machine:
-------------

┌─────────┐ dispatch() ┌───────────┐   HTTP 200    ┌───────────┐
│ PENDING │ ─────────▶ │ IN_FLIGHT │ ────────────▶ │ DELIVERED │
└─────────┘            └───────────┘               └───────────┘
     │                       │
     │ no endpoint           │ transport error / non-200
     ▼                       ▼
┌──────────────────────────────────┐
│              FAILED              │
└──────────────────────────────────┘

DELIVERED and FAILED are terminal; a failed scan is retried by scanning
again, which creates a new event.

==============================================================================
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class DeliveryStatus(str, enum.Enum):
    """
    Delivery status of a scan event.

    The enum inherits from str to enable JSON serialization.
    """

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    DELIVERED = "delivered"
    FAILED = "failed"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is allowed."""
        return self in (DeliveryStatus.DELIVERED, DeliveryStatus.FAILED)


class ScanType(str, enum.Enum):
    """Scan category chosen by the UI action that started scanning."""

    NORMAL = "normal"
    EMERGENCY = "emergency"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# SCAN EVENT
# =============================================================================

@dataclass
class ScanEvent:
    """
    A deduplicated scan tracked through its delivery lifecycle.

    id, code, captured_at and scan_type never change after creation;
    only status and failure_reason are updated by the event store.

    Attributes:
        code: Decoded barcode or QR payload
        captured_at: Decode time in seconds since the epoch
        scan_type: Scan category (e.g. "normal", "emergency")
        status: Current delivery status
        failure_reason: Why the delivery failed, when it did
        id: Opaque unique identifier
    """

    code: str
    captured_at: float
    scan_type: str = ScanType.NORMAL.value
    status: DeliveryStatus = DeliveryStatus.PENDING
    failure_reason: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def captured_at_datetime(self) -> datetime:
        """Capture time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.captured_at, tz=timezone.utc)


# =============================================================================
# DELIVERY TYPES
# =============================================================================

class DeliveryPayload(BaseModel):
    """
    JSON body posted to the remote endpoint.

    Built fresh for every delivery attempt and never stored.

    Wire format:
        {"code": "...", "timestamp": 1718000000.25,
         "device_info": "...", "type": "normal"}
    """

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., min_length=1)
    timestamp: float = Field(..., description="Seconds since epoch")
    device_info: str = Field(default="")
    scan_type: Optional[str] = Field(default=None, serialization_alias="type")

    @classmethod
    def from_event(cls, event: ScanEvent, device_info: str) -> "DeliveryPayload":
        """Create payload from a scan event and the current device info."""
        return cls(
            code=event.code,
            timestamp=event.captured_at,
            device_info=device_info,
            scan_type=event.scan_type
        )

    def to_json(self) -> bytes:
        """Encode the payload using the wire field names."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a single delivery attempt."""

    status: DeliveryStatus
    reason: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED

    @classmethod
    def delivered(cls, status_code: int = 200) -> "DeliveryResult":
        return cls(DeliveryStatus.DELIVERED, None, status_code)

    @classmethod
    def failed(cls, reason: str, status_code: Optional[int] = None) -> "DeliveryResult":
        return cls(DeliveryStatus.FAILED, reason, status_code)
