"""
==============================================================================
Scan Schemas Module
==============================================================================

Request and response schemas for scan submission and history.

==============================================================================
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from scanrelay.scanner.models import DeliveryStatus, ScanEvent, ScanType


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class ScanSubmit(BaseModel):
    """A decoded string reported by a client."""
    code: str = Field(..., min_length=1, max_length=4096)
    scan_type: Optional[ScanType] = Field(default=None)

    @field_validator("code")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Code cannot be blank")
        return v


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ScanEventDetail(BaseModel):
    """One scan event as shown in the history list."""
    id: str
    code: str
    scan_type: str
    status: DeliveryStatus
    failure_reason: Optional[str] = None
    captured_at: float = Field(description="Seconds since epoch")
    captured_at_iso: datetime

    @classmethod
    def from_event(cls, event: ScanEvent) -> "ScanEventDetail":
        """Create response from a ScanEvent."""
        return cls(
            id=event.id,
            code=event.code,
            scan_type=event.scan_type,
            status=event.status,
            failure_reason=event.failure_reason,
            captured_at=event.captured_at,
            captured_at_iso=event.captured_at_datetime,
        )


class ScanSubmitResponse(BaseModel):
    """Result of submitting a decode."""
    success: bool = Field(default=True)
    accepted: bool
    scan: Optional[ScanEventDetail] = None


class ScanResponse(BaseModel):
    """Single scan response."""
    success: bool = Field(default=True)
    scan: ScanEventDetail


class ScanListResponse(BaseModel):
    """Scan history, newest first."""
    success: bool = Field(default=True)
    total_count: int = Field(ge=0, description="Accepted scans since last clear")
    is_sending: bool
    scans: List[ScanEventDetail]


class ScanClearResponse(BaseModel):
    """Result of clearing the history."""
    success: bool = Field(default=True)
    removed: int = Field(ge=0)
