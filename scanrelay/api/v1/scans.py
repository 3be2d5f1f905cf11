"""
==============================================================================
Scan Endpoints
==============================================================================

Submit decoded strings and read the delivery history.

==============================================================================
"""

from fastapi import APIRouter, Depends, Query

from scanrelay.schemas.scan import (
    ScanSubmit,
    ScanEventDetail,
    ScanSubmitResponse,
    ScanResponse,
    ScanListResponse,
    ScanClearResponse,
)
from scanrelay.services.scan_service import ScanService, get_scan_service


router = APIRouter(prefix="/scans", tags=["Scans"])


class ScanController:
    """Controller for scan operations."""

    def __init__(self, service: ScanService):
        self._service = service

    async def submit(self, data: ScanSubmit, wait: bool) -> ScanSubmitResponse:
        """Submit one decode."""
        scan_type = data.scan_type.value if data.scan_type else None
        event = await self._service.submit(data.code, scan_type, wait=wait)

        if event is None:
            return ScanSubmitResponse(accepted=False)

        return ScanSubmitResponse(
            accepted=True,
            scan=ScanEventDetail.from_event(event)
        )

    def list_scans(self, limit: int) -> ScanListResponse:
        """Get history, newest first."""
        snapshot = self._service.snapshot()

        return ScanListResponse(
            total_count=snapshot.total_count,
            is_sending=snapshot.is_sending,
            scans=[ScanEventDetail.from_event(e) for e in snapshot.events[:limit]]
        )

    def get_scan(self, scan_id: str) -> ScanResponse:
        """Get one scan."""
        event = self._service.get(scan_id)
        return ScanResponse(scan=ScanEventDetail.from_event(event))

    def clear(self) -> ScanClearResponse:
        """Clear history."""
        removed = self._service.clear()
        return ScanClearResponse(removed=removed)


@router.post("", response_model=ScanSubmitResponse)
async def submit_scan(
    data: ScanSubmit,
    wait: bool = Query(False, description="Return after the delivery finishes"),
    service: ScanService = Depends(get_scan_service)
):
    """
    Submit a decoded barcode or QR string.

    A repeat of the last accepted code within the cooldown is answered with
    accepted=false and nothing is sent.
    """
    controller = ScanController(service)
    return await controller.submit(data, wait)


@router.get("", response_model=ScanListResponse)
async def list_scans(
    limit: int = Query(500, ge=1, le=5000),
    service: ScanService = Depends(get_scan_service)
):
    """List scans with their delivery status, newest first."""
    controller = ScanController(service)
    return controller.list_scans(limit)


@router.get("/{scan_id}", response_model=ScanResponse)
async def get_scan(
    scan_id: str,
    service: ScanService = Depends(get_scan_service)
):
    """Get a single scan."""
    controller = ScanController(service)
    return controller.get_scan(scan_id)


@router.delete("", response_model=ScanClearResponse)
async def clear_scans(service: ScanService = Depends(get_scan_service)):
    """Clear the history and reset the scan counter."""
    controller = ScanController(service)
    return controller.clear()
