"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from scanrelay.db.database import get_db
from scanrelay.core.exceptions import AppException
from scanrelay.services.scan_service import get_scan_service


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, db: Session):
        self._db = db

    def check_database(self) -> str:
        """Check database connectivity."""
        try:
            self._db.execute(text("SELECT 1"))
            return "healthy"
        except SQLAlchemyError as e:
            logger.warning(f"Database health check failed: {e}")
            return "unhealthy"

    def check_scanner(self) -> dict:
        """Check scan service status."""
        try:
            service = get_scan_service()
        except AppException:
            return {"status": "not_started", "scans": 0, "in_flight": 0}

        snapshot = service.snapshot()
        return {
            "status": "healthy",
            "scans": snapshot.total_count,
            "in_flight": snapshot.in_flight_count,
        }

    def get_health(self) -> dict:
        """Get full health status."""
        db_status = self.check_database()
        scanner_info = self.check_scanner()

        overall = "healthy" if db_status == "healthy" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "database": db_status,
                "scanner": scanner_info["status"]
            },
            "details": {
                "scans_accepted": scanner_info["scans"],
                "deliveries_in_flight": scanner_info["in_flight"]
            }
        }


@router.get("")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns system status including API, database, and scan pipeline.
    """
    controller = HealthController(db)
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
